"""Transaction-related Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from fraud_detection.domain.entities import TransactionStatus, TransactionType


class TransactionCreateSchema(BaseModel):
    """
    Schema for POST /v1/transactions request body.

    Only types and enum values are checked here. Amount, length and
    blank-text rules come from the domain rule table so API and storage
    reject the same inputs.
    """

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "examples": [
                {
                    "user_id": 1,
                    "account_id": 10,
                    "amount": "250.00",
                    "type": "PAYMENT",
                    "description": "Grocery",
                    "transaction_date": "2025-09-17T12:00:00Z",
                    "merchant_name": "Fresh Market",
                    "merchant_category": "5411",
                }
            ]
        },
    )

    user_id: int = Field(..., description="Owning user")
    account_id: int = Field(..., description="Account the money moved on")
    amount: Decimal = Field(
        ...,
        description="Amount with at most 10 integer digits and 2 decimal places",
        examples=["250.00"],
    )
    type: TransactionType = Field(..., description="Kind of movement")
    description: str = Field(..., description="Non-blank, at most 500 characters")
    transaction_date: datetime = Field(..., description="When the movement happened")
    reference_number: Optional[str] = None
    merchant_name: Optional[str] = None
    merchant_category: Optional[str] = None
    location: Optional[str] = None
    ip_address: Optional[str] = None
    device_id: Optional[str] = None


class StatusUpdateSchema(BaseModel):
    """Schema for PATCH /v1/transactions/{id}/status request body."""

    model_config = ConfigDict(extra="forbid")

    status: TransactionStatus = Field(..., examples=["COMPLETED"])


class FraudFlagSchema(BaseModel):
    """Schema for POST /v1/transactions/{id}/fraud-flag request body."""

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "examples": [{"score": "0.92", "reason": "unusual location"}]
        },
    )

    score: Decimal = Field(
        ...,
        description="Fraud confidence from the external scoring process",
    )
    reason: str = Field(..., description="Non-blank, at most 1000 characters")


class TransactionResponseSchema(BaseModel):
    """Schema for a single transaction in responses."""

    id: int
    user_id: int
    account_id: int
    amount: Decimal
    type: TransactionType
    status: TransactionStatus
    description: str
    reference_number: Optional[str] = None
    merchant_name: Optional[str] = None
    merchant_category: Optional[str] = None
    location: Optional[str] = None
    ip_address: Optional[str] = None
    device_id: Optional[str] = None
    transaction_date: datetime
    fraud_score: Optional[Decimal] = None
    is_flagged: bool
    fraud_reason: Optional[str] = None
    high_risk: bool = Field(..., description="Fraud score at or above the high-risk threshold")
    completed: bool
    pending: bool = Field(..., description="Status is PENDING or PROCESSING")
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TransactionListResponseSchema(BaseModel):
    """Schema for paged transaction listings."""

    transactions: list[TransactionResponseSchema]
    count: int
    limit: int
    offset: int

    model_config = ConfigDict(from_attributes=True)
