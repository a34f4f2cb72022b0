"""Data transfer objects for transaction operations."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fraud_detection.domain.entities import (
    HIGH_RISK_THRESHOLD,
    Transaction,
    TransactionStatus,
    TransactionType,
)


@dataclass(frozen=True)
class CreateTransactionRequest:
    """Input data for recording a new transaction."""

    user_id: int
    account_id: int
    amount: Decimal
    type: TransactionType
    description: str
    transaction_date: datetime
    reference_number: Optional[str] = None
    merchant_name: Optional[str] = None
    merchant_category: Optional[str] = None
    location: Optional[str] = None
    ip_address: Optional[str] = None
    device_id: Optional[str] = None

    def to_entity(self) -> Transaction:
        return Transaction(
            user_id=self.user_id,
            account_id=self.account_id,
            amount=self.amount,
            type=self.type,
            description=self.description,
            transaction_date=self.transaction_date,
            reference_number=self.reference_number,
            merchant_name=self.merchant_name,
            merchant_category=self.merchant_category,
            location=self.location,
            ip_address=self.ip_address,
            device_id=self.device_id,
        )


@dataclass(frozen=True)
class TransactionFilter:
    """Selection criteria for listing transactions. Exactly one must be set."""

    user_id: Optional[int] = None
    account_id: Optional[int] = None
    status: Optional[TransactionStatus] = None
    type: Optional[TransactionType] = None

    def active(self) -> List[str]:
        return [
            name
            for name in ("user_id", "account_id", "status", "type")
            if getattr(self, name) is not None
        ]


@dataclass(frozen=True)
class TransactionResponse:
    """Response data for a single transaction."""

    id: int
    user_id: int
    account_id: int
    amount: Decimal
    type: str
    status: str
    description: str
    reference_number: Optional[str]
    merchant_name: Optional[str]
    merchant_category: Optional[str]
    location: Optional[str]
    ip_address: Optional[str]
    device_id: Optional[str]
    transaction_date: datetime
    fraud_score: Optional[Decimal]
    is_flagged: bool
    fraud_reason: Optional[str]
    high_risk: bool
    completed: bool
    pending: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(
        cls,
        transaction: Transaction,
        high_risk_threshold: Decimal = HIGH_RISK_THRESHOLD,
    ) -> "TransactionResponse":
        return cls(
            id=transaction.id,
            user_id=transaction.user_id,
            account_id=transaction.account_id,
            amount=transaction.amount,
            type=transaction.type.value,
            status=transaction.status.value,
            description=transaction.description,
            reference_number=transaction.reference_number,
            merchant_name=transaction.merchant_name,
            merchant_category=transaction.merchant_category,
            location=transaction.location,
            ip_address=transaction.ip_address,
            device_id=transaction.device_id,
            transaction_date=transaction.transaction_date,
            fraud_score=transaction.fraud_score,
            is_flagged=transaction.is_flagged,
            fraud_reason=transaction.fraud_reason,
            high_risk=transaction.is_high_risk(high_risk_threshold),
            completed=transaction.is_completed(),
            pending=transaction.is_pending(),
            created_at=transaction.created_at,
            updated_at=transaction.updated_at,
        )


@dataclass(frozen=True)
class TransactionListResponse:
    """A page of transactions."""

    transactions: List[TransactionResponse] = field(default_factory=list)
    limit: int = 50
    offset: int = 0

    @property
    def count(self) -> int:
        return len(self.transactions)
