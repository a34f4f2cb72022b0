"""Pydantic schema for API error responses."""

from pydantic import BaseModel, Field


class ViolationSchema(BaseModel):
    """A single failed validation rule."""

    field: str
    message: str


class ErrorResponseSchema(BaseModel):
    """Standard error response format for all API errors."""

    error: str = Field(
        ...,
        description="Error code",
        examples=["TRANSACTION_NOT_FOUND"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Transaction not found with ID: 42"],
    )
    request_id: str | None = Field(
        None,
        description="Request ID for tracing",
    )
    violations: list[ViolationSchema] | None = Field(
        None,
        description="Failed validation rules, for INVALID_TRANSACTION_DATA",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": "INVALID_TRANSACTION_DATA",
                    "message": "Amount must be greater than 0",
                    "request_id": "abc123",
                    "violations": [
                        {"field": "amount", "message": "Amount must be greater than 0"}
                    ],
                }
            ]
        }
    }
