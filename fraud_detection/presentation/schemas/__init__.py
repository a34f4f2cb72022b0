"""Pydantic schemas for API request/response validation."""

from .transaction import (
    FraudFlagSchema,
    StatusUpdateSchema,
    TransactionCreateSchema,
    TransactionListResponseSchema,
    TransactionResponseSchema,
)
from .error import ErrorResponseSchema, ViolationSchema

__all__ = [
    "FraudFlagSchema",
    "StatusUpdateSchema",
    "TransactionCreateSchema",
    "TransactionListResponseSchema",
    "TransactionResponseSchema",
    "ErrorResponseSchema",
    "ViolationSchema",
]
