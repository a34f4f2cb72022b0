"""Data Transfer Objects for application layer."""

from .transaction import (
    CreateTransactionRequest,
    TransactionFilter,
    TransactionListResponse,
    TransactionResponse,
)

__all__ = [
    "CreateTransactionRequest",
    "TransactionFilter",
    "TransactionListResponse",
    "TransactionResponse",
]
