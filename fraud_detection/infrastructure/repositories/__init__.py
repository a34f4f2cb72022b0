"""Repository implementations."""

from .transaction_repository import LOOKUP_FIELDS, PostgresTransactionRepository

__all__ = [
    "LOOKUP_FIELDS",
    "PostgresTransactionRepository",
]
