"""Domain Entities - Core business objects."""

from .transaction import (
    HIGH_RISK_THRESHOLD,
    Transaction,
    TransactionStatus,
    TransactionType,
    utcnow,
)

__all__ = [
    "HIGH_RISK_THRESHOLD",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "utcnow",
]
