"""Domain Exceptions - Business rule violations and domain errors."""

from .base import DomainException
from .transaction import (
    InvalidTransactionDataException,
    TransactionNotFoundException,
)

__all__ = [
    "DomainException",
    "InvalidTransactionDataException",
    "TransactionNotFoundException",
]
