"""Transaction-related domain exceptions."""

from typing import Any, Optional, Sequence

from .base import DomainException


class TransactionNotFoundException(DomainException):
    """Raised when a transaction cannot be found."""

    def __init__(
        self,
        transaction_id: Optional[int] = None,
        message: Optional[str] = None,
    ):
        super().__init__(
            message=message or f"Transaction not found with ID: {transaction_id}",
            code="TRANSACTION_NOT_FOUND",
        )
        self.transaction_id = transaction_id
        self.field: Optional[str] = None
        self.value: Any = None

    @classmethod
    def by_field(cls, field: str, value: Any) -> "TransactionNotFoundException":
        """Build the error for a lookup by an arbitrary field."""
        exc = cls(message=f"Transaction not found with {field}: {value}")
        exc.field = field
        exc.value = value
        return exc


class InvalidTransactionDataException(DomainException):
    """
    Raised when transaction data violates the validation rules.

    Carries every violation found so callers can fix all of them at once.
    """

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        violations: Optional[Sequence[Any]] = None,
    ):
        super().__init__(
            message=message,
            code="INVALID_TRANSACTION_DATA",
        )
        self.cause = cause
        self.violations = list(violations or [])
        if cause is not None:
            self.__cause__ = cause
