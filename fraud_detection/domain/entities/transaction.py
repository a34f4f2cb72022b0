"""Transaction entity representing a single monetary movement."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from fraud_detection.domain.exceptions import InvalidTransactionDataException

HIGH_RISK_THRESHOLD = Decimal("0.70")
FRAUD_SCORE_MIN = Decimal("0.00")
FRAUD_SCORE_MAX = Decimal("1.00")
FRAUD_REASON_MAX_LENGTH = 1000


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching the storage columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TransactionType(str, Enum):
    """Kind of monetary movement."""

    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    TRANSFER = "TRANSFER"
    PAYMENT = "PAYMENT"
    REFUND = "REFUND"
    FEE = "FEE"
    INTEREST = "INTEREST"
    ADJUSTMENT = "ADJUSTMENT"


class TransactionStatus(str, Enum):
    """Processing status of a transaction."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    DECLINED = "DECLINED"
    REVERSED = "REVERSED"


PENDING_STATUSES = frozenset({TransactionStatus.PENDING, TransactionStatus.PROCESSING})


@dataclass(eq=False)
class Transaction:
    """
    A recorded monetary movement belonging to a user and account.

    The identifier and the audit timestamps are owned by the storage layer:
    they are exposed read-only and only stamped through ``_stamp_persisted``.
    Status and flag state are reset on construction, whatever the caller
    passed in.

    Equality and hashing use the assigned identifier only. Two distinct
    transactions without an identifier are never equal.
    """

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
    status: TransactionStatus = TransactionStatus.PENDING
    is_flagged: bool = False
    fraud_score: Optional[Decimal] = field(default=None, init=False)
    fraud_reason: Optional[str] = field(default=None, init=False)
    _id: Optional[int] = field(default=None, init=False, repr=False)
    _created_at: Optional[datetime] = field(default=None, init=False, repr=False)
    _updated_at: Optional[datetime] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.status = TransactionStatus.PENDING
        self.is_flagged = False

    @property
    def id(self) -> Optional[int]:
        return self._id

    @property
    def created_at(self) -> Optional[datetime]:
        return self._created_at

    @property
    def updated_at(self) -> Optional[datetime]:
        return self._updated_at

    @property
    def is_persisted(self) -> bool:
        return self._id is not None

    def _stamp_persisted(
        self,
        transaction_id: int,
        created_at: datetime,
        updated_at: datetime,
    ) -> None:
        """Record the identity and audit timestamps assigned by storage."""
        self._id = transaction_id
        self._created_at = created_at
        self._updated_at = updated_at

    # Fraud bookkeeping

    def mark_as_fraud(self, score: Decimal | float | str, reason: str) -> None:
        """
        Flag this transaction as potentially fraudulent.

        Args:
            score: Confidence in [0.00, 1.00] with at most two decimals
            reason: Non-blank explanation, at most 1000 characters

        Raises:
            InvalidTransactionDataException: If score or reason is invalid.
                Nothing is changed in that case.
        """
        fraud_score = _to_decimal(score)
        if fraud_score is None or not fraud_score.is_finite():
            raise InvalidTransactionDataException(f"Invalid fraud score: {score!r}")
        if not FRAUD_SCORE_MIN <= fraud_score <= FRAUD_SCORE_MAX:
            raise InvalidTransactionDataException(
                "Fraud score must be between 0.00 and 1.00"
            )
        if fraud_score.normalize().as_tuple().exponent < -2:
            raise InvalidTransactionDataException(
                "Fraud score must have at most 2 decimal places"
            )
        if reason is None or not str(reason).strip():
            raise InvalidTransactionDataException("Fraud reason is required")
        if len(reason) > FRAUD_REASON_MAX_LENGTH:
            raise InvalidTransactionDataException(
                f"Fraud reason must not exceed {FRAUD_REASON_MAX_LENGTH} characters"
            )

        self.fraud_score = fraud_score
        self.is_flagged = True
        self.fraud_reason = reason

    def clear_fraud_flag(self) -> None:
        """Remove the fraud flag together with its score and reason."""
        self.is_flagged = False
        self.fraud_score = None
        self.fraud_reason = None

    # Predicates

    def is_high_risk(self, threshold: Decimal = HIGH_RISK_THRESHOLD) -> bool:
        return self.fraud_score is not None and self.fraud_score >= threshold

    def is_completed(self) -> bool:
        return self.status == TransactionStatus.COMPLETED

    def is_pending(self) -> bool:
        return self.status in PENDING_STATUSES

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self._id,
            "user_id": self.user_id,
            "account_id": self.account_id,
            "amount": str(self.amount) if self.amount is not None else None,
            "type": self.type.value if self.type else None,
            "status": self.status.value,
            "description": self.description,
            "reference_number": self.reference_number,
            "merchant_name": self.merchant_name,
            "merchant_category": self.merchant_category,
            "location": self.location,
            "ip_address": self.ip_address,
            "device_id": self.device_id,
            "transaction_date": (
                self.transaction_date.isoformat() if self.transaction_date else None
            ),
            "fraud_score": str(self.fraud_score) if self.fraud_score is not None else None,
            "is_flagged": self.is_flagged,
            "fraud_reason": self.fraud_reason,
            "created_at": self._created_at.isoformat() if self._created_at else None,
            "updated_at": self._updated_at.isoformat() if self._updated_at else None,
        }

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Transaction):
            return NotImplemented
        return self._id is not None and self._id == other._id

    def __hash__(self) -> int:
        return hash((Transaction, self._id))

    def __repr__(self) -> str:
        return (
            f"Transaction(id={self._id}, user_id={self.user_id}, "
            f"account_id={self.account_id}, amount={self.amount}, "
            f"type={self.type.value if self.type else None}, "
            f"status={self.status.value}, description={self.description!r}, "
            f"transaction_date={self.transaction_date}, is_flagged={self.is_flagged})"
        )


def _to_decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, Decimal):
        return value
    if value is None or isinstance(value, bool):
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
