"""
Validation rules for transaction records.

``FIELD_RULES`` is the single table of field constraints. Storage gates every
create and update through ``ensure_valid``; the entity itself never rejects
plain attribute assignment.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from fraud_detection.domain.entities.transaction import (
    FRAUD_SCORE_MAX,
    FRAUD_SCORE_MIN,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from fraud_detection.domain.exceptions import InvalidTransactionDataException

AMOUNT_MAX_INTEGER_DIGITS = 10
AMOUNT_MAX_FRACTION_DIGITS = 2
AMOUNT_MIN = Decimal("0.00")

# Identifiers are stored as signed 64-bit integers
IDENTIFIER_MIN = 1
IDENTIFIER_MAX = 2**63 - 1


@dataclass(frozen=True)
class FieldRule:
    """Constraint on a single transaction field."""

    name: str
    label: str
    required: bool = False
    max_length: Optional[int] = None
    not_blank: bool = False
    min_value: Optional[int] = None
    max_value: Optional[int] = None


@dataclass(frozen=True)
class Violation:
    """A single failed rule."""

    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


FIELD_RULES: tuple[FieldRule, ...] = (
    FieldRule(
        "user_id",
        "User ID",
        required=True,
        min_value=IDENTIFIER_MIN,
        max_value=IDENTIFIER_MAX,
    ),
    FieldRule(
        "account_id",
        "Account ID",
        required=True,
        min_value=IDENTIFIER_MIN,
        max_value=IDENTIFIER_MAX,
    ),
    FieldRule("amount", "Amount", required=True),
    FieldRule("type", "Transaction type", required=True),
    FieldRule("status", "Transaction status", required=True),
    FieldRule("description", "Description", required=True, max_length=500, not_blank=True),
    FieldRule("reference_number", "Reference number", max_length=100),
    FieldRule("merchant_name", "Merchant name", max_length=100),
    FieldRule("merchant_category", "Merchant category", max_length=10),
    FieldRule("location", "Location", max_length=100),
    FieldRule("ip_address", "IP address", max_length=45),
    FieldRule("device_id", "Device ID", max_length=100),
    FieldRule("transaction_date", "Transaction date", required=True),
    FieldRule("fraud_reason", "Fraud reason", max_length=1000),
)

RULES_BY_FIELD = {rule.name: rule for rule in FIELD_RULES}

ENUM_FIELDS = {
    "type": TransactionType,
    "status": TransactionStatus,
}


def count_digits(value: Decimal) -> tuple[int, int]:
    """
    Return (integer digits, fraction digits) of a finite decimal.

    Trailing fractional zeros are not counted, so ``Decimal("12.500")`` has
    one fraction digit.
    """
    _, digits, exponent = value.normalize().as_tuple()
    if exponent >= 0:
        return len(digits) + exponent, 0
    fraction = -exponent
    return max(len(digits) - fraction, 0), fraction


def _as_decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def _check_amount(amount: Any) -> List[Violation]:
    value = _as_decimal(amount)
    if value is None or not value.is_finite():
        return [Violation("amount", "Amount must be a decimal number")]

    violations = []
    if value <= AMOUNT_MIN:
        violations.append(Violation("amount", "Amount must be greater than 0"))

    integer_digits, fraction_digits = count_digits(value)
    if (
        integer_digits > AMOUNT_MAX_INTEGER_DIGITS
        or fraction_digits > AMOUNT_MAX_FRACTION_DIGITS
    ):
        violations.append(
            Violation(
                "amount",
                f"Amount must have at most {AMOUNT_MAX_INTEGER_DIGITS} integer digits "
                f"and {AMOUNT_MAX_FRACTION_DIGITS} decimal places",
            )
        )
    return violations


def _check_integer_range(rule: FieldRule, value: Any) -> Optional[Violation]:
    if not isinstance(value, int) or isinstance(value, bool):
        return Violation(rule.name, f"{rule.label} must be an integer")
    if (rule.min_value is not None and value < rule.min_value) or (
        rule.max_value is not None and value > rule.max_value
    ):
        return Violation(
            rule.name,
            f"{rule.label} must be between {rule.min_value} and {rule.max_value}",
        )
    return None


def _check_fraud_fields(transaction: Transaction) -> List[Violation]:
    violations = []
    score = transaction.fraud_score

    if score is not None:
        value = _as_decimal(score)
        if value is None or not value.is_finite():
            violations.append(Violation("fraud_score", "Fraud score must be a decimal number"))
        else:
            if not FRAUD_SCORE_MIN <= value <= FRAUD_SCORE_MAX:
                violations.append(
                    Violation("fraud_score", "Fraud score must be between 0.00 and 1.00")
                )
            if count_digits(value)[1] > 2:
                violations.append(
                    Violation("fraud_score", "Fraud score must have at most 2 decimal places")
                )

    has_score = score is not None
    has_reason = transaction.fraud_reason is not None
    if transaction.is_flagged and not (has_score and has_reason):
        violations.append(
            Violation("is_flagged", "Flagged transactions require a fraud score and reason")
        )
    if not transaction.is_flagged and (has_score or has_reason):
        violations.append(
            Violation("is_flagged", "Unflagged transactions must not carry a fraud score or reason")
        )
    return violations


def validate_transaction(transaction: Transaction) -> List[Violation]:
    """
    Evaluate every rule against a transaction.

    Returns:
        All violations found, in rule order. Empty when the transaction is valid.
    """
    violations: List[Violation] = []

    for rule in FIELD_RULES:
        value = getattr(transaction, rule.name, None)

        if value is None:
            if rule.required:
                violations.append(Violation(rule.name, f"{rule.label} is required"))
            continue

        enum_type = ENUM_FIELDS.get(rule.name)
        if enum_type is not None and not isinstance(value, enum_type):
            violations.append(Violation(rule.name, f"{rule.label} is not a known value"))
            continue

        if rule.min_value is not None or rule.max_value is not None:
            violation = _check_integer_range(rule, value)
            if violation is not None:
                violations.append(violation)
            continue

        if rule.max_length is not None and isinstance(value, str):
            if rule.not_blank and not value.strip():
                violations.append(Violation(rule.name, f"{rule.label} is required"))
            elif len(value) > rule.max_length:
                violations.append(
                    Violation(
                        rule.name,
                        f"{rule.label} must not exceed {rule.max_length} characters",
                    )
                )

    if transaction.amount is not None:
        violations.extend(_check_amount(transaction.amount))

    violations.extend(_check_fraud_fields(transaction))

    created_at, updated_at = transaction.created_at, transaction.updated_at
    if created_at is not None and updated_at is not None and created_at > updated_at:
        violations.append(
            Violation("updated_at", "Updated timestamp must not precede created timestamp")
        )

    return violations


def ensure_valid(transaction: Transaction) -> Transaction:
    """
    Raise if the transaction breaks any rule.

    Raises:
        InvalidTransactionDataException: Listing every violation
    """
    violations = validate_transaction(transaction)
    if violations:
        message = "; ".join(v.message for v in violations)
        raise InvalidTransactionDataException(message, violations=violations)
    return transaction
