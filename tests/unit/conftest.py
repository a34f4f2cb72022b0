"""
Fixtures for unit tests.

Provides:
- Transaction factory with sensible defaults
- In-memory TransactionRepository that follows the storage contract
"""

from datetime import datetime
from decimal import Decimal
from itertools import count
from typing import Any, List, Optional

import pytest

from fraud_detection.domain.entities import (
    Transaction,
    TransactionType,
    utcnow,
)
from fraud_detection.domain.exceptions import (
    InvalidTransactionDataException,
    TransactionNotFoundException,
)
from fraud_detection.domain.interfaces import TransactionRepository
from fraud_detection.domain.validation import ensure_valid


TRANSACTION_DATE = datetime(2025, 9, 17, 12, 0, 0)


def make_transaction(**overrides: Any) -> Transaction:
    """Build a valid transaction, overriding any constructor argument."""
    fields = {
        "user_id": 1,
        "account_id": 10,
        "amount": Decimal("250.00"),
        "type": TransactionType.PAYMENT,
        "description": "Grocery",
        "transaction_date": TRANSACTION_DATE,
    }
    fields.update(overrides)
    return Transaction(**fields)


# =============================================================================
# In-Memory Repository
# =============================================================================

class InMemoryTransactionRepository(TransactionRepository):
    """Dictionary-backed repository that validates and stamps like the real one."""

    def __init__(self):
        self.rows: dict[int, dict] = {}
        self.save_calls = 0
        self.update_calls = 0
        self._ids = count(1)

    async def save(self, transaction: Transaction) -> Transaction:
        self.save_calls += 1
        if transaction.is_persisted:
            raise InvalidTransactionDataException("already persisted")
        ensure_valid(transaction)

        now = utcnow()
        transaction._stamp_persisted(next(self._ids), now, now)
        self.rows[transaction.id] = self._snapshot(transaction)
        return transaction

    async def update(self, transaction: Transaction) -> Transaction:
        self.update_calls += 1
        if transaction.id not in self.rows:
            raise TransactionNotFoundException(transaction.id)
        ensure_valid(transaction)

        created_at = self.rows[transaction.id]["created_at"]
        transaction._stamp_persisted(transaction.id, created_at, max(utcnow(), created_at))
        self.rows[transaction.id] = self._snapshot(transaction)
        return transaction

    async def get_by_id(self, transaction_id: int) -> Optional[Transaction]:
        row = self.rows.get(transaction_id)
        return self._restore(row) if row else None

    async def find_by(self, field: str, value: Any) -> Optional[Transaction]:
        matches = [r for r in self.rows.values() if r["fields"].get(field) == value]
        return self._restore(matches[-1]) if matches else None

    async def list_by_user(self, user_id, limit=50, offset=0) -> List[Transaction]:
        return self._select(lambda f: f["user_id"] == user_id, limit, offset)

    async def list_by_account(self, account_id, limit=50, offset=0) -> List[Transaction]:
        return self._select(lambda f: f["account_id"] == account_id, limit, offset)

    async def list_by_status(self, status, limit=50, offset=0) -> List[Transaction]:
        return self._select(lambda f: f["status"] == status, limit, offset)

    async def list_by_type(self, transaction_type, limit=50, offset=0) -> List[Transaction]:
        return self._select(lambda f: f["type"] == transaction_type, limit, offset)

    async def list_between(self, start, end, limit=50, offset=0) -> List[Transaction]:
        return self._select(
            lambda f: start <= f["transaction_date"] < end, limit, offset
        )

    async def list_flagged(self, limit=50, offset=0) -> List[Transaction]:
        return self._select(lambda f: f["is_flagged"], limit, offset)

    def _select(self, predicate, limit, offset) -> List[Transaction]:
        rows = [r for r in self.rows.values() if predicate(r["fields"])]
        rows.sort(key=lambda r: (r["fields"]["transaction_date"], r["id"]), reverse=True)
        return [self._restore(r) for r in rows[offset:offset + limit]]

    @staticmethod
    def _snapshot(transaction: Transaction) -> dict:
        fields = {
            name: getattr(transaction, name)
            for name in (
                "user_id", "account_id", "amount", "type", "description",
                "transaction_date", "reference_number", "merchant_name",
                "merchant_category", "location", "ip_address", "device_id",
                "status", "is_flagged", "fraud_score", "fraud_reason",
            )
        }
        return {
            "id": transaction.id,
            "created_at": transaction.created_at,
            "updated_at": transaction.updated_at,
            "fields": fields,
        }

    @staticmethod
    def _restore(row: dict) -> Transaction:
        fields = dict(row["fields"])
        status = fields.pop("status")
        is_flagged = fields.pop("is_flagged")
        fraud_score = fields.pop("fraud_score")
        fraud_reason = fields.pop("fraud_reason")

        transaction = Transaction(**fields)
        transaction.status = status
        transaction.is_flagged = is_flagged
        transaction.fraud_score = fraud_score
        transaction.fraud_reason = fraud_reason
        transaction._stamp_persisted(row["id"], row["created_at"], row["updated_at"])
        return transaction


@pytest.fixture
def repository() -> InMemoryTransactionRepository:
    """Create an empty in-memory repository."""
    return InMemoryTransactionRepository()


@pytest.fixture
def transaction() -> Transaction:
    """A valid, unsaved transaction."""
    return make_transaction()
