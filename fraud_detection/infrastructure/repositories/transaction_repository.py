"""PostgreSQL implementation of TransactionRepository."""

from datetime import datetime, timezone
from typing import Any, List, Optional

import structlog
from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from fraud_detection.domain.entities import (
    Transaction,
    TransactionStatus,
    TransactionType,
    utcnow,
)
from fraud_detection.domain.exceptions import (
    InvalidTransactionDataException,
    TransactionNotFoundException,
)
from fraud_detection.domain.interfaces import TransactionRepository
from fraud_detection.domain.validation import ensure_valid
from fraud_detection.infrastructure.database.models import TransactionModel

logger = structlog.get_logger(__name__)

# Columns that may be used with find_by()
LOOKUP_FIELDS = frozenset(
    {
        "reference_number",
        "merchant_name",
        "merchant_category",
        "location",
        "ip_address",
        "device_id",
        "user_id",
        "account_id",
    }
)


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class PostgresTransactionRepository(TransactionRepository):
    """
    PostgreSQL implementation of the Transaction repository.

    Uses SQLAlchemy async session for database operations. Concurrent
    updates to one row are detected through the model's version column.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, transaction: Transaction) -> Transaction:
        """
        Validate and insert a new transaction.

        The entity comes back carrying the stored values, so an aware
        transaction_date is replaced by its naive UTC equivalent.
        """
        if transaction.is_persisted:
            raise InvalidTransactionDataException(
                f"Transaction {transaction.id} is already persisted"
            )
        ensure_valid(transaction)

        now = utcnow()
        model = TransactionModel(created_at=now, updated_at=now)
        self._copy_to_model(transaction, model)

        self._session.add(model)
        await self._session.flush()

        transaction.transaction_date = model.transaction_date
        transaction._stamp_persisted(model.id, model.created_at, model.updated_at)
        logger.debug("transaction_inserted", transaction_id=model.id)
        return transaction

    async def update(self, transaction: Transaction) -> Transaction:
        """Validate and write back a persisted transaction."""
        if not transaction.is_persisted:
            raise TransactionNotFoundException(transaction.id)
        ensure_valid(transaction)

        model = await self._get_model(transaction.id)
        if model is None:
            raise TransactionNotFoundException(transaction.id)

        self._copy_to_model(transaction, model)
        model.updated_at = max(utcnow(), model.created_at)
        await self._session.flush()

        transaction.transaction_date = model.transaction_date
        transaction._stamp_persisted(model.id, model.created_at, model.updated_at)
        logger.debug("transaction_updated", transaction_id=model.id)
        return transaction

    async def get_by_id(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        model = await self._get_model(transaction_id)
        if model is None:
            return None
        return self._to_entity(model)

    async def find_by(self, field: str, value: Any) -> Optional[Transaction]:
        """Retrieve the newest transaction matching a lookup field."""
        if field not in LOOKUP_FIELDS:
            raise InvalidTransactionDataException(f"Cannot look up transactions by {field}")

        column = getattr(TransactionModel, field)
        stmt = self._newest_first(select(TransactionModel).where(column == value)).limit(1)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None
        return self._to_entity(model)

    async def list_by_user(
        self,
        user_id: int,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Transaction]:
        stmt = select(TransactionModel).where(TransactionModel.user_id == user_id)
        return await self._list(stmt, limit, offset)

    async def list_by_account(
        self,
        account_id: int,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Transaction]:
        stmt = select(TransactionModel).where(TransactionModel.account_id == account_id)
        return await self._list(stmt, limit, offset)

    async def list_by_status(
        self,
        status: TransactionStatus,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Transaction]:
        stmt = select(TransactionModel).where(TransactionModel.status == status.value)
        return await self._list(stmt, limit, offset)

    async def list_by_type(
        self,
        transaction_type: TransactionType,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Transaction]:
        stmt = select(TransactionModel).where(
            TransactionModel.type == transaction_type.value
        )
        return await self._list(stmt, limit, offset)

    async def list_between(
        self,
        start: datetime,
        end: datetime,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Transaction]:
        stmt = select(TransactionModel).where(
            TransactionModel.transaction_date >= _naive_utc(start),
            TransactionModel.transaction_date < _naive_utc(end),
        )
        return await self._list(stmt, limit, offset)

    async def list_flagged(
        self,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Transaction]:
        stmt = select(TransactionModel).where(TransactionModel.is_flagged.is_(True))
        return await self._list(stmt, limit, offset)

    async def _get_model(self, transaction_id: int) -> Optional[TransactionModel]:
        stmt = select(TransactionModel).where(TransactionModel.id == transaction_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def _list(self, stmt: Select, limit: int, offset: int) -> List[Transaction]:
        stmt = self._newest_first(stmt).limit(limit).offset(offset)
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    @staticmethod
    def _newest_first(stmt: Select) -> Select:
        return stmt.order_by(
            TransactionModel.transaction_date.desc(),
            TransactionModel.id.desc(),
        )

    @staticmethod
    def _copy_to_model(transaction: Transaction, model: TransactionModel) -> None:
        """Copy every caller-mutable field onto the ORM row."""
        model.user_id = transaction.user_id
        model.account_id = transaction.account_id
        model.amount = transaction.amount
        model.type = transaction.type.value
        model.status = transaction.status.value
        model.description = transaction.description
        model.reference_number = transaction.reference_number
        model.merchant_name = transaction.merchant_name
        model.merchant_category = transaction.merchant_category
        model.location = transaction.location
        model.ip_address = transaction.ip_address
        model.device_id = transaction.device_id
        model.transaction_date = _naive_utc(transaction.transaction_date)
        model.fraud_score = transaction.fraud_score
        model.is_flagged = transaction.is_flagged
        model.fraud_reason = transaction.fraud_reason

    @staticmethod
    def _to_entity(model: TransactionModel) -> Transaction:
        """Convert database model to domain entity."""
        transaction = Transaction(
            user_id=model.user_id,
            account_id=model.account_id,
            amount=model.amount,
            type=TransactionType(model.type),
            description=model.description,
            transaction_date=model.transaction_date,
            reference_number=model.reference_number,
            merchant_name=model.merchant_name,
            merchant_category=model.merchant_category,
            location=model.location,
            ip_address=model.ip_address,
            device_id=model.device_id,
        )
        transaction.status = TransactionStatus(model.status)
        transaction.is_flagged = model.is_flagged
        transaction.fraud_score = model.fraud_score
        transaction.fraud_reason = model.fraud_reason
        transaction._stamp_persisted(model.id, model.created_at, model.updated_at)
        return transaction
