"""Transaction service - orchestrates transaction recording and fraud bookkeeping."""

from decimal import Decimal
from typing import Optional

import structlog

from fraud_detection.application.dto import (
    CreateTransactionRequest,
    TransactionFilter,
    TransactionListResponse,
    TransactionResponse,
)
from fraud_detection.core.metrics import (
    record_lookup_miss,
    record_status_change,
    record_transaction_cleared,
    record_transaction_created,
    record_transaction_flagged,
    record_validation_failure,
    track_latency,
)
from fraud_detection.domain.entities import (
    HIGH_RISK_THRESHOLD,
    Transaction,
    TransactionStatus,
)
from fraud_detection.domain.exceptions import (
    InvalidTransactionDataException,
    TransactionNotFoundException,
)
from fraud_detection.domain.interfaces import TransactionRepository

logger = structlog.get_logger(__name__)


class TransactionService:
    """
    Application service for transaction use cases.

    Scoring happens elsewhere; this service only records the score and
    reason it is handed and keeps the flag state consistent.
    """

    DEFAULT_PAGE_SIZE = 50
    MAX_PAGE_SIZE = 500

    def __init__(
        self,
        transaction_repository: TransactionRepository,
        high_risk_threshold: Decimal = HIGH_RISK_THRESHOLD,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
    ):
        self._repo = transaction_repository
        self._high_risk_threshold = high_risk_threshold
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size

    async def create_transaction(
        self,
        request: CreateTransactionRequest,
    ) -> TransactionResponse:
        """
        Record a new transaction.

        The transaction always starts PENDING and unflagged.

        Raises:
            InvalidTransactionDataException: If the data breaks a validation rule
        """
        log = logger.bind(
            user_id=request.user_id,
            account_id=request.account_id,
            type=request.type.value,
        )

        with track_latency("create"):
            transaction = request.to_entity()
            await self._write(self._repo.save, transaction, log)

        record_transaction_created(transaction.type.value)
        log.info("transaction_created", transaction_id=transaction.id)

        return self._respond(transaction)

    async def get_transaction(self, transaction_id: int) -> TransactionResponse:
        """
        Get a transaction by ID.

        Raises:
            TransactionNotFoundException: If no transaction has this ID
        """
        transaction = await self._load(transaction_id)
        return self._respond(transaction)

    async def get_by_reference_number(self, reference_number: str) -> TransactionResponse:
        """
        Get the newest transaction carrying a reference number.

        Raises:
            TransactionNotFoundException: If none matches
        """
        transaction = await self._repo.find_by("reference_number", reference_number)
        if transaction is None:
            record_lookup_miss("reference_number")
            logger.warning("transaction_not_found", reference_number=reference_number)
            raise TransactionNotFoundException.by_field("reference_number", reference_number)
        return self._respond(transaction)

    async def list_transactions(
        self,
        criteria: TransactionFilter,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> TransactionListResponse:
        """
        List transactions matching exactly one filter, newest first.

        Raises:
            InvalidTransactionDataException: If zero or several filters are set
        """
        active = criteria.active()
        if len(active) != 1:
            raise InvalidTransactionDataException(
                "Exactly one of user_id, account_id, status, type is required"
            )

        limit = self._page_size(limit)
        offset = max(offset, 0)

        if criteria.user_id is not None:
            transactions = await self._repo.list_by_user(criteria.user_id, limit, offset)
        elif criteria.account_id is not None:
            transactions = await self._repo.list_by_account(criteria.account_id, limit, offset)
        elif criteria.status is not None:
            transactions = await self._repo.list_by_status(criteria.status, limit, offset)
        else:
            transactions = await self._repo.list_by_type(criteria.type, limit, offset)

        logger.info("transactions_listed", filter=active[0], count=len(transactions))
        return self._respond_page(transactions, limit, offset)

    async def list_flagged(
        self,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> TransactionListResponse:
        """List flagged transactions, newest first."""
        limit = self._page_size(limit)
        offset = max(offset, 0)
        transactions = await self._repo.list_flagged(limit, offset)
        return self._respond_page(transactions, limit, offset)

    async def update_status(
        self,
        transaction_id: int,
        status: TransactionStatus,
    ) -> TransactionResponse:
        """
        Move a transaction to any status.

        No transition table is enforced; every status may follow every other.
        """
        transaction = await self._load(transaction_id)
        previous = transaction.status
        transaction.status = status

        log = logger.bind(transaction_id=transaction_id)
        with track_latency("update_status"):
            await self._write(self._repo.update, transaction, log)

        record_status_change(status.value)
        log.info("transaction_status_changed", previous=previous.value, status=status.value)
        return self._respond(transaction)

    async def flag_transaction(
        self,
        transaction_id: int,
        score: Decimal,
        reason: str,
    ) -> TransactionResponse:
        """
        Flag a transaction as potentially fraudulent.

        Flagging again overwrites the previous score and reason.

        Raises:
            TransactionNotFoundException: If no transaction has this ID
            InvalidTransactionDataException: If score or reason is invalid
        """
        transaction = await self._load(transaction_id)
        log = logger.bind(transaction_id=transaction_id)

        try:
            transaction.mark_as_fraud(score, reason)
        except InvalidTransactionDataException as exc:
            record_validation_failure(["fraud_score_or_reason"])
            log.warning("fraud_flag_rejected", reason=exc.message)
            raise

        with track_latency("flag"):
            await self._write(self._repo.update, transaction, log)

        high_risk = transaction.is_high_risk(self._high_risk_threshold)
        record_transaction_flagged(high_risk)
        log.info(
            "transaction_flagged",
            fraud_score=str(transaction.fraud_score),
            high_risk=high_risk,
        )
        return self._respond(transaction)

    async def clear_fraud_flag(self, transaction_id: int) -> TransactionResponse:
        """Clear a transaction's fraud flag. Clearing an unflagged one is a no-op write."""
        transaction = await self._load(transaction_id)
        was_flagged = transaction.is_flagged
        transaction.clear_fraud_flag()

        log = logger.bind(transaction_id=transaction_id)
        with track_latency("clear_flag"):
            await self._write(self._repo.update, transaction, log)

        if was_flagged:
            record_transaction_cleared()
        log.info("transaction_flag_cleared", was_flagged=was_flagged)
        return self._respond(transaction)

    async def _load(self, transaction_id: int) -> Transaction:
        transaction = await self._repo.get_by_id(transaction_id)
        if transaction is None:
            record_lookup_miss("id")
            logger.warning("transaction_not_found", transaction_id=transaction_id)
            raise TransactionNotFoundException(transaction_id)
        return transaction

    async def _write(self, operation, transaction: Transaction, log) -> Transaction:
        try:
            return await operation(transaction)
        except InvalidTransactionDataException as exc:
            record_validation_failure(v.field for v in exc.violations)
            log.warning(
                "transaction_rejected",
                violations=[v.to_dict() for v in exc.violations] or exc.message,
            )
            raise

    def _page_size(self, limit: Optional[int]) -> int:
        if limit is None or limit <= 0:
            return min(self._default_page_size, self._max_page_size)
        return min(limit, self._max_page_size)

    def _respond(self, transaction: Transaction) -> TransactionResponse:
        return TransactionResponse.from_entity(transaction, self._high_risk_threshold)

    def _respond_page(self, transactions, limit: int, offset: int) -> TransactionListResponse:
        return TransactionListResponse(
            transactions=[self._respond(t) for t in transactions],
            limit=limit,
            offset=offset,
        )
