"""Repository interfaces for data persistence."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List, Optional

from fraud_detection.domain.entities import (
    Transaction,
    TransactionStatus,
    TransactionType,
)


class TransactionRepository(ABC):
    """
    Abstract repository for Transaction persistence.

    The repository is the only component allowed to assign a transaction's
    identifier and audit timestamps. Every write is validated first; a write
    that fails validation leaves storage untouched.

    Implementations may use PostgreSQL, in-memory storage, etc.
    """

    @abstractmethod
    async def save(self, transaction: Transaction) -> Transaction:
        """
        Persist a new transaction.

        Args:
            transaction: A transaction without an identifier

        Returns:
            The same transaction with its identifier and timestamps assigned

        Raises:
            InvalidTransactionDataException: If validation fails or the
                transaction was already persisted
        """
        ...

    @abstractmethod
    async def update(self, transaction: Transaction) -> Transaction:
        """
        Write the current state of a persisted transaction.

        Args:
            transaction: A transaction with an assigned identifier

        Returns:
            The same transaction with ``updated_at`` refreshed

        Raises:
            InvalidTransactionDataException: If validation fails
            TransactionNotFoundException: If no row exists for its identifier
        """
        ...

    @abstractmethod
    async def get_by_id(self, transaction_id: int) -> Optional[Transaction]:
        """
        Retrieve a transaction by ID.

        Returns:
            The transaction if found, None otherwise
        """
        ...

    @abstractmethod
    async def find_by(self, field: str, value: Any) -> Optional[Transaction]:
        """
        Retrieve the most recent transaction whose ``field`` equals ``value``.

        Raises:
            InvalidTransactionDataException: If ``field`` is not a lookup field
        """
        ...

    @abstractmethod
    async def list_by_user(
        self,
        user_id: int,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Transaction]:
        """Transactions for a user, newest transaction_date first."""
        ...

    @abstractmethod
    async def list_by_account(
        self,
        account_id: int,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Transaction]:
        """Transactions for an account, newest transaction_date first."""
        ...

    @abstractmethod
    async def list_by_status(
        self,
        status: TransactionStatus,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Transaction]:
        """Transactions in a given status, newest transaction_date first."""
        ...

    @abstractmethod
    async def list_by_type(
        self,
        transaction_type: TransactionType,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Transaction]:
        """Transactions of a given type, newest transaction_date first."""
        ...

    @abstractmethod
    async def list_between(
        self,
        start: datetime,
        end: datetime,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Transaction]:
        """Transactions with start <= transaction_date < end, newest first."""
        ...

    @abstractmethod
    async def list_flagged(
        self,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Transaction]:
        """Flagged transactions, newest transaction_date first."""
        ...
