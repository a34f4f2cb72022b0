"""Dependency injection for FastAPI."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fraud_detection.application.services import TransactionService
from fraud_detection.core.config import settings
from fraud_detection.domain.interfaces import TransactionRepository
from fraud_detection.infrastructure.database import get_db_session
from fraud_detection.infrastructure.repositories import PostgresTransactionRepository


# Repository dependencies
async def get_transaction_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> TransactionRepository:
    """Get a TransactionRepository instance."""
    return PostgresTransactionRepository(session)


# Service dependencies
async def get_transaction_service(
    transaction_repo: Annotated[TransactionRepository, Depends(get_transaction_repository)],
) -> TransactionService:
    """Get a TransactionService instance with all dependencies."""
    return TransactionService(
        transaction_repository=transaction_repo,
        high_risk_threshold=settings.high_risk_threshold,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )
