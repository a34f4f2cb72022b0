"""
Fixtures for integration tests.

Provides:
- In-memory database for testing
- Repository bound to the test session
- Test client for FastAPI app
- Request body helpers
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from fraud_detection.main import app
from fraud_detection.core.dependencies import get_transaction_repository
from fraud_detection.infrastructure.database import Base, get_db_session
from fraud_detection.infrastructure.repositories import PostgresTransactionRepository


def transaction_body(**overrides) -> dict:
    """JSON body for POST /v1/transactions."""
    body = {
        "user_id": 1,
        "account_id": 10,
        "amount": "250.00",
        "type": "PAYMENT",
        "description": "Grocery",
        "transaction_date": "2025-09-17T12:00:00",
    }
    body.update(overrides)
    return body


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create an in-memory SQLite async engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def repository(test_session: AsyncSession) -> PostgresTransactionRepository:
    """Repository bound to the test session."""
    return PostgresTransactionRepository(test_session)


# =============================================================================
# App Client Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def client(test_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client backed by the in-memory database.

    Every request shares one session, so rows written by one request are
    visible to the next without a commit.
    """
    async def override_get_transaction_repository():
        return PostgresTransactionRepository(test_session)

    async def override_get_db_session():
        yield test_session

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_transaction_repository] = override_get_transaction_repository

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# Helper Fixtures
# =============================================================================

@pytest.fixture
def grocery_request() -> dict:
    """Request body for a plain grocery payment."""
    return transaction_body()


@pytest.fixture
def card_request() -> dict:
    """Request body with every optional field filled in."""
    return transaction_body(
        amount="89.90",
        type="TRANSFER",
        description="Headphones",
        reference_number="REF-2025-0001",
        merchant_name="Sound Shop",
        merchant_category="5732",
        location="Lisbon, PT",
        ip_address="203.0.113.7",
        device_id="device-abc-123",
    )
