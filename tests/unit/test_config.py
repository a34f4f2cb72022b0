"""
Unit Tests for configuration and database URL handling.
"""

from decimal import Decimal

import pytest

from fraud_detection.core.config import Settings
from fraud_detection.infrastructure.database.connection import (
    DatabaseSessionManager,
    to_async_url,
)


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("FRAUD_HIGH_RISK_THRESHOLD", raising=False)

        settings = Settings(_env_file=None)

        assert settings.app_name == "fraud-detection"
        assert settings.high_risk_threshold == Decimal("0.70")
        assert settings.default_page_size <= settings.max_page_size

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("FRAUD_HIGH_RISK_THRESHOLD", "0.55")
        monkeypatch.setenv("FRAUD_MAX_PAGE_SIZE", "20")

        settings = Settings(_env_file=None)

        assert settings.high_risk_threshold == Decimal("0.55")
        assert settings.max_page_size == 20


class TestDatabaseUrl:

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("postgres://u:p@db/fraud", "postgresql+asyncpg://u:p@db/fraud"),
            ("postgresql://u:p@db/fraud", "postgresql+asyncpg://u:p@db/fraud"),
            ("postgresql+asyncpg://u:p@db/fraud", "postgresql+asyncpg://u:p@db/fraud"),
            ("sqlite:///./fraud.db", "sqlite+aiosqlite:///./fraud.db"),
        ],
    )
    def test_to_async_url(self, url, expected):
        assert to_async_url(url) == expected

    def test_engine_requires_init(self):
        with pytest.raises(RuntimeError):
            DatabaseSessionManager().engine

    @pytest.mark.asyncio
    async def test_sqlite_session_round_trip(self):
        manager = DatabaseSessionManager()
        manager.init("sqlite:///:memory:")
        try:
            await manager.create_all()
            async with manager.session() as session:
                assert session.bind is manager.engine
        finally:
            await manager.close()
