"""
Integration Tests for Prometheus metrics.

Tests cover:
1. The /metrics endpoint exposes the service's counters
2. Use cases increment their counters
"""

import pytest
from httpx import AsyncClient
from prometheus_client import REGISTRY

from tests.integration.conftest import transaction_body


def sample(name: str, labels: dict | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestMetricsEndpoint:

    @pytest.mark.asyncio
    async def test_metrics_endpoint(self, client: AsyncClient, grocery_request: dict):
        await client.post("/v1/transactions", json=grocery_request)

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]
        assert "fraud_transactions_created_total" in response.text
        assert "fraud_http_requests_total" in response.text


class TestCounters:

    @pytest.mark.asyncio
    async def test_created_counter_by_type(self, client: AsyncClient):
        before = sample("fraud_transactions_created_total", {"type": "REFUND"})

        await client.post("/v1/transactions", json=transaction_body(type="REFUND"))

        assert sample("fraud_transactions_created_total", {"type": "REFUND"}) == before + 1

    @pytest.mark.asyncio
    async def test_validation_failure_counter(self, client: AsyncClient):
        labels = {"field": "merchant_category"}
        before = sample("fraud_validation_failures_total", labels)

        await client.post(
            "/v1/transactions",
            json=transaction_body(merchant_category="ABCDEFGHIJK"),
        )

        assert sample("fraud_validation_failures_total", labels) == before + 1

    @pytest.mark.asyncio
    async def test_flag_and_clear_counters(self, client: AsyncClient, grocery_request: dict):
        flagged_before = sample("fraud_transactions_flagged_total", {"risk": "high"})
        cleared_before = sample("fraud_transactions_cleared_total")

        created = (await client.post("/v1/transactions", json=grocery_request)).json()
        url = f"/v1/transactions/{created['id']}/fraud-flag"
        await client.post(url, json={"score": "0.92", "reason": "unusual location"})
        await client.delete(url)

        assert sample("fraud_transactions_flagged_total", {"risk": "high"}) == flagged_before + 1
        assert sample("fraud_transactions_cleared_total") == cleared_before + 1

    @pytest.mark.asyncio
    async def test_lookup_miss_counter(self, client: AsyncClient):
        before = sample("fraud_lookup_misses_total", {"key": "id"})

        await client.get("/v1/transactions/31337")

        assert sample("fraud_lookup_misses_total", {"key": "id"}) == before + 1

