"""
Unit Tests for TransactionService.

These tests verify:
1. Creating transactions (defaults, validation gate, nothing stored on failure)
2. Lookups raising TransactionNotFoundException
3. Status updates without a transition table
4. Flagging and clearing fraud flags
5. Listing by exactly one filter with page-size clamping
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from fraud_detection.application.dto import CreateTransactionRequest, TransactionFilter
from fraud_detection.application.services import TransactionService
from fraud_detection.domain.entities import TransactionStatus, TransactionType
from fraud_detection.domain.exceptions import (
    InvalidTransactionDataException,
    TransactionNotFoundException,
)
from tests.unit.conftest import TRANSACTION_DATE, InMemoryTransactionRepository


def make_request(**overrides) -> CreateTransactionRequest:
    fields = {
        "user_id": 1,
        "account_id": 10,
        "amount": Decimal("250.00"),
        "type": TransactionType.PAYMENT,
        "description": "Grocery",
        "transaction_date": TRANSACTION_DATE,
    }
    fields.update(overrides)
    return CreateTransactionRequest(**fields)


@pytest.fixture
def service(repository: InMemoryTransactionRepository) -> TransactionService:
    return TransactionService(transaction_repository=repository, max_page_size=5)


# =============================================================================
# Create
# =============================================================================

class TestCreateTransaction:

    @pytest.mark.asyncio
    async def test_create_returns_pending_unflagged(self, service: TransactionService):
        response = await service.create_transaction(make_request())

        assert response.id == 1
        assert response.status == "PENDING"
        assert response.is_flagged is False
        assert response.fraud_score is None
        assert response.pending is True
        assert response.completed is False
        assert response.high_risk is False
        assert response.created_at == response.updated_at

    @pytest.mark.asyncio
    async def test_invalid_amount_is_rejected_and_not_stored(
        self,
        service: TransactionService,
        repository: InMemoryTransactionRepository,
    ):
        with pytest.raises(InvalidTransactionDataException) as exc_info:
            await service.create_transaction(make_request(amount=Decimal("0.00")))

        assert [v.field for v in exc_info.value.violations] == ["amount"]
        assert repository.rows == {}

    @pytest.mark.asyncio
    async def test_overlong_merchant_category_is_rejected(self, service: TransactionService):
        with pytest.raises(InvalidTransactionDataException) as exc_info:
            await service.create_transaction(make_request(merchant_category="ABCDEFGHIJK"))

        assert "Merchant category must not exceed 10 characters" in exc_info.value.message


# =============================================================================
# Lookups
# =============================================================================

class TestLookups:

    @pytest.mark.asyncio
    async def test_get_missing_transaction_raises_not_found(self, service: TransactionService):
        with pytest.raises(TransactionNotFoundException) as exc_info:
            await service.get_transaction(999)

        assert exc_info.value.transaction_id == 999

    @pytest.mark.asyncio
    async def test_get_existing_transaction(self, service: TransactionService):
        created = await service.create_transaction(make_request())

        fetched = await service.get_transaction(created.id)

        assert fetched.id == created.id
        assert fetched.amount == Decimal("250.00")

    @pytest.mark.asyncio
    async def test_reference_lookup(self, service: TransactionService):
        await service.create_transaction(make_request(reference_number="REF-123"))

        fetched = await service.get_by_reference_number("REF-123")

        assert fetched.reference_number == "REF-123"

    @pytest.mark.asyncio
    async def test_reference_lookup_miss_carries_field_and_value(
        self,
        service: TransactionService,
    ):
        with pytest.raises(TransactionNotFoundException) as exc_info:
            await service.get_by_reference_number("NOPE")

        assert exc_info.value.field == "reference_number"
        assert exc_info.value.value == "NOPE"


# =============================================================================
# Status
# =============================================================================

class TestUpdateStatus:

    @pytest.mark.asyncio
    async def test_any_transition_is_allowed(self, service: TransactionService):
        created = await service.create_transaction(make_request())

        completed = await service.update_status(created.id, TransactionStatus.COMPLETED)
        assert completed.completed is True
        assert completed.pending is False

        reopened = await service.update_status(created.id, TransactionStatus.PENDING)
        assert reopened.status == "PENDING"
        assert reopened.created_at == created.created_at
        assert reopened.updated_at >= reopened.created_at

    @pytest.mark.asyncio
    async def test_update_missing_transaction_raises(self, service: TransactionService):
        with pytest.raises(TransactionNotFoundException):
            await service.update_status(5, TransactionStatus.FAILED)


# =============================================================================
# Fraud Flags
# =============================================================================

class TestFraudFlags:

    @pytest.mark.asyncio
    async def test_grocery_scenario(self, service: TransactionService):
        created = await service.create_transaction(make_request())

        flagged = await service.flag_transaction(
            created.id, Decimal("0.92"), "unusual location"
        )

        assert flagged.is_flagged is True
        assert flagged.high_risk is True
        assert flagged.fraud_reason == "unusual location"
        assert flagged.status == "PENDING"

    @pytest.mark.asyncio
    async def test_flag_is_persisted(
        self,
        service: TransactionService,
        repository: InMemoryTransactionRepository,
    ):
        created = await service.create_transaction(make_request())
        await service.flag_transaction(created.id, Decimal("0.50"), "minor anomaly")

        stored = await repository.get_by_id(created.id)

        assert stored.is_flagged is True
        assert stored.fraud_score == Decimal("0.50")
        assert stored.is_high_risk() is False

    @pytest.mark.asyncio
    async def test_invalid_score_is_rejected_without_write(
        self,
        service: TransactionService,
        repository: InMemoryTransactionRepository,
    ):
        created = await service.create_transaction(make_request())

        with pytest.raises(InvalidTransactionDataException):
            await service.flag_transaction(created.id, Decimal("1.50"), "too sure")

        assert repository.update_calls == 0
        assert (await repository.get_by_id(created.id)).is_flagged is False

    @pytest.mark.asyncio
    async def test_custom_high_risk_threshold(self, repository: InMemoryTransactionRepository):
        service = TransactionService(repository, high_risk_threshold=Decimal("0.40"))
        created = await service.create_transaction(make_request())

        flagged = await service.flag_transaction(created.id, Decimal("0.50"), "minor anomaly")

        assert flagged.high_risk is True

    @pytest.mark.asyncio
    async def test_clear_after_flag(self, service: TransactionService):
        created = await service.create_transaction(make_request())
        await service.flag_transaction(created.id, Decimal("0.85"), "velocity anomaly")

        cleared = await service.clear_fraud_flag(created.id)

        assert cleared.is_flagged is False
        assert cleared.fraud_score is None
        assert cleared.fraud_reason is None

    @pytest.mark.asyncio
    async def test_clear_unflagged_is_idempotent(self, service: TransactionService):
        created = await service.create_transaction(make_request())

        first = await service.clear_fraud_flag(created.id)
        second = await service.clear_fraud_flag(created.id)

        assert first.is_flagged is second.is_flagged is False


# =============================================================================
# Listing
# =============================================================================

class TestListing:

    @pytest.mark.asyncio
    async def test_requires_exactly_one_filter(self, service: TransactionService):
        with pytest.raises(InvalidTransactionDataException):
            await service.list_transactions(TransactionFilter())

        with pytest.raises(InvalidTransactionDataException):
            await service.list_transactions(TransactionFilter(user_id=1, account_id=10))

    @pytest.mark.asyncio
    async def test_list_by_user_newest_first(self, service: TransactionService):
        for days in range(3):
            await service.create_transaction(
                make_request(transaction_date=TRANSACTION_DATE + timedelta(days=days))
            )
        await service.create_transaction(make_request(user_id=2))

        page = await service.list_transactions(TransactionFilter(user_id=1))

        dates = [t.transaction_date for t in page.transactions]
        assert page.count == 3
        assert dates == sorted(dates, reverse=True)

    @pytest.mark.asyncio
    async def test_list_by_status_and_type(self, service: TransactionService):
        first = await service.create_transaction(make_request())
        await service.create_transaction(make_request(type=TransactionType.REFUND))
        await service.update_status(first.id, TransactionStatus.COMPLETED)

        completed = await service.list_transactions(
            TransactionFilter(status=TransactionStatus.COMPLETED)
        )
        refunds = await service.list_transactions(
            TransactionFilter(type=TransactionType.REFUND)
        )

        assert [t.id for t in completed.transactions] == [first.id]
        assert [t.type for t in refunds.transactions] == ["REFUND"]

    @pytest.mark.asyncio
    async def test_limit_is_clamped_to_max_page_size(self, service: TransactionService):
        for _ in range(7):
            await service.create_transaction(make_request(account_id=77))

        page = await service.list_transactions(TransactionFilter(account_id=77), limit=100)

        assert page.limit == 5
        assert page.count == 5

    @pytest.mark.asyncio
    async def test_list_flagged(self, service: TransactionService):
        first = await service.create_transaction(make_request())
        await service.create_transaction(make_request())
        await service.flag_transaction(first.id, Decimal("0.75"), "device mismatch")

        page = await service.list_flagged()

        assert [t.id for t in page.transactions] == [first.id]
        assert page.transactions[0].high_risk is True
