"""Transaction API endpoints."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query

from fraud_detection.application.dto import (
    CreateTransactionRequest,
    TransactionFilter,
    TransactionListResponse,
    TransactionResponse,
)
from fraud_detection.application.services import TransactionService
from fraud_detection.core.dependencies import get_transaction_service
from fraud_detection.domain.entities import TransactionStatus, TransactionType
from fraud_detection.presentation.schemas import (
    ErrorResponseSchema,
    FraudFlagSchema,
    StatusUpdateSchema,
    TransactionCreateSchema,
    TransactionListResponseSchema,
    TransactionResponseSchema,
)

transaction_router = APIRouter(
    prefix="/transactions",
    responses={
        400: {"model": ErrorResponseSchema, "description": "Invalid transaction data"},
    },
)

NOT_FOUND = {404: {"model": ErrorResponseSchema, "description": "Transaction not found"}}

TransactionId = Annotated[int, Path(ge=1, description="Transaction identifier")]
Service = Annotated[TransactionService, Depends(get_transaction_service)]


def _to_schema(response: TransactionResponse) -> TransactionResponseSchema:
    return TransactionResponseSchema.model_validate(response)


def _to_page(response: TransactionListResponse) -> TransactionListResponseSchema:
    return TransactionListResponseSchema(
        transactions=[_to_schema(t) for t in response.transactions],
        count=response.count,
        limit=response.limit,
        offset=response.offset,
    )


@transaction_router.post(
    "",
    response_model=TransactionResponseSchema,
    status_code=201,
    summary="Record Transaction",
    description="Record a new transaction. It always starts PENDING and unflagged.",
)
async def create_transaction(
    request: TransactionCreateSchema,
    transaction_service: Service,
) -> TransactionResponseSchema:
    dto = CreateTransactionRequest(**request.model_dump())
    response = await transaction_service.create_transaction(dto)
    return _to_schema(response)


@transaction_router.get(
    "",
    response_model=TransactionListResponseSchema,
    summary="List Transactions",
    description="""
    List transactions by exactly one of user_id, account_id, status or type.

    Results are ordered by transaction date, newest first.
    """,
)
async def list_transactions(
    transaction_service: Service,
    user_id: Annotated[Optional[int], Query()] = None,
    account_id: Annotated[Optional[int], Query()] = None,
    status: Annotated[Optional[TransactionStatus], Query()] = None,
    type: Annotated[Optional[TransactionType], Query()] = None,
    limit: Annotated[Optional[int], Query(ge=1)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> TransactionListResponseSchema:
    criteria = TransactionFilter(
        user_id=user_id,
        account_id=account_id,
        status=status,
        type=type,
    )
    response = await transaction_service.list_transactions(criteria, limit, offset)
    return _to_page(response)


@transaction_router.get(
    "/flagged",
    response_model=TransactionListResponseSchema,
    summary="List Flagged Transactions",
)
async def list_flagged_transactions(
    transaction_service: Service,
    limit: Annotated[Optional[int], Query(ge=1)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> TransactionListResponseSchema:
    response = await transaction_service.list_flagged(limit, offset)
    return _to_page(response)


@transaction_router.get(
    "/reference/{reference_number}",
    response_model=TransactionResponseSchema,
    summary="Get Transaction by Reference Number",
    responses=NOT_FOUND,
)
async def get_transaction_by_reference(
    reference_number: Annotated[str, Path(min_length=1, max_length=100)],
    transaction_service: Service,
) -> TransactionResponseSchema:
    response = await transaction_service.get_by_reference_number(reference_number)
    return _to_schema(response)


@transaction_router.get(
    "/{transaction_id}",
    response_model=TransactionResponseSchema,
    summary="Get Transaction",
    responses=NOT_FOUND,
)
async def get_transaction(
    transaction_id: TransactionId,
    transaction_service: Service,
) -> TransactionResponseSchema:
    response = await transaction_service.get_transaction(transaction_id)
    return _to_schema(response)


@transaction_router.patch(
    "/{transaction_id}/status",
    response_model=TransactionResponseSchema,
    summary="Update Transaction Status",
    description="Set the status. Any status may follow any other.",
    responses=NOT_FOUND,
)
async def update_transaction_status(
    transaction_id: TransactionId,
    body: StatusUpdateSchema,
    transaction_service: Service,
) -> TransactionResponseSchema:
    response = await transaction_service.update_status(transaction_id, body.status)
    return _to_schema(response)


@transaction_router.post(
    "/{transaction_id}/fraud-flag",
    response_model=TransactionResponseSchema,
    summary="Flag Transaction as Fraud",
    description="Record an externally produced fraud score and reason.",
    responses=NOT_FOUND,
)
async def flag_transaction(
    transaction_id: TransactionId,
    body: FraudFlagSchema,
    transaction_service: Service,
) -> TransactionResponseSchema:
    response = await transaction_service.flag_transaction(
        transaction_id, body.score, body.reason
    )
    return _to_schema(response)


@transaction_router.delete(
    "/{transaction_id}/fraud-flag",
    response_model=TransactionResponseSchema,
    summary="Clear Fraud Flag",
    responses=NOT_FOUND,
)
async def clear_fraud_flag(
    transaction_id: TransactionId,
    transaction_service: Service,
) -> TransactionResponseSchema:
    response = await transaction_service.clear_fraud_flag(transaction_id)
    return _to_schema(response)
