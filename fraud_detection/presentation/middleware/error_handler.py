"""Error handling middleware and exception handlers."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

from fraud_detection.domain.exceptions import (
    DomainException,
    InvalidTransactionDataException,
    TransactionNotFoundException,
)
from .request_context import get_request_id

logger = structlog.get_logger(__name__)


def _error_response(status_code: int, exc: DomainException, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            **exc.to_dict(),
            "request_id": get_request_id(),
            **extra,
        },
    )


def error_handler_middleware(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI app.

    Maps domain exceptions to appropriate HTTP responses.
    """

    @app.exception_handler(TransactionNotFoundException)
    async def transaction_not_found_handler(
        request: Request,
        exc: TransactionNotFoundException,
    ) -> JSONResponse:
        """Handle transaction not found errors."""
        return _error_response(404, exc)

    @app.exception_handler(InvalidTransactionDataException)
    async def invalid_transaction_handler(
        request: Request,
        exc: InvalidTransactionDataException,
    ) -> JSONResponse:
        """Handle validation-rule violations."""
        violations = [
            v.to_dict() if hasattr(v, "to_dict") else {"field": "", "message": str(v)}
            for v in exc.violations
        ]
        return _error_response(400, exc, violations=violations or None)

    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        """Handle generic domain exceptions."""
        logger.warning(
            "domain_exception",
            request_id=get_request_id(),
            code=exc.code,
            message=exc.message,
        )
        return _error_response(400, exc)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "unhandled_exception",
            request_id=get_request_id(),
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "INTERNAL_ERROR",
                "message": "An unexpected error occurred.",
                "request_id": get_request_id(),
            },
        )
