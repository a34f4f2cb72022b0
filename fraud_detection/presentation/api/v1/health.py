"""Health and readiness endpoints for service monitoring."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fraud_detection import __version__
from fraud_detection.core.config import settings
from fraud_detection.infrastructure.database import get_db_session

logger = structlog.get_logger(__name__)

health_router = APIRouter(prefix="/health")


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str


class ReadyResponse(BaseModel):
    """Readiness check response."""

    status: str
    database: str


@health_router.get(
    "",
    response_model=HealthResponse,
    summary="Health Check",
    description="Returns 200 while the process is up. Does not touch the database.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        service=settings.app_name,
        version=__version__,
    )


@health_router.get(
    "/ready",
    response_model=ReadyResponse,
    summary="Readiness Check",
    description="Returns 200 when the transaction store answers, 503 otherwise.",
    responses={503: {"model": ReadyResponse}},
)
async def readiness_check(
    session: Annotated[AsyncSession, Depends(get_db_session)],
):
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("readiness_check_failed", error=str(e))
        return JSONResponse(
            status_code=503,
            content=ReadyResponse(status="unavailable", database="unreachable").model_dump(),
        )
    return ReadyResponse(status="ready", database="connected")
