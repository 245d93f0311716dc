"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_module.infrastructure.cache import get_cache_manager
from catalog_module.infrastructure.config import settings
from catalog_module.infrastructure.database import get_session

router = APIRouter()

logger = structlog.get_logger()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response schema."""

    status: str
    database: str
    cache_entries: dict[str, int]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    return HealthResponse(
        status="healthy",
        service="catalog-module",
        version=settings.api_version,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse}},
)
async def readiness_check(
    session: Annotated[AsyncSession, Depends(get_session)],
):
    """Check if the database answers and report cache region sizes.

    Returns:
        Readiness status; 503 when the database is unreachable.
    """
    cache_entries = {region.name: len(region) for region in get_cache_manager().regions}
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Database not ready", error=str(e))
        return JSONResponse(
            status_code=503,
            content=ReadinessResponse(
                status="unavailable", database="unreachable", cache_entries=cache_entries
            ).model_dump(),
        )
    return ReadinessResponse(status="ready", database="ok", cache_entries=cache_entries)
