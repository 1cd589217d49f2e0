"""
Status API routes - service banner and database health check.

Public endpoints (no auth) for load balancers and status pages.
"""

import time
from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from app.api.serializers import envelope
from app.config import settings
from app.db.session import get_write_db

logger = get_logger(__name__)
router = APIRouter(tags=["status"])

DEGRADED_LATENCY_THRESHOLD = 1000  # ms


class StatusLevel(str, Enum):
    """Status levels for health checks."""

    OPERATIONAL = "operational"
    DEGRADED = "degraded"
    OUTAGE = "outage"


class DependencyStatus(BaseModel):
    """Status of a single dependency."""

    status: StatusLevel
    latency_ms: int | None = None
    last_check: str = Field(..., description="ISO 8601 timestamp")
    message: str | None = None


class HealthResponse(BaseModel):
    """Body of GET /health."""

    service: str
    status: StatusLevel
    timestamp: str = Field(..., description="ISO 8601 timestamp")
    version: str
    dependencies: dict[str, DependencyStatus]


async def check_database(db: AsyncSession) -> DependencyStatus:
    """Check database connectivity."""
    start = time.perf_counter()
    timestamp = datetime.now(UTC).isoformat()

    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("database_health_check_failed", error=str(e))
        return DependencyStatus(
            status=StatusLevel.OUTAGE,
            latency_ms=None,
            last_check=timestamp,
            message="Connection failed",
        )

    latency_ms = int((time.perf_counter() - start) * 1000)
    level = (
        StatusLevel.DEGRADED if latency_ms > DEGRADED_LATENCY_THRESHOLD else StatusLevel.OPERATIONAL
    )
    return DependencyStatus(
        status=level,
        latency_ms=latency_ms,
        last_check=timestamp,
        message="High latency" if level == StatusLevel.DEGRADED else None,
    )


def calculate_overall_status(dependencies: dict[str, DependencyStatus]) -> StatusLevel:
    """Calculate overall service status from dependency statuses."""
    statuses = [d.status for d in dependencies.values()]

    if StatusLevel.OUTAGE in statuses:
        return StatusLevel.OUTAGE
    if StatusLevel.DEGRADED in statuses:
        return StatusLevel.DEGRADED
    return StatusLevel.OPERATIONAL


@router.get("/")
async def root() -> dict[str, Any]:
    """Service banner."""
    return envelope(
        {"service": settings.api_title, "version": settings.api_version, "status": "running"},
        "AI Tool Directory API",
    )


@router.get("/health")
async def health(
    response: Response,
    db: Annotated[AsyncSession, Depends(get_write_db)],
) -> dict[str, Any]:
    """Health check; answers 503 while the database is unreachable."""
    dependencies = {"database": await check_database(db)}
    overall = calculate_overall_status(dependencies)

    body = HealthResponse(
        service=settings.service_name,
        status=overall,
        timestamp=datetime.now(UTC).isoformat(),
        version=settings.api_version,
        dependencies=dependencies,
    )

    if overall == StatusLevel.OUTAGE:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return envelope(body, "Service unavailable", success=False)
    return envelope(body, "Service healthy")
