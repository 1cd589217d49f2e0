"""
Usage API routes - record and list the current user's tool usage.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query

from app.api.dependencies import get_current_user, get_usage_service
from app.api.serializers import envelope, serialize_usage
from app.db.models import User
from app.models.api import UsageOrder, UsageRecordRequest
from app.services.usage import UsageService

router = APIRouter(tags=["usage"])

MAX_USAGE_LIMIT = 100


@router.post("/ai-tools/{tool_id}/usage")
async def record_usage(
    tool_id: int,
    user: Annotated[User, Depends(get_current_user)],
    usage: Annotated[UsageService, Depends(get_usage_service)],
    request: Annotated[UsageRecordRequest | None, Body()] = None,
) -> dict[str, Any]:
    """Count one use of a tool by the current user."""
    metadata = request.metadata if request is not None else None
    row = await usage.record_usage(user, tool_id, metadata)
    return envelope(serialize_usage(row), "Usage recorded successfully")


@router.get("/usage")
async def list_usage(
    user: Annotated[User, Depends(get_current_user)],
    usage: Annotated[UsageService, Depends(get_usage_service)],
    order: UsageOrder = UsageOrder.RECENT,
    limit: Annotated[int, Query(ge=1, le=MAX_USAGE_LIMIT)] = 10,
) -> dict[str, Any]:
    """The current user's usage counters, most recent or most used first."""
    rows = await usage.list_usage(user, order, limit)
    return envelope([serialize_usage(row) for row in rows], "Usage retrieved successfully")
