"""
Usage service - per-user, per-tool usage counters.

One row per (user, tool); recording a use increments the counter atomically
and stamps last_used_at.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from app.db.models import AiTool, AiToolUsage, User
from app.exceptions import ResourceNotFoundError
from app.models.api import UsageOrder

logger = get_logger(__name__)


class UsageService:
    """Record and list tool usage."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record_usage(
        self, user: User, tool_id: int, metadata: dict[str, Any] | None = None
    ) -> AiToolUsage:
        """
        Count one use of a tool by a user.

        Raises:
            ResourceNotFoundError: No tool with this id
        """
        if await self.db.get(AiTool, tool_id) is None:
            raise ResourceNotFoundError("Tool", tool_id)

        now = datetime.now(UTC)
        if not await self._increment(user.id, tool_id, now, metadata):
            self.db.add(
                AiToolUsage(
                    user_id=user.id,
                    ai_tool_id=tool_id,
                    usage_count=1,
                    last_used_at=now,
                    usage_metadata=metadata,
                )
            )
            try:
                await self.db.commit()
            except IntegrityError:
                # First use raced with another request; count on the row it created
                await self.db.rollback()
                await self._increment(user.id, tool_id, now, metadata)

        usage = await self._find(user.id, tool_id)
        if usage is None:
            raise ResourceNotFoundError("Usage", f"{user.id}:{tool_id}")

        logger.info(
            "tool_usage_recorded",
            user_id=user.id,
            tool_id=tool_id,
            usage_count=usage.usage_count,
        )
        return usage

    async def list_usage(
        self, user: User, order: UsageOrder = UsageOrder.RECENT, limit: int = 10
    ) -> list[AiToolUsage]:
        """The user's usage rows, most used or most recent first."""
        stmt = select(AiToolUsage).where(AiToolUsage.user_id == user.id)
        if order == UsageOrder.MOST_USED:
            stmt = stmt.order_by(
                AiToolUsage.usage_count.desc(), AiToolUsage.last_used_at.desc()
            )
        else:
            stmt = stmt.order_by(AiToolUsage.last_used_at.desc(), AiToolUsage.id.desc())

        result = await self.db.execute(stmt.limit(limit))
        return list(result.scalars().all())

    async def _increment(
        self, user_id: int, tool_id: int, now: datetime, metadata: dict[str, Any] | None
    ) -> bool:
        values: dict[Any, Any] = {
            AiToolUsage.usage_count: AiToolUsage.usage_count + 1,
            AiToolUsage.last_used_at: now,
            AiToolUsage.updated_at: now,
        }
        if metadata is not None:
            values[AiToolUsage.usage_metadata] = metadata

        result = await self.db.execute(
            update(AiToolUsage)
            .where(AiToolUsage.user_id == user_id, AiToolUsage.ai_tool_id == tool_id)
            .values(values)
        )
        await self.db.commit()
        return bool(result.rowcount)

    async def _find(self, user_id: int, tool_id: int) -> AiToolUsage | None:
        stmt = (
            select(AiToolUsage)
            .where(AiToolUsage.user_id == user_id, AiToolUsage.ai_tool_id == tool_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
