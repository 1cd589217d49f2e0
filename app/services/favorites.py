"""
Favorites service - tools bookmarked by a user.

Adding and removing are idempotent.
"""

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from app.db.models import AiTool, User, UserFavorite
from app.exceptions import ResourceNotFoundError

logger = get_logger(__name__)


class FavoriteService:
    """Manage a user's favorite tools."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_favorites(self, user: User) -> list[AiTool]:
        """The user's favorite tools, most recently added first."""
        stmt = (
            select(AiTool)
            .join(UserFavorite, UserFavorite.ai_tool_id == AiTool.id)
            .where(UserFavorite.user_id == user.id)
            .order_by(UserFavorite.created_at.desc(), UserFavorite.id.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def add_favorite(self, user: User, tool_id: int) -> AiTool:
        """
        Mark a tool as favorite; a no-op when it already is.

        Raises:
            ResourceNotFoundError: No tool with this id
        """
        tool = await self._get_tool(tool_id)

        if await self._find(user.id, tool_id) is not None:
            return tool

        self.db.add(UserFavorite(user_id=user.id, ai_tool_id=tool_id))
        try:
            await self.db.commit()
        except IntegrityError:
            # Concurrent request added the same favorite
            await self.db.rollback()
            return await self._get_tool(tool_id)

        logger.info("favorite_added", user_id=user.id, tool_id=tool_id)
        return tool

    async def remove_favorite(self, user: User, tool_id: int) -> None:
        """
        Remove a tool from the user's favorites; a no-op when it is not one.

        Raises:
            ResourceNotFoundError: No tool with this id
        """
        await self._get_tool(tool_id)

        result = await self.db.execute(
            delete(UserFavorite).where(
                UserFavorite.user_id == user.id, UserFavorite.ai_tool_id == tool_id
            )
        )
        await self.db.commit()

        if result.rowcount:
            logger.info("favorite_removed", user_id=user.id, tool_id=tool_id)

    async def _find(self, user_id: int, tool_id: int) -> UserFavorite | None:
        stmt = select(UserFavorite).where(
            UserFavorite.user_id == user_id, UserFavorite.ai_tool_id == tool_id
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _get_tool(self, tool_id: int) -> AiTool:
        tool = await self.db.get(AiTool, tool_id)
        if tool is None:
            raise ResourceNotFoundError("Tool", tool_id)
        return tool
