"""
Favorite API routes - the current user's bookmarked tools.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from app.api.dependencies import get_current_user, get_favorite_service
from app.api.serializers import envelope, serialize_tool
from app.db.models import User
from app.services.favorites import FavoriteService

router = APIRouter(tags=["favorites"])

CurrentUser = Annotated[User, Depends(get_current_user)]
Favorites = Annotated[FavoriteService, Depends(get_favorite_service)]


@router.get("/favorites")
async def list_favorites(user: CurrentUser, favorites: Favorites) -> dict[str, Any]:
    """Favorite tools of the current user, newest first."""
    tools = await favorites.list_favorites(user)
    return envelope([serialize_tool(tool) for tool in tools], "Favorites retrieved successfully")


@router.post("/ai-tools/{tool_id}/favorite")
async def add_favorite(tool_id: int, user: CurrentUser, favorites: Favorites) -> dict[str, Any]:
    """Add a tool to the current user's favorites (idempotent)."""
    tool = await favorites.add_favorite(user, tool_id)
    return envelope(serialize_tool(tool), "Tool added to favorites")


@router.delete("/ai-tools/{tool_id}/favorite")
async def remove_favorite(tool_id: int, user: CurrentUser, favorites: Favorites) -> dict[str, Any]:
    """Remove a tool from the current user's favorites (idempotent)."""
    await favorites.remove_favorite(user, tool_id)
    return envelope(None, "Tool removed from favorites")
