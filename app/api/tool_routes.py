"""
Tool API routes - directory listing, CRUD and metadata lookups.

Tool payloads are passed to the service as raw JSON objects; the service
validates them and reports field -> messages errors.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request, status

from app.api.dependencies import get_current_user, get_tool_reader, get_tool_service
from app.api.pagination import paginate
from app.api.serializers import envelope, serialize_tool
from app.config import settings
from app.db.models import User
from app.models.api import SortField, SortOrder
from app.models.domain import PageRequest, ToolFilters
from app.services.tools import ToolService

router = APIRouter(tags=["tools"])


# =============================================================================
# Listing
# =============================================================================


@router.get("/ai-tools")
async def list_tools(
    request: Request,
    tools: Annotated[ToolService, Depends(get_tool_reader)],
    category: str | None = None,
    tool_type: Annotated[str | None, Query(alias="type")] = None,
    team: str | None = None,
    tag: str | None = None,
    search: str | None = None,
    sort_by: str = SortField.CREATED_AT.value,
    sort_order: SortOrder = SortOrder.DESC,
    include_inactive: bool = False,
    per_page: Annotated[int, Query(ge=1, le=settings.max_per_page)] = settings.default_per_page,
    page: Annotated[int, Query(ge=1)] = 1,
) -> dict[str, Any]:
    """
    Filtered, sorted, paginated tool listing.

    Filters are AND-combined; `search` matches name, description or author.
    Unknown `sort_by` values are ignored.
    """
    filters = ToolFilters(
        category=category or None,
        tool_type=tool_type or None,
        team=team or None,
        tag=tag or None,
        search=search or None,
        include_inactive=include_inactive,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    result = await tools.list_tools(filters, PageRequest(page=page, per_page=per_page))
    items = [serialize_tool(tool).model_dump(mode="json") for tool in result.items]
    return envelope(paginate(request, result, items), "Tools retrieved successfully")


# =============================================================================
# CRUD
# =============================================================================


@router.post("/ai-tools", status_code=status.HTTP_201_CREATED)
async def create_tool(
    tools: Annotated[ToolService, Depends(get_tool_service)],
    payload: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    """Create a tool. Requires name, description, tool_type and user_id."""
    tool = await tools.create_tool(payload)
    return envelope(serialize_tool(tool), "Tool created successfully")


@router.get("/ai-tools/{tool_id}")
async def get_tool(
    tool_id: int,
    tools: Annotated[ToolService, Depends(get_tool_service)],
) -> dict[str, Any]:
    """Fetch one tool with its creator and links."""
    tool = await tools.get_tool(tool_id)
    return envelope(serialize_tool(tool), "Tool retrieved successfully")


@router.api_route("/ai-tools/{tool_id}", methods=["PUT", "PATCH"])
async def update_tool(
    tool_id: int,
    tools: Annotated[ToolService, Depends(get_tool_service)],
    payload: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    """Partial update; only the fields sent are validated and changed."""
    tool = await tools.update_tool(tool_id, payload)
    return envelope(serialize_tool(tool), "Tool updated successfully")


@router.delete("/ai-tools/{tool_id}")
async def delete_tool(
    tool_id: int,
    tools: Annotated[ToolService, Depends(get_tool_service)],
) -> dict[str, Any]:
    """Hard delete; links, usage counters and favorites go with the tool."""
    await tools.delete_tool(tool_id)
    return envelope(None, "Tool deleted successfully")


# =============================================================================
# Metadata
# =============================================================================


@router.get("/ai-tools-meta/categories")
async def list_tool_categories(
    tools: Annotated[ToolService, Depends(get_tool_reader)],
) -> dict[str, Any]:
    """Distinct categories of active tools, sorted."""
    return envelope(await tools.list_categories(), "Categories retrieved successfully")


@router.get("/ai-tools-meta/teams")
async def list_tool_teams(
    tools: Annotated[ToolService, Depends(get_tool_reader)],
) -> dict[str, Any]:
    """Distinct teams of active tools, sorted."""
    return envelope(await tools.list_teams(), "Teams retrieved successfully")


@router.get("/ai-tools-meta/tags")
async def list_tool_tags(
    tools: Annotated[ToolService, Depends(get_tool_reader)],
) -> dict[str, Any]:
    """Distinct tag values of active tools, sorted."""
    return envelope(await tools.list_tags(), "Tags retrieved successfully")


# =============================================================================
# Role access
# =============================================================================


@router.get("/user/tools")
async def list_accessible_tools(
    user: Annotated[User, Depends(get_current_user)],
    tools: Annotated[ToolService, Depends(get_tool_reader)],
) -> dict[str, Any]:
    """Tools linked to the current user's role, ordered by name."""
    accessible = await tools.accessible_tools(user)
    return envelope(
        [serialize_tool(tool) for tool in accessible], "Accessible tools retrieved successfully"
    )


@router.get("/user/tools/{tool_id}")
async def get_tool_access(
    tool_id: int,
    user: Annotated[User, Depends(get_current_user)],
    tools: Annotated[ToolService, Depends(get_tool_reader)],
) -> dict[str, Any]:
    """Whether the current user's role reaches a tool, and with which access level."""
    await tools.get_tool(tool_id)
    link = await tools.role_link(user, tool_id)
    return envelope(
        {
            "tool_id": tool_id,
            "can_access": link is not None,
            "access_level": link.access_level if link else None,
            "custom_permissions": link.custom_permissions if link else None,
        },
        "Tool access retrieved successfully",
    )
