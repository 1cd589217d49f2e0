"""
Response serializers - ORM entities to response models and the JSON envelope.

Every response body is {success, data, message} plus `errors` on failures.
"""

from typing import Any

from pydantic import BaseModel

from app.db.models import AiTool, AiToolUsage, Category, Role, Tag, User
from app.models.api import (
    AccessLevel,
    CategoryResponse,
    CreatorResponse,
    RoleDetailResponse,
    RoleResponse,
    TagResponse,
    ToolResponse,
    ToolRoleResponse,
    UsageResponse,
    UserResponse,
)
from app.services.auth import resolve_role


def envelope(
    data: Any = None,
    message: str = "",
    *,
    success: bool = True,
    errors: dict[str, list[str]] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """
    Wrap a payload in the response envelope.

    Extra keyword arguments are mirrored at the top level (login returns
    `user` and `token` both inside `data` and beside it).
    """
    body: dict[str, Any] = {"success": success, "data": _dump(data), "message": message}
    if errors is not None:
        body["errors"] = errors
    for key, value in extra.items():
        body[key] = _dump(value)
    return body


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_dump(item) for item in value]
    if isinstance(value, dict):
        return {key: _dump(item) for key, item in value.items()}
    return value


def serialize_role_summary(user: User) -> RoleResponse:
    role = resolve_role(user)
    return RoleResponse(id=role.id, name=role.name, slug=role.slug)


def serialize_user(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=serialize_role_summary(user),
        role_name=user.role_name,
        is_active=user.is_active,
        last_login_at=user.last_login_at,
        email_verified_at=user.email_verified_at,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def serialize_creator(user: User) -> CreatorResponse:
    return CreatorResponse(
        id=user.id, name=user.name, email=user.email, role=serialize_role_summary(user)
    )


def serialize_category(category: Category) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        name=category.name,
        slug=category.slug,
        description=category.description,
        icon=category.icon,
        color=category.color,
        is_active=category.is_active,
        role_ids=sorted(role.id for role in category.roles),
    )


def serialize_tag(tag: Tag) -> TagResponse:
    return TagResponse(
        id=tag.id,
        name=tag.name,
        slug=tag.slug,
        description=tag.description,
        color=tag.display_color,
        icon=tag.display_icon,
        is_active=tag.is_active,
    )


def serialize_role(role: Role) -> RoleDetailResponse:
    return RoleDetailResponse(
        id=role.id,
        name=role.name,
        slug=role.slug,
        description=role.description,
        permissions=list(role.permissions or []),
        is_active=role.is_active,
    )


def serialize_tool(tool: AiTool) -> ToolResponse:
    """Tool with creator, categories, roles (by name) and tag entities."""
    role_links = sorted(tool.role_links, key=lambda link: (link.role.name, link.role_id))
    return ToolResponse(
        id=tool.id,
        name=tool.name,
        slug=tool.slug,
        description=tool.description,
        long_description=tool.long_description,
        category=tool.category,
        tool_type=tool.tool_type,
        team=tool.team,
        tags=list(tool.tags or []),
        url=tool.url,
        api_endpoint=tool.api_endpoint,
        documentation_url=tool.documentation_url,
        github_url=tool.github_url,
        author_name=tool.author_name,
        author_email=tool.author_email,
        use_case=tool.use_case,
        pros=tool.pros,
        cons=tool.cons,
        rating=tool.rating,
        icon=tool.icon,
        color=tool.color,
        version=tool.version,
        status=tool.status,
        is_active=tool.is_active,
        requires_auth=tool.requires_auth,
        api_key_required=tool.api_key_required,
        usage_limit=tool.usage_limit,
        metadata=tool.tool_metadata,
        user_id=tool.user_id,
        user=serialize_creator(tool.user) if tool.user is not None else None,
        categories=[serialize_category(category) for category in tool.categories],
        roles=[
            ToolRoleResponse(
                id=link.role.id,
                name=link.role.name,
                slug=link.role.slug,
                access_level=AccessLevel(link.access_level),
                custom_permissions=link.custom_permissions,
            )
            for link in role_links
        ],
        linked_tags=[serialize_tag(tag) for tag in tool.linked_tags],
        created_at=tool.created_at,
        updated_at=tool.updated_at,
    )


def serialize_usage(usage: AiToolUsage) -> UsageResponse:
    return UsageResponse(
        id=usage.id,
        ai_tool_id=usage.ai_tool_id,
        usage_count=usage.usage_count,
        last_used_at=usage.last_used_at,
        metadata=usage.usage_metadata,
        tool=serialize_tool(usage.tool) if usage.tool is not None else None,
    )
