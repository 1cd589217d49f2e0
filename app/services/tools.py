"""
Tool directory service - listing, CRUD and metadata aggregation for AI tools.

Payloads are validated here, not only at the HTTP boundary: every write path
raises ValidationError with a field -> messages map before anything is written.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement
from structlog import get_logger

from app.db.models import (
    AiTool,
    AiToolRole,
    Category,
    Role,
    Tag,
    User,
    json_array_contains,
    role_tools,
)
from app.exceptions import ResourceNotFoundError, ValidationError
from app.models.api import SortOrder, ToolCreate, ToolRoleLink, ToolUpdate, field_errors
from app.models.domain import PageRequest, ToolFilters, ToolPage
from app.observability.metrics import metrics
from app.observability.tracing import trace_operation
from app.services.slugs import slugify

logger = get_logger(__name__)

NAME_TAKEN = "A tool with this name already exists."
SLUG_TAKEN = "A tool with this slug already exists."
SLUG_UNDERIVABLE = "A slug could not be derived from the name; provide one explicitly."
INVALID_USER = "The selected user is invalid."
INVALID_CATEGORIES = "One or more selected categories are invalid."
INVALID_TAGS = "One or more selected tags are invalid."
INVALID_ROLES = "One or more selected roles are invalid."

# Defaults applied on create when the payload omits the field
CREATE_DEFAULTS: dict[str, Any] = {
    "icon": "🤖",
    "color": "#3B82F6",
    "version": "1.0.0",
    "status": "active",
    "is_active": True,
    "requires_auth": False,
    "api_key_required": False,
}

# Payload keys that are not plain columns
_LINK_FIELDS = frozenset({"slug", "category_ids", "tag_ids", "roles", "metadata"})

_INVALID_LINKS = {
    "category_ids": INVALID_CATEGORIES,
    "tag_ids": INVALID_TAGS,
    "roles": INVALID_ROLES,
}


class ToolService:
    """CRUD and listing over the ai_tools table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ========================================================================
    # Reads
    # ========================================================================

    async def list_tools(self, filters: ToolFilters, page_request: PageRequest) -> ToolPage:
        """
        Filter, search, sort and paginate tools.

        Filters are AND-combined; search is a case-insensitive substring match
        on name, description or author_name. Unknown sort fields fall back to
        id order.
        """
        stmt = select(AiTool)

        if not filters.include_inactive:
            stmt = stmt.where(AiTool.is_active.is_(True))
        if filters.category:
            stmt = stmt.where(AiTool.category == filters.category)
        if filters.tool_type:
            stmt = stmt.where(AiTool.tool_type == filters.tool_type)
        if filters.team:
            stmt = stmt.where(AiTool.team == filters.team)
        if filters.tag:
            stmt = stmt.where(json_array_contains(AiTool.tags, filters.tag, self._dialect_name()))
        if filters.search:
            stmt = stmt.where(
                or_(
                    AiTool.name.icontains(filters.search, autoescape=True),
                    AiTool.description.icontains(filters.search, autoescape=True),
                    AiTool.author_name.icontains(filters.search, autoescape=True),
                )
            )

        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = (await self.db.execute(count_stmt)).scalar_one()

        stmt = (
            stmt.order_by(*self._ordering(filters))
            .offset(page_request.offset)
            .limit(page_request.per_page)
        )
        result = await self.db.execute(stmt)
        items = list(result.scalars().all())

        metrics.record_tool_operation("list", "success")
        logger.debug(
            "tools_listed",
            total=total,
            page=page_request.page,
            per_page=page_request.per_page,
        )

        return ToolPage(
            items=items, total=total, page=page_request.page, per_page=page_request.per_page
        )

    async def get_tool(self, tool_id: int) -> AiTool:
        """
        Fetch one tool with its creator and links.

        Raises:
            ResourceNotFoundError: No tool with this id
        """
        stmt = (
            select(AiTool)
            .where(AiTool.id == tool_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        tool = result.scalar_one_or_none()
        if tool is None:
            raise ResourceNotFoundError("Tool", tool_id)
        return tool

    async def list_categories(self) -> list[str]:
        """Sorted distinct non-empty categories of active tools."""
        return await self._distinct_values(AiTool.category)

    async def list_teams(self) -> list[str]:
        """Sorted distinct non-empty teams of active tools."""
        return await self._distinct_values(AiTool.team)

    async def list_tags(self) -> list[str]:
        """Sorted distinct tag strings across active tools."""
        stmt = select(AiTool.tags).where(AiTool.is_active.is_(True), AiTool.tags.is_not(None))
        result = await self.db.execute(stmt)

        values: set[str] = set()
        for tags in result.scalars():
            for tag in tags or []:
                if isinstance(tag, str) and tag.strip():
                    values.add(tag)
        return sorted(values)

    # ========================================================================
    # Role access
    # ========================================================================

    async def accessible_tools(self, user: User) -> list[AiTool]:
        """Tools the user's role is linked to; a user without a role reaches none."""
        if user.role_id is None:
            return []
        result = await self.db.execute(role_tools(user.role_id))
        return list(result.scalars().all())

    async def role_link(self, user: User, tool_id: int) -> AiToolRole | None:
        """The link between the user's role and a tool, if there is one."""
        if user.role_id is None:
            return None
        stmt = select(AiToolRole).where(
            AiToolRole.ai_tool_id == tool_id, AiToolRole.role_id == user.role_id
        )
        return await self.db.scalar(stmt)

    async def can_access_tool(self, user: User, tool_id: int) -> bool:
        return await self.role_link(user, tool_id) is not None

    # ========================================================================
    # Writes
    # ========================================================================

    async def create_tool(self, data: Mapping[str, Any]) -> AiTool:
        """
        Validate and persist a new tool.

        Raises:
            ValidationError: Payload violates a rule, or name/slug already taken
        """
        with trace_operation("tool_create") as span:
            payload = _parse(ToolCreate, data)
            errors: dict[str, list[str]] = {}

            slug = payload.slug or slugify(payload.name)
            if not slug:
                errors.setdefault("slug", []).append(SLUG_UNDERIVABLE)

            await self._check_unique(payload.name, slug or None, errors)
            await self._check_user(payload.user_id, errors)
            categories = await self._load_linked(
                Category, payload.category_ids, "category_ids", errors
            )
            tags = await self._load_linked(Tag, payload.tag_ids, "tag_ids", errors)
            role_links = _dedupe_roles(payload.roles or [])
            await self._load_linked(Role, list(role_links), "roles", errors)

            if errors:
                metrics.record_tool_operation("create", "invalid")
                logger.info("tool_create_rejected", fields=sorted(errors))
                raise ValidationError(errors)

            columns = payload.model_dump(mode="json", exclude=_LINK_FIELDS)
            for key, default in CREATE_DEFAULTS.items():
                if columns.get(key) is None:
                    columns[key] = default

            tool = AiTool(**columns, slug=slug, tool_metadata=payload.metadata)
            tool.categories = categories
            tool.linked_tags = tags
            tool.role_links = [
                AiToolRole(
                    role_id=role_id,
                    access_level=link.access_level.value,
                    custom_permissions=link.custom_permissions,
                )
                for role_id, link in role_links.items()
            ]

            self.db.add(tool)
            await self._commit("create")

            span.set_attribute("tool_id", tool.id)
            metrics.record_tool_operation("create", "success")
            logger.info("tool_created", tool_id=tool.id, slug=tool.slug, user_id=tool.user_id)

            return await self.get_tool(tool.id)

    async def update_tool(self, tool_id: int, data: Mapping[str, Any]) -> AiTool:
        """
        Apply a partial update; only fields present in the payload are validated.

        Link lists (category_ids, tag_ids, roles) replace the existing links
        when present.

        Raises:
            ResourceNotFoundError: No tool with this id
            ValidationError: Payload violates a rule, or name/slug already taken
        """
        with trace_operation("tool_update", tool_id=tool_id):
            tool = await self.get_tool(tool_id)
            payload = _parse(ToolUpdate, data)
            present = payload.model_fields_set
            errors: dict[str, list[str]] = {}

            name = payload.name if "name" in present else None
            slug = payload.slug if "slug" in present else None
            await self._check_unique(name, slug, errors, exclude_id=tool.id)
            if "user_id" in present and payload.user_id is not None:
                await self._check_user(payload.user_id, errors)

            categories = tags = None
            role_links: dict[int, ToolRoleLink] | None = None
            if "category_ids" in present:
                categories = await self._load_linked(
                    Category, payload.category_ids, "category_ids", errors
                )
            if "tag_ids" in present:
                tags = await self._load_linked(Tag, payload.tag_ids, "tag_ids", errors)
            if "roles" in present:
                role_links = _dedupe_roles(payload.roles or [])
                await self._load_linked(Role, list(role_links), "roles", errors)

            if errors:
                metrics.record_tool_operation("update", "invalid")
                logger.info("tool_update_rejected", tool_id=tool_id, fields=sorted(errors))
                raise ValidationError(errors)

            changes = payload.model_dump(mode="json", include=present - _LINK_FIELDS)
            for key, value in changes.items():
                setattr(tool, key, value)
            if "slug" in present:
                tool.slug = slug
            if "metadata" in present:
                tool.tool_metadata = payload.metadata

            if categories is not None:
                tool.categories = categories
            if tags is not None:
                tool.linked_tags = tags
            if role_links is not None:
                self._sync_roles(tool, role_links)

            await self._commit("update")

            metrics.record_tool_operation("update", "success")
            logger.info("tool_updated", tool_id=tool.id, fields=sorted(present))

            return await self.get_tool(tool.id)

    async def delete_tool(self, tool_id: int) -> None:
        """
        Hard-delete a tool. Pivot, usage and favorite rows go with it through
        the foreign-key cascade.

        Raises:
            ResourceNotFoundError: No tool with this id
        """
        with trace_operation("tool_delete", tool_id=tool_id):
            exists = await self.db.scalar(select(AiTool.id).where(AiTool.id == tool_id))
            if exists is None:
                metrics.record_tool_operation("delete", "not_found")
                raise ResourceNotFoundError("Tool", tool_id)

            await self.db.execute(delete(AiTool).where(AiTool.id == tool_id))
            await self.db.commit()

            metrics.record_tool_operation("delete", "success")
            logger.info("tool_deleted", tool_id=tool_id)

    # ========================================================================
    # Helpers
    # ========================================================================

    def _dialect_name(self) -> str:
        return self.db.get_bind().dialect.name

    @staticmethod
    def _ordering(filters: ToolFilters) -> list[ColumnElement[Any]]:
        field = filters.sort_field
        if field is None:
            return [AiTool.id.asc()]

        column = getattr(AiTool, field.value)
        if filters.sort_order == SortOrder.ASC:
            return [column.asc(), AiTool.id.asc()]
        return [column.desc(), AiTool.id.desc()]

    async def _distinct_values(self, column: Any) -> list[str]:
        stmt = (
            select(column)
            .where(AiTool.is_active.is_(True), column.is_not(None), column != "")
            .distinct()
            .order_by(column)
        )
        result = await self.db.execute(stmt)
        return [value for value in result.scalars() if value.strip()]

    async def _check_unique(
        self,
        name: str | None,
        slug: str | None,
        errors: dict[str, list[str]],
        exclude_id: int | None = None,
    ) -> None:
        for column, value, field, message in (
            (AiTool.name, name, "name", NAME_TAKEN),
            (AiTool.slug, slug, "slug", SLUG_TAKEN),
        ):
            if value is None:
                continue
            stmt = select(AiTool.id).where(column == value)
            if exclude_id is not None:
                stmt = stmt.where(AiTool.id != exclude_id)
            if await self.db.scalar(stmt.limit(1)) is not None:
                errors.setdefault(field, []).append(message)

    async def _check_user(self, user_id: int, errors: dict[str, list[str]]) -> None:
        if await self.db.scalar(select(User.id).where(User.id == user_id)) is None:
            errors.setdefault("user_id", []).append(INVALID_USER)

    async def _load_linked(
        self,
        model: type[Category] | type[Tag] | type[Role],
        ids: Sequence[int] | None,
        field: str,
        errors: dict[str, list[str]],
    ) -> list[Any]:
        if not ids:
            return []
        wanted = set(ids)
        result = await self.db.execute(select(model).where(model.id.in_(wanted)))
        found = list(result.scalars().all())
        if len(found) != len(wanted):
            errors.setdefault(field, []).append(_INVALID_LINKS[field])
        return found

    @staticmethod
    def _sync_roles(tool: AiTool, role_links: dict[int, ToolRoleLink]) -> None:
        # Keep rows for roles that stay linked so the (tool, role) pair is never re-inserted
        kept: list[AiToolRole] = []
        for existing in tool.role_links:
            link = role_links.get(existing.role_id)
            if link is None:
                continue
            existing.access_level = link.access_level.value
            existing.custom_permissions = link.custom_permissions
            kept.append(existing)

        linked = {row.role_id for row in kept}
        for role_id, link in role_links.items():
            if role_id not in linked:
                kept.append(
                    AiToolRole(
                        role_id=role_id,
                        access_level=link.access_level.value,
                        custom_permissions=link.custom_permissions,
                    )
                )
        tool.role_links = kept

    async def _commit(self, operation: str) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            metrics.record_tool_operation(operation, "conflict")
            logger.warning("tool_integrity_error", operation=operation, error=str(e.orig))
            raise _conflict_error(e) from None


def _parse(model: type[ToolCreate] | type[ToolUpdate], data: Mapping[str, Any]) -> Any:
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(field_errors(e.errors())) from None


def _dedupe_roles(links: Sequence[ToolRoleLink]) -> dict[int, ToolRoleLink]:
    # Last entry wins for a role listed twice
    return {link.role_id: link for link in links}


def _conflict_error(error: IntegrityError) -> ValidationError:
    """Map a storage-level constraint violation raced past the pre-checks."""
    text = str(error.orig).lower()
    if "slug" in text:
        return ValidationError.for_field("slug", SLUG_TAKEN)
    if "ai_tools.name" in text or "uq_ai_tools_name" in text:
        return ValidationError.for_field("name", NAME_TAKEN)
    if "foreign key" in text:
        return ValidationError.for_field("user_id", INVALID_USER)
    return ValidationError.for_field("tool", "The tool conflicts with existing data.")
