"""
API Models - Pydantic models for request validation and response bodies.

Tool payloads are validated by the tool service itself (so that direct callers
get the same field -> messages errors as HTTP clients); the remaining request
bodies are validated by FastAPI at the route boundary.
"""

import re
from collections.abc import Iterable, Mapping
from datetime import datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    TypeAdapter,
    field_validator,
)

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
SLUG_MESSAGE = "The slug may only contain lowercase letters, numbers, and hyphens."
NOT_NULL_MESSAGE = "This field may not be null."

_http_url = TypeAdapter(AnyHttpUrl)

# Request locations FastAPI prefixes onto error locations
_LOCATION_PREFIXES = frozenset({"body", "query", "path", "header", "cookie"})


class ToolType(str, Enum):
    """Kind of tool listed in the directory."""

    LIBRARY = "library"
    APPLICATION = "application"
    FRAMEWORK = "framework"
    API = "api"
    SERVICE = "service"


class ToolStatus(str, Enum):
    """Lifecycle status of a tool."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"
    BETA = "beta"


class AccessLevel(str, Enum):
    """Access a role has on a tool."""

    READ = "read"
    WRITE = "write"
    ADMIN = "admin"


class SortField(str, Enum):
    """Recognised tool listing sort fields."""

    NAME = "name"
    CATEGORY = "category"
    RATING = "rating"
    CREATED_AT = "created_at"


class SortOrder(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class UsageOrder(str, Enum):
    """Ordering of a user's usage logs."""

    MOST_USED = "most_used"
    RECENT = "recent"


class TaxonomyKind(str, Enum):
    """Taxonomy collections exposed by the API."""

    CATEGORIES = "categories"
    ROLES = "roles"
    TAGS = "tags"


def field_errors(errors: Iterable[Mapping[str, Any]]) -> dict[str, list[str]]:
    """
    Flatten pydantic error entries into a field -> messages map.

    Nested locations are joined with dots (tags.0, roles.1.access_level); the
    request location prefix FastAPI adds ("body", "query", ...) is dropped.
    """
    flattened: dict[str, list[str]] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if len(loc) > 1 and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        field = ".".join(loc) or "body"
        message = str(error.get("msg", "Invalid value")).removeprefix("Value error, ")
        messages = flattened.setdefault(field, [])
        if message not in messages:
            messages.append(message)
    return flattened


def _check_url(value: str | None) -> str | None:
    if value is None:
        return None
    try:
        _http_url.validate_python(value)
    except ValueError:
        raise ValueError("The value must be a valid URL.") from None
    return value


def _check_slug(value: str | None) -> str | None:
    if value is not None and not SLUG_PATTERN.match(value):
        raise ValueError(SLUG_MESSAGE)
    return value


# ============================================================================
# Authentication Models
# ============================================================================


class LoginRequest(BaseModel):
    """POST /login request body."""

    # Plain pattern check: seed accounts use reserved ".local" domains
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=1)


# ============================================================================
# Tool Models
# ============================================================================


class ToolRoleLink(BaseModel):
    """A role attached to a tool with its access level."""

    role_id: int = Field(..., ge=1)
    access_level: AccessLevel = AccessLevel.READ
    custom_permissions: list[str] | None = None


TagName = Annotated[str, Field(min_length=1, max_length=50)]


class _ToolFields(BaseModel):
    """Optional tool fields shared by create and update payloads."""

    # Strings are trimmed before length checks, so blank values fail min_length
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    slug: str | None = Field(None, min_length=1, max_length=255)
    long_description: str | None = Field(None, max_length=5000)
    category: str | None = Field(None, max_length=100)
    url: str | None = Field(None, max_length=500)
    api_endpoint: str | None = Field(None, max_length=500)
    documentation_url: str | None = Field(None, max_length=500)
    github_url: str | None = Field(None, max_length=500)
    author_name: str | None = Field(None, max_length=255)
    author_email: EmailStr | None = None
    team: str | None = Field(None, max_length=100)
    tags: list[TagName] | None = None
    use_case: str | None = None
    pros: str | None = None
    cons: str | None = None
    rating: int | None = Field(None, ge=1, le=5)
    icon: str | None = Field(None, max_length=50)
    color: str | None = Field(None, max_length=20)
    version: str | None = Field(None, max_length=20)
    status: ToolStatus | None = None
    is_active: bool | None = None
    requires_auth: bool | None = None
    api_key_required: bool | None = None
    usage_limit: int | None = Field(None, ge=0)
    metadata: dict[str, Any] | None = None
    category_ids: list[int] | None = None
    tag_ids: list[int] | None = None
    roles: list[ToolRoleLink] | None = None

    @field_validator("url", "api_endpoint", "documentation_url", "github_url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        """URLs must be absolute http(s) URLs; the original string is kept."""
        return _check_url(v)

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str | None) -> str | None:
        """Slugs are lowercase letters, digits and hyphens."""
        return _check_slug(v)


class ToolCreate(_ToolFields):
    """POST /ai-tools payload."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    tool_type: ToolType
    user_id: int = Field(..., ge=1)


class ToolUpdate(_ToolFields):
    """PUT/PATCH /ai-tools/{id} payload - every field validated only when present."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, min_length=1)
    tool_type: ToolType | None = None
    user_id: int | None = Field(None, ge=1)

    @field_validator(
        "name",
        "description",
        "tool_type",
        "user_id",
        "slug",
        "version",
        "status",
        "is_active",
        "requires_auth",
        "api_key_required",
        mode="before",
    )
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        """Non-nullable columns can be omitted but not cleared."""
        if v is None:
            raise ValueError(NOT_NULL_MESSAGE)
        return v


# ============================================================================
# Taxonomy Models
# ============================================================================


class _TaxonomyCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    slug: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    is_active: bool = True

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str | None) -> str | None:
        return _check_slug(v)


class CategoryCreate(_TaxonomyCreate):
    """POST /categories request body."""

    icon: str | None = Field(None, max_length=50)
    color: str | None = Field(None, max_length=20)
    role_ids: list[int] | None = None


class RoleCreate(_TaxonomyCreate):
    """POST /roles request body."""

    permissions: list[Annotated[str, Field(min_length=1, max_length=100)]] = Field(
        default_factory=list
    )


class TagCreate(_TaxonomyCreate):
    """POST /tags request body."""

    color: str | None = Field(None, max_length=20)
    icon: str | None = Field(None, max_length=50)


# ============================================================================
# Usage Models
# ============================================================================


class UsageRecordRequest(BaseModel):
    """POST /ai-tools/{id}/usage request body (optional)."""

    metadata: dict[str, Any] | None = None


# ============================================================================
# Response Models
# ============================================================================


class RoleResponse(BaseModel):
    """Structured role; id and slug are null for users without a role."""

    id: int | None
    name: str
    slug: str | None


class CreatorResponse(BaseModel):
    """The user who added a tool."""

    id: int
    name: str
    email: str
    role: RoleResponse


class UserResponse(CreatorResponse):
    """Authenticated user - never carries the password hash."""

    role_name: str
    is_active: bool
    last_login_at: datetime | None
    email_verified_at: datetime | None
    created_at: datetime
    updated_at: datetime


class CategoryResponse(BaseModel):
    """Category entry."""

    id: int
    name: str
    slug: str
    description: str | None
    icon: str | None
    color: str | None
    is_active: bool
    role_ids: list[int] = Field(default_factory=list)


class TagResponse(BaseModel):
    """Tag entry with display defaults applied."""

    id: int
    name: str
    slug: str
    description: str | None
    color: str
    icon: str
    is_active: bool


class RoleDetailResponse(BaseModel):
    """Role entry as listed by the roles collection."""

    id: int
    name: str
    slug: str
    description: str | None
    permissions: list[str]
    is_active: bool


class ToolRoleResponse(BaseModel):
    """A role linked to a tool."""

    id: int
    name: str
    slug: str
    access_level: AccessLevel
    custom_permissions: list[str] | None


class ToolResponse(BaseModel):
    """Full tool record with its creator and linked entities."""

    id: int
    name: str
    slug: str
    description: str
    long_description: str | None
    category: str | None
    tool_type: str
    team: str | None
    tags: list[str]
    url: str | None
    api_endpoint: str | None
    documentation_url: str | None
    github_url: str | None
    author_name: str | None
    author_email: str | None
    use_case: str | None
    pros: str | None
    cons: str | None
    rating: int | None
    icon: str | None
    color: str | None
    version: str
    status: str
    is_active: bool
    requires_auth: bool
    api_key_required: bool
    usage_limit: int | None
    metadata: dict[str, Any] | None
    user_id: int
    user: CreatorResponse | None
    categories: list[CategoryResponse]
    roles: list[ToolRoleResponse]
    linked_tags: list[TagResponse]
    created_at: datetime
    updated_at: datetime


class UsageResponse(BaseModel):
    """A user's usage counter for one tool."""

    id: int
    ai_tool_id: int
    usage_count: int
    last_used_at: datetime | None
    metadata: dict[str, Any] | None
    tool: ToolResponse | None
