"""
Domain Models - Internal service inputs and outputs using dataclasses.

All data structures are strongly typed immutable dataclasses; ORM entities
stay inside the service layer and are carried here only by reference.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from app.models.api import SortField, SortOrder

if TYPE_CHECKING:
    from app.db.models import AiTool, User


@dataclass(frozen=True)
class ToolFilters:
    """Listing filters - every field optional, all of them AND-combined."""

    category: str | None = None
    tool_type: str | None = None
    team: str | None = None
    tag: str | None = None
    search: str | None = None
    include_inactive: bool = False
    # Raw value; unknown fields are ignored by the listing
    sort_by: str = SortField.CREATED_AT.value
    sort_order: SortOrder = SortOrder.DESC

    @property
    def sort_field(self) -> SortField | None:
        """The recognised sort field, or None when sort_by is unknown."""
        try:
            return SortField(self.sort_by)
        except ValueError:
            return None


@dataclass(frozen=True)
class PageRequest:
    """1-based page number and page size."""

    page: int = 1
    per_page: int = 15

    def __post_init__(self) -> None:
        """Validate pagination bounds."""
        if self.page < 1:
            raise ValueError(f"page must be >= 1: {self.page}")
        if self.per_page < 1:
            raise ValueError(f"per_page must be >= 1: {self.per_page}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


@dataclass(frozen=True)
class ToolPage:
    """One page of a tool listing plus the totals needed to navigate it."""

    items: list["AiTool"]
    total: int
    page: int
    per_page: int

    @property
    def last_page(self) -> int:
        return max(math.ceil(self.total / self.per_page), 1)

    @property
    def first_item(self) -> int | None:
        """1-based index of the first item on this page (None when empty)."""
        if not self.items:
            return None
        return (self.page - 1) * self.per_page + 1

    @property
    def last_item(self) -> int | None:
        """1-based index of the last item on this page (None when empty)."""
        if not self.items:
            return None
        return (self.page - 1) * self.per_page + len(self.items)


@dataclass(frozen=True)
class RoleSummary:
    """Structured role as exposed to clients."""

    id: int | None
    name: str
    slug: str | None


@dataclass(frozen=True)
class TokenClaims:
    """Decoded bearer token claims."""

    user_id: int
    email: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class AuthResult:
    """Successful login - the user and a freshly issued token."""

    user: "User"
    token: str
