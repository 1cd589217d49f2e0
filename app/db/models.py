"""
Database Models - SQLAlchemy ORM models with strict typing.

All columns use Mapped[] type annotations. Pivot tables without payload are
plain Table objects; the tool/role pivot is an association object because it
carries an access level and custom permissions.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Select,
    String,
    Table,
    Text,
    UniqueConstraint,
    cast,
    func,
    select,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql.elements import ColumnElement

# BIGINT identity on PostgreSQL, INTEGER PRIMARY KEY (rowid alias) on SQLite
IdType = BigInteger().with_variant(Integer(), "sqlite")
JsonType = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")

DEFAULT_TAG_COLOR = "#6B7280"
DEFAULT_TAG_ICON = "🏷️"
UNKNOWN_ROLE_NAME = "Unknown"


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(UTC)


def _timestamps() -> tuple[Column[datetime], Column[datetime]]:
    return (
        Column("created_at", DateTime(timezone=True), nullable=False, default=utc_now),
        Column(
            "updated_at", DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
        ),
    )


# ============================================================================
# Pivot tables
# ============================================================================

ai_tool_category = Table(
    "ai_tool_category",
    Base.metadata,
    Column("id", IdType, primary_key=True, autoincrement=True),
    Column("ai_tool_id", IdType, ForeignKey("ai_tools.id", ondelete="CASCADE"), nullable=False),
    Column("category_id", IdType, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False),
    *_timestamps(),
    UniqueConstraint("ai_tool_id", "category_id", name="uq_ai_tool_category"),
)

ai_tool_tag = Table(
    "ai_tool_tag",
    Base.metadata,
    Column("id", IdType, primary_key=True, autoincrement=True),
    Column("ai_tool_id", IdType, ForeignKey("ai_tools.id", ondelete="CASCADE"), nullable=False),
    Column("tag_id", IdType, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False),
    *_timestamps(),
    UniqueConstraint("ai_tool_id", "tag_id", name="uq_ai_tool_tag"),
)

category_role = Table(
    "category_role",
    Base.metadata,
    Column("id", IdType, primary_key=True, autoincrement=True),
    Column("category_id", IdType, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False),
    Column("role_id", IdType, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False),
    *_timestamps(),
    UniqueConstraint("category_id", "role_id", name="uq_category_role"),
)


class Role(Base):
    """
    ORM model for roles table.

    Permissions are a list of strings; "*" grants everything.
    """

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    permissions: Mapped[list[str] | None] = mapped_column(JsonType, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    categories: Mapped[list["Category"]] = relationship(
        secondary=category_role, back_populates="roles", passive_deletes=True
    )

    __table_args__ = (
        UniqueConstraint("slug", name="uq_roles_slug"),
        Index("idx_roles_is_active", "is_active"),
    )

    def has_permission(self, permission: str) -> bool:
        """Exact membership in the permission list, or the "*" wildcard."""
        granted = self.permissions or []
        return "*" in granted or permission in granted

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<Role(id={self.id}, slug={self.slug})>"


class User(Base):
    """
    ORM model for users table.

    The password column holds an argon2 hash and is never serialized.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    role_id: Mapped[int | None] = mapped_column(
        IdType, ForeignKey("roles.id", ondelete="RESTRICT"), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    email_verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    role: Mapped[Role | None] = relationship(lazy="selectin")

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("idx_users_role_id", "role_id"),
    )

    @property
    def role_name(self) -> str:
        """Role name, or "Unknown" when the user has no role."""
        return self.role.name if self.role is not None else UNKNOWN_ROLE_NAME

    def has_permission(self, permission: str) -> bool:
        """Delegate to the role; users without a role hold no permissions."""
        return self.role is not None and self.role.has_permission(permission)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<User(id={self.id}, email={self.email})>"


class Category(Base):
    """ORM model for categories table."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    icon: Mapped[str | None] = mapped_column(String(50), nullable=True)
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    roles: Mapped[list[Role]] = relationship(
        secondary=category_role, back_populates="categories", lazy="selectin", passive_deletes=True
    )

    __table_args__ = (
        UniqueConstraint("slug", name="uq_categories_slug"),
        Index("idx_categories_is_active", "is_active"),
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<Category(id={self.id}, slug={self.slug})>"


class Tag(Base):
    """ORM model for tags table."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str | None] = mapped_column(String(20), nullable=True, default=DEFAULT_TAG_COLOR)
    icon: Mapped[str | None] = mapped_column(String(50), nullable=True, default=DEFAULT_TAG_ICON)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        UniqueConstraint("slug", name="uq_tags_slug"),
        Index("idx_tags_is_active", "is_active"),
    )

    @property
    def display_color(self) -> str:
        return self.color or DEFAULT_TAG_COLOR

    @property
    def display_icon(self) -> str:
        return self.icon or DEFAULT_TAG_ICON

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<Tag(id={self.id}, slug={self.slug})>"


class AiTool(Base):
    """
    ORM model for ai_tools table.

    `tags` is a free-form JSON list of strings used by the listing filter;
    `linked_tags` are the Tag entities attached through ai_tool_tag.
    """

    __tablename__ = "ai_tools"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    # Identity
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    long_description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Classification
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tool_type: Mapped[str] = mapped_column(String(20), nullable=False)
    team: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tags: Mapped[list[str] | None] = mapped_column(JsonType, nullable=True)

    # Links
    url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    api_endpoint: Mapped[str | None] = mapped_column(String(500), nullable=True)
    documentation_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    github_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Authorship
    author_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    author_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Review
    use_case: Mapped[str | None] = mapped_column(Text, nullable=True)
    pros: Mapped[str | None] = mapped_column(Text, nullable=True)
    cons: Mapped[str | None] = mapped_column(Text, nullable=True)
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Presentation
    icon: Mapped[str | None] = mapped_column(String(50), nullable=True)
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    version: Mapped[str] = mapped_column(String(20), nullable=False, default="1.0.0")

    # Status and access (stored and returned, not enforced)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    requires_auth: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    api_key_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    usage_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tool_metadata: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata", JsonType, nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    user: Mapped[User] = relationship(lazy="selectin")
    categories: Mapped[list[Category]] = relationship(
        secondary=ai_tool_category, lazy="selectin", order_by=Category.name, passive_deletes=True
    )
    linked_tags: Mapped[list[Tag]] = relationship(
        secondary=ai_tool_tag, lazy="selectin", order_by=Tag.name, passive_deletes=True
    )
    role_links: Mapped[list["AiToolRole"]] = relationship(
        back_populates="tool",
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("rating IS NULL OR (rating >= 1 AND rating <= 5)", name="ck_rating_range"),
        CheckConstraint(
            "status IN ('active', 'inactive', 'maintenance', 'beta')", name="ck_tool_status"
        ),
        CheckConstraint("usage_limit IS NULL OR usage_limit >= 0", name="ck_usage_limit"),
        UniqueConstraint("name", name="uq_ai_tools_name"),
        UniqueConstraint("slug", name="uq_ai_tools_slug"),
        Index("idx_ai_tools_is_active", "is_active"),
        Index("idx_ai_tools_category", "category"),
        Index("idx_ai_tools_team", "team"),
        Index("idx_ai_tools_user_id", "user_id"),
        Index("idx_ai_tools_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<AiTool(id={self.id}, slug={self.slug}, active={self.is_active})>"


class AiToolRole(Base):
    """Tool/role pivot carrying the role's access level on the tool."""

    __tablename__ = "ai_tool_role"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    ai_tool_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("ai_tools.id", ondelete="CASCADE"), nullable=False
    )
    role_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False
    )
    access_level: Mapped[str] = mapped_column(String(10), nullable=False, default="read")
    custom_permissions: Mapped[list[str] | None] = mapped_column(JsonType, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    tool: Mapped[AiTool] = relationship(back_populates="role_links")
    role: Mapped[Role] = relationship(lazy="selectin")

    __table_args__ = (
        CheckConstraint("access_level IN ('read', 'write', 'admin')", name="ck_access_level"),
        UniqueConstraint("ai_tool_id", "role_id", name="uq_ai_tool_role"),
    )


class AiToolUsage(Base):
    """Per-(user, tool) usage counter."""

    __tablename__ = "ai_tool_usages"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    ai_tool_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("ai_tools.id", ondelete="CASCADE"), nullable=False
    )
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    usage_metadata: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata", JsonType, nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    tool: Mapped[AiTool] = relationship(lazy="selectin")

    __table_args__ = (
        CheckConstraint("usage_count >= 0", name="ck_usage_count_non_negative"),
        UniqueConstraint("user_id", "ai_tool_id", name="uq_ai_tool_usages_user_tool"),
        Index("idx_ai_tool_usages_last_used_at", "last_used_at"),
    )


class UserFavorite(Base):
    """A tool bookmarked by a user."""

    __tablename__ = "user_favorites"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    ai_tool_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("ai_tools.id", ondelete="CASCADE"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    tool: Mapped[AiTool] = relationship(lazy="selectin")

    __table_args__ = (
        UniqueConstraint("user_id", "ai_tool_id", name="uq_user_favorites_user_tool"),
    )


# ============================================================================
# Query scopes
# ============================================================================


def active_tools() -> Select[tuple[AiTool]]:
    """Active tools ordered by name."""
    return select(AiTool).where(AiTool.is_active.is_(True)).order_by(AiTool.name)


def active_categories() -> Select[tuple[Category]]:
    """Active categories ordered by name."""
    return select(Category).where(Category.is_active.is_(True)).order_by(Category.name)


def active_roles() -> Select[tuple[Role]]:
    """Active roles ordered by name."""
    return select(Role).where(Role.is_active.is_(True)).order_by(Role.name)


def active_tags() -> Select[tuple[Tag]]:
    """Active tags ordered by name."""
    return select(Tag).where(Tag.is_active.is_(True)).order_by(Tag.name)


def role_tools(role_id: int) -> Select[tuple[AiTool]]:
    """Tools linked to a role through ai_tool_role, ordered by name."""
    return (
        select(AiTool)
        .join(AiToolRole, AiToolRole.ai_tool_id == AiTool.id)
        .where(AiToolRole.role_id == role_id)
        .order_by(AiTool.name, AiTool.id)
    )


def json_array_contains(column: Any, value: str, dialect_name: str) -> ColumnElement[bool]:
    """
    Membership test of a string in a JSON array column, per database dialect.

    - PostgreSQL: column @> jsonb_build_array(value)
    - SQLite: EXISTS over json_each(column)
    """
    if dialect_name == "postgresql":
        return cast(column, JSONB).op("@>", is_comparison=True)(
            func.jsonb_build_array(cast(value, Text))
        )

    elements = func.json_each(column).table_valued("value")
    return select(elements.c.value).where(elements.c.value == value).exists()
