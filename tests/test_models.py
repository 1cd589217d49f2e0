"""
Tests for ORM model helpers and query scopes.
"""

from sqlalchemy import inspect, select

from app.db.models import (
    AiTool,
    Role,
    Tag,
    User,
    active_categories,
    active_roles,
    active_tags,
    active_tools,
)


class TestRolePermissions:
    """Tests for Role.has_permission and User.has_permission."""

    def test_exact_membership(self):
        role = Role(name="QA", slug="qa", permissions=["run_tests"])
        assert role.has_permission("run_tests")
        assert not role.has_permission("run")

    def test_wildcard_grants_everything(self):
        role = Role(name="Owner", slug="owner", permissions=["*"])
        assert role.has_permission("manage_taxonomy")

    def test_no_permissions(self):
        assert not Role(name="Empty", slug="empty", permissions=None).has_permission("x")

    def test_user_without_role(self):
        user = User(name="Nobody", email="nobody@acme.io", password="x")
        assert not user.has_permission("view_basic_tools")
        assert user.role_name == "Unknown"

    def test_user_delegates_to_role(self):
        user = User(name="Owner", email="owner@acme.io", password="x")
        user.role = Role(name="Owner", slug="owner", permissions=["*"])
        assert user.has_permission("anything")
        assert user.role_name == "Owner"


class TestTagDisplay:
    def test_defaults_when_blank(self):
        tag = Tag(name="Plain", slug="plain", color=None, icon=None)
        assert tag.display_color == "#6B7280"
        assert tag.display_icon == "🏷️"

    def test_own_values(self):
        tag = Tag(name="Red", slug="red", color="#FF0000", icon="🔴")
        assert tag.display_color == "#FF0000"
        assert tag.display_icon == "🔴"


class TestAiToolMapping:
    """Tests for the ai_tools table definition."""

    def test_metadata_column_name(self):
        """The JSON payload is mapped to `tool_metadata` but stored as `metadata`."""
        columns = {col.key: col for col in inspect(AiTool).columns}
        assert columns["tool_metadata"].name == "metadata"

    def test_required_columns(self):
        columns = {col.key: col for col in inspect(AiTool).columns}
        for name in ("name", "slug", "description", "tool_type", "user_id", "version"):
            assert columns[name].nullable is False, name

    def test_unique_name_and_slug(self):
        names = {constraint.name for constraint in AiTool.__table__.constraints}
        assert {"uq_ai_tools_name", "uq_ai_tools_slug", "ck_rating_range"} <= names

    def test_repr(self):
        tool = AiTool(id=1, slug="docker", is_active=True)
        assert repr(tool) == "<AiTool(id=1, slug=docker, active=True)>"


class TestScopes:
    """Tests for the active_* query scopes against the seed data."""

    async def test_active_tools_ordered_by_name(self, db):
        names = list((await db.execute(active_tools())).scalars())
        assert [tool.name for tool in names] == sorted(tool.name for tool in names)
        assert len(names) == 8

    async def test_inactive_excluded(self, db):
        tag = await db.scalar(select(Tag).where(Tag.slug == "creative"))
        tag.is_active = False
        await db.commit()

        slugs = [tag.slug for tag in (await db.execute(active_tags())).scalars()]
        assert "creative" not in slugs
        assert len(slugs) == 9

    async def test_roles_and_categories(self, db):
        assert len(list((await db.execute(active_roles())).scalars())) == 7
        assert len(list((await db.execute(active_categories())).scalars())) == 8
