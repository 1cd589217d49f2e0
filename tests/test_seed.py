"""
Tests for database seeding.
"""

from sqlalchemy import func, select

from app.db.models import AiTool, Role, User
from app.db.seed import CATEGORIES, ROLES, TAGS, TOOLS, USERS, SeedSummary, seed_database


class TestSeedDatabase:
    """Tests for seed_database."""

    async def test_first_run_inserts_everything(self, seeded: SeedSummary):
        assert seeded == SeedSummary(
            roles=len(ROLES),
            categories=len(CATEGORIES),
            tags=len(TAGS),
            users=len(USERS),
            tools=len(TOOLS),
        )

    async def test_second_run_inserts_nothing(self, db, seed_password_hash):
        summary = await seed_database(db, password_hash=seed_password_hash)

        assert summary == SeedSummary(roles=0, categories=0, tags=0, users=0, tools=0)
        assert await db.scalar(select(func.count()).select_from(AiTool)) == len(TOOLS)

    async def test_users_get_their_roles(self, db):
        result = await db.execute(select(User).order_by(User.id))
        assert [(user.email, user.role.slug) for user in result.scalars()] == [
            ("ivan@admin.local", "owner"),
            ("elena@frontend.local", "frontend"),
            ("petar@backend.local", "backend"),
        ]

    async def test_owner_has_wildcard(self, db):
        owner = await db.scalar(select(Role).where(Role.slug == "owner"))
        assert owner.permissions == ["*"]

    async def test_tools_are_active(self, db):
        result = await db.execute(select(AiTool))
        tools = list(result.scalars())
        assert all(tool.is_active and tool.status == "active" for tool in tools)
        assert all(tool.slug for tool in tools)
