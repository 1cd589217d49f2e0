"""
Tests for TaxonomyService.
"""

import pytest
from sqlalchemy import func, select

from app.db.models import Category, Role, Tag, category_role
from app.exceptions import ResourceNotFoundError, ValidationError
from app.models.api import CategoryCreate, RoleCreate, TagCreate, TaxonomyKind
from app.services.taxonomy import TaxonomyService
from app.services.tools import ToolService


class TestListEntries:
    """Tests for listing categories, roles and tags."""

    async def test_seeded_counts(self, db):
        service = TaxonomyService(db)
        assert len(await service.list_entries(TaxonomyKind.CATEGORIES)) == 8
        assert len(await service.list_entries(TaxonomyKind.ROLES)) == 7
        assert len(await service.list_entries(TaxonomyKind.TAGS)) == 10

    async def test_ordered_by_name(self, db):
        tags = await TaxonomyService(db).list_entries(TaxonomyKind.TAGS)
        names = [tag.name for tag in tags]
        assert names == sorted(names)

    async def test_inactive_hidden_unless_requested(self, db):
        tag = await db.scalar(select(Tag).where(Tag.slug == "research"))
        tag.is_active = False
        await db.commit()

        service = TaxonomyService(db)
        active = await service.list_entries(TaxonomyKind.TAGS)
        everything = await service.list_entries(TaxonomyKind.TAGS, include_inactive=True)

        assert "research" not in {tag.slug for tag in active}
        assert "research" in {tag.slug for tag in everything}


class TestGetEntry:
    async def test_found(self, db):
        role_id = await db.scalar(select(Role.id).where(Role.slug == "qa"))
        role = await TaxonomyService(db).get_entry(TaxonomyKind.ROLES, role_id)
        assert role.name == "QA Engineer"

    async def test_missing(self, db):
        with pytest.raises(ResourceNotFoundError) as exc_info:
            await TaxonomyService(db).get_entry(TaxonomyKind.CATEGORIES, 999)
        assert exc_info.value.resource == "Category"


class TestCreate:
    """Tests for creating entries."""

    async def test_tag_slug_derived(self, db):
        tag = await TaxonomyService(db).create_tag(TagCreate(name="Large Language Models"))

        assert tag.slug == "large-language-models"
        assert tag.display_color == "#6B7280"
        assert tag.display_icon == "🏷️"

    async def test_duplicate_slug(self, db):
        with pytest.raises(ValidationError) as exc_info:
            await TaxonomyService(db).create_tag(TagCreate(name="Research"))
        assert exc_info.value.errors == {"slug": ["A tag with this slug already exists."]}

    async def test_role_permissions_deduplicated(self, db):
        role = await TaxonomyService(db).create_role(
            RoleCreate(name="Auditor", permissions=["view_analytics", "view_analytics"])
        )
        assert role.slug == "auditor"
        assert role.permissions == ["view_analytics"]
        assert role.has_permission("view_analytics")
        assert not role.has_permission("manage_taxonomy")

    async def test_category_with_roles(self, db):
        role_ids = list(
            (await db.execute(select(Role.id).where(Role.slug.in_(["qa", "pm"])))).scalars()
        )

        category = await TaxonomyService(db).create_category(
            CategoryCreate(name="Quality", icon="✅", role_ids=role_ids)
        )

        assert category.slug == "quality"
        assert sorted(role.id for role in category.roles) == sorted(role_ids)

    async def test_category_with_unknown_role(self, db):
        with pytest.raises(ValidationError) as exc_info:
            await TaxonomyService(db).create_category(CategoryCreate(name="Q", role_ids=[999]))
        assert "role_ids" in exc_info.value.errors

    async def test_underivable_slug(self, db):
        with pytest.raises(ValidationError) as exc_info:
            await TaxonomyService(db).create_tag(TagCreate(name="Метка"))
        assert "slug" in exc_info.value.errors


class TestDelete:
    """Tests for deleting entries."""

    async def test_delete_tag_unlinks_tools(self, db):
        service = TaxonomyService(db)
        tag = await service.create_tag(TagCreate(name="Temporary"))
        await ToolService(db).update_tool(1, {"tag_ids": [tag.id]})

        await service.delete_entry(TaxonomyKind.TAGS, tag.id)

        tool = await ToolService(db).get_tool(1)
        assert tool.linked_tags == []

    async def test_delete_category_drops_role_visibility(self, db):
        service = TaxonomyService(db)
        role_id = await db.scalar(select(Role.id).where(Role.slug == "designer"))
        category = await service.create_category(
            CategoryCreate(name="Mockups", role_ids=[role_id])
        )

        await service.delete_entry(TaxonomyKind.CATEGORIES, category.id)

        remaining = await db.scalar(
            select(func.count())
            .select_from(category_role)
            .where(category_role.c.category_id == category.id)
        )
        assert remaining == 0
        assert await db.get(Category, category.id) is None

    async def test_unassigned_role_deleted(self, db):
        role_id = await db.scalar(select(Role.id).where(Role.slug == "qa"))
        await TaxonomyService(db).delete_entry(TaxonomyKind.ROLES, role_id)
        assert await db.scalar(select(Role.id).where(Role.slug == "qa")) is None

    async def test_assigned_role_blocked(self, db):
        role_id = await db.scalar(select(Role.id).where(Role.slug == "owner"))

        with pytest.raises(ValidationError) as exc_info:
            await TaxonomyService(db).delete_entry(TaxonomyKind.ROLES, role_id)

        assert exc_info.value.errors == {"role": ["The role is still assigned to 1 user(s)."]}

    async def test_missing(self, db):
        with pytest.raises(ResourceNotFoundError):
            await TaxonomyService(db).delete_entry(TaxonomyKind.TAGS, 999)
