"""
Taxonomy API routes - categories, roles and tags.

Reading is public; creating and deleting requires the manage_taxonomy
permission.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, status

from app.api.dependencies import get_taxonomy_service, require_permission
from app.api.serializers import envelope, serialize_category, serialize_role, serialize_tag
from app.models.api import CategoryCreate, RoleCreate, TagCreate, TaxonomyKind
from app.services.taxonomy import TaxonomyService

MANAGE_TAXONOMY = "manage_taxonomy"

router = APIRouter(tags=["taxonomy"])
manage = [Depends(require_permission(MANAGE_TAXONOMY))]

Taxonomy = Annotated[TaxonomyService, Depends(get_taxonomy_service)]


# =============================================================================
# Categories
# =============================================================================


@router.get("/categories")
async def list_categories(taxonomy: Taxonomy, include_inactive: bool = False) -> dict[str, Any]:
    entries = await taxonomy.list_entries(TaxonomyKind.CATEGORIES, include_inactive)
    return envelope(
        [serialize_category(entry) for entry in entries], "Categories retrieved successfully"
    )


@router.get("/categories/{category_id}")
async def get_category(category_id: int, taxonomy: Taxonomy) -> dict[str, Any]:
    entry = await taxonomy.get_entry(TaxonomyKind.CATEGORIES, category_id)
    return envelope(serialize_category(entry), "Category retrieved successfully")


@router.post("/categories", status_code=status.HTTP_201_CREATED, dependencies=manage)
async def create_category(request: CategoryCreate, taxonomy: Taxonomy) -> dict[str, Any]:
    category = await taxonomy.create_category(request)
    return envelope(serialize_category(category), "Category created successfully")


@router.delete("/categories/{category_id}", dependencies=manage)
async def delete_category(category_id: int, taxonomy: Taxonomy) -> dict[str, Any]:
    await taxonomy.delete_entry(TaxonomyKind.CATEGORIES, category_id)
    return envelope(None, "Category deleted successfully")


# =============================================================================
# Roles
# =============================================================================


@router.get("/roles")
async def list_roles(taxonomy: Taxonomy, include_inactive: bool = False) -> dict[str, Any]:
    entries = await taxonomy.list_entries(TaxonomyKind.ROLES, include_inactive)
    return envelope([serialize_role(entry) for entry in entries], "Roles retrieved successfully")


@router.get("/roles/{role_id}")
async def get_role(role_id: int, taxonomy: Taxonomy) -> dict[str, Any]:
    entry = await taxonomy.get_entry(TaxonomyKind.ROLES, role_id)
    return envelope(serialize_role(entry), "Role retrieved successfully")


@router.post("/roles", status_code=status.HTTP_201_CREATED, dependencies=manage)
async def create_role(request: RoleCreate, taxonomy: Taxonomy) -> dict[str, Any]:
    role = await taxonomy.create_role(request)
    return envelope(serialize_role(role), "Role created successfully")


@router.delete("/roles/{role_id}", dependencies=manage)
async def delete_role(role_id: int, taxonomy: Taxonomy) -> dict[str, Any]:
    """Delete a role; refused while users still hold it."""
    await taxonomy.delete_entry(TaxonomyKind.ROLES, role_id)
    return envelope(None, "Role deleted successfully")


# =============================================================================
# Tags
# =============================================================================


@router.get("/tags")
async def list_tags(taxonomy: Taxonomy, include_inactive: bool = False) -> dict[str, Any]:
    entries = await taxonomy.list_entries(TaxonomyKind.TAGS, include_inactive)
    return envelope([serialize_tag(entry) for entry in entries], "Tags retrieved successfully")


@router.get("/tags/{tag_id}")
async def get_tag(tag_id: int, taxonomy: Taxonomy) -> dict[str, Any]:
    entry = await taxonomy.get_entry(TaxonomyKind.TAGS, tag_id)
    return envelope(serialize_tag(entry), "Tag retrieved successfully")


@router.post("/tags", status_code=status.HTTP_201_CREATED, dependencies=manage)
async def create_tag(request: TagCreate, taxonomy: Taxonomy) -> dict[str, Any]:
    tag = await taxonomy.create_tag(request)
    return envelope(serialize_tag(tag), "Tag created successfully")


@router.delete("/tags/{tag_id}", dependencies=manage)
async def delete_tag(tag_id: int, taxonomy: Taxonomy) -> dict[str, Any]:
    await taxonomy.delete_entry(TaxonomyKind.TAGS, tag_id)
    return envelope(None, "Tag deleted successfully")
