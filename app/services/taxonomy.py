"""
Taxonomy service - categories, roles and tags.

Listings return active entries ordered by name unless inactive ones are
requested. Slugs are derived from names when not supplied.
"""

from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from app.db.models import Category, Role, Tag, User
from app.exceptions import ResourceNotFoundError, ValidationError
from app.models.api import CategoryCreate, RoleCreate, TagCreate, TaxonomyKind
from app.services.slugs import slugify

logger = get_logger(__name__)

_MODELS: dict[TaxonomyKind, type[Category] | type[Role] | type[Tag]] = {
    TaxonomyKind.CATEGORIES: Category,
    TaxonomyKind.ROLES: Role,
    TaxonomyKind.TAGS: Tag,
}

_LABELS = {
    TaxonomyKind.CATEGORIES: "Category",
    TaxonomyKind.ROLES: "Role",
    TaxonomyKind.TAGS: "Tag",
}


class TaxonomyService:
    """Read and manage categories, roles and tags."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_entries(
        self, kind: TaxonomyKind, include_inactive: bool = False
    ) -> list[Any]:
        """Entries of one kind ordered by name, active only by default."""
        model = _MODELS[kind]
        stmt = select(model).order_by(model.name, model.id)
        if not include_inactive:
            stmt = stmt.where(model.is_active.is_(True))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_entry(self, kind: TaxonomyKind, entry_id: int) -> Any:
        """
        Fetch one entry by id.

        Raises:
            ResourceNotFoundError: No entry of this kind with this id
        """
        entry = await self.db.get(_MODELS[kind], entry_id)
        if entry is None:
            raise ResourceNotFoundError(_LABELS[kind], entry_id)
        return entry

    async def create_category(self, payload: CategoryCreate) -> Category:
        """Create a category, optionally visible to a set of roles."""
        slug = await self._claim_slug(TaxonomyKind.CATEGORIES, payload.name, payload.slug)

        roles: list[Role] = []
        if payload.role_ids:
            wanted = set(payload.role_ids)
            result = await self.db.execute(select(Role).where(Role.id.in_(wanted)))
            roles = list(result.scalars().all())
            if len(roles) != len(wanted):
                raise ValidationError.for_field(
                    "role_ids", "One or more selected roles are invalid."
                )

        category = Category(
            name=payload.name,
            slug=slug,
            description=payload.description,
            icon=payload.icon,
            color=payload.color,
            is_active=payload.is_active,
        )
        category.roles = roles
        return await self._persist(TaxonomyKind.CATEGORIES, category)

    async def create_role(self, payload: RoleCreate) -> Role:
        """Create a role with its permission list."""
        slug = await self._claim_slug(TaxonomyKind.ROLES, payload.name, payload.slug)
        role = Role(
            name=payload.name,
            slug=slug,
            description=payload.description,
            permissions=list(dict.fromkeys(payload.permissions)),
            is_active=payload.is_active,
        )
        return await self._persist(TaxonomyKind.ROLES, role)

    async def create_tag(self, payload: TagCreate) -> Tag:
        """Create a tag; color and icon fall back to the tag defaults."""
        slug = await self._claim_slug(TaxonomyKind.TAGS, payload.name, payload.slug)
        tag = Tag(
            name=payload.name,
            slug=slug,
            description=payload.description,
            color=payload.color,
            icon=payload.icon,
            is_active=payload.is_active,
        )
        return await self._persist(TaxonomyKind.TAGS, tag)

    async def delete_entry(self, kind: TaxonomyKind, entry_id: int) -> None:
        """
        Delete an entry; links to tools go with it.

        Raises:
            ResourceNotFoundError: No entry of this kind with this id
            ValidationError: A role is still assigned to users
        """
        model = _MODELS[kind]
        await self.get_entry(kind, entry_id)

        if kind == TaxonomyKind.ROLES:
            assigned = await self.db.scalar(
                select(func.count()).select_from(User).where(User.role_id == entry_id)
            )
            if assigned:
                raise ValidationError.for_field(
                    "role", f"The role is still assigned to {assigned} user(s)."
                )

        await self.db.execute(delete(model).where(model.id == entry_id))
        await self.db.commit()
        logger.info("taxonomy_entry_deleted", kind=kind.value, entry_id=entry_id)

    async def _claim_slug(self, kind: TaxonomyKind, name: str, slug: str | None) -> str:
        model = _MODELS[kind]
        slug = slug or slugify(name)
        if not slug:
            raise ValidationError.for_field(
                "slug", "A slug could not be derived from the name; provide one explicitly."
            )

        taken = await self.db.scalar(select(model.id).where(model.slug == slug).limit(1))
        if taken is not None:
            raise ValidationError.for_field(
                "slug", f"A {_LABELS[kind].lower()} with this slug already exists."
            )
        return slug

    async def _persist(self, kind: TaxonomyKind, entry: Any) -> Any:
        self.db.add(entry)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning("taxonomy_integrity_error", kind=kind.value, error=str(e.orig))
            raise ValidationError.for_field(
                "slug", f"A {_LABELS[kind].lower()} with this slug already exists."
            ) from None

        logger.info("taxonomy_entry_created", kind=kind.value, entry_id=entry.id, slug=entry.slug)
        return entry
