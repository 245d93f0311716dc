"""Catalog repository for database operations.

Wraps an async SQLAlchemy session. The session doubles as the unit of
work: entities loaded through the repository are change-tracked and
written back on ``commit``.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from catalog_module.catalog.models import (
    AssociationEntity,
    CatalogEntity,
    CategoryEntity,
    CategoryItemRelationEntity,
    ItemEntity,
    SeoUrlKeywordEntity,
)
from catalog_module.catalog.response_groups import ItemResponseGroup


class CatalogRepository:
    """Repository for catalog items, associations and SEO keywords.

    Example usage:
        async with async_session_factory() as session:
            repo = CatalogRepository(session)
            items = await repo.get_item_by_ids(
                ["p1", "p2"],
                ItemResponseGroup.ITEM_INFO | ItemResponseGroup.ITEM_ASSETS,
            )
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    def add(self, entity: Any) -> None:
        """Register a new entity with the unit of work."""
        self.session.add(entity)

    async def remove(self, entity: Any) -> None:
        """Mark an entity for deletion."""
        await self.session.delete(entity)

    async def commit(self) -> None:
        """Flush and commit pending changes."""
        await self.session.commit()

    async def rollback(self) -> None:
        """Discard pending changes."""
        await self.session.rollback()

    # ------------------------------------------------------------------
    # Catalogs and categories
    # ------------------------------------------------------------------

    async def get_catalogs(self) -> Sequence[CatalogEntity]:
        """Get all catalogs."""
        result = await self.session.execute(select(CatalogEntity).order_by(CatalogEntity.name))
        return result.scalars().all()

    async def get_categories(self) -> Sequence[CategoryEntity]:
        """Get all categories of all catalogs."""
        result = await self.session.execute(
            select(CategoryEntity).order_by(CategoryEntity.priority, CategoryEntity.name)
        )
        return result.scalars().all()

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    async def get_item_by_ids(
        self,
        item_ids: Iterable[str],
        response_group: ItemResponseGroup,
    ) -> Sequence[ItemEntity]:
        """Get items by id with the relationships the response group asks for.

        Args:
            item_ids: Item ids.
            response_group: Parts to eager-load.

        Returns:
            Found items, in no particular order.
        """
        ids = [item_id for item_id in dict.fromkeys(item_ids) if item_id]
        if not ids:
            return []

        query = (
            select(ItemEntity)
            .where(ItemEntity.id.in_(ids))
            .options(*self._item_load_options(response_group))
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def search_item_ids(
        self,
        catalog_ids: list[str] | None = None,
        category_ids: list[str] | None = None,
        object_ids: list[str] | None = None,
        keyword: str | None = None,
        search_in_variations: bool = False,
        sort_by: str = "name",
        sort_order: str = "asc",
        skip: int = 0,
        take: int = 20,
    ) -> tuple[list[str], int]:
        """Find item ids with filtering, sorting, and pagination.

        Args:
            catalog_ids: Items in these catalogs or linked into them.
            category_ids: Items in these categories or linked into them.
            object_ids: Restrict to these item ids.
            keyword: Substring of name or code.
            search_in_variations: Include variations in the result.
            sort_by: Sort field (name, code, priority, created_date).
            sort_order: Sort order (asc, desc).
            skip: Result offset.
            take: Maximum results.

        Returns:
            Tuple of (page of item ids, total count).
        """
        conditions = []

        if not search_in_variations:
            conditions.append(ItemEntity.main_product_id.is_(None))

        if catalog_ids:
            conditions.append(
                or_(
                    ItemEntity.catalog_id.in_(catalog_ids),
                    ItemEntity.category_links.any(
                        CategoryItemRelationEntity.catalog_id.in_(catalog_ids)
                    ),
                )
            )

        if category_ids:
            conditions.append(
                or_(
                    ItemEntity.category_id.in_(category_ids),
                    ItemEntity.category_links.any(
                        CategoryItemRelationEntity.category_id.in_(category_ids)
                    ),
                )
            )

        if object_ids:
            conditions.append(ItemEntity.id.in_(object_ids))

        if keyword:
            pattern = f"%{keyword}%"
            conditions.append(
                or_(
                    ItemEntity.name.ilike(pattern),
                    ItemEntity.code.ilike(pattern),
                )
            )

        query = select(ItemEntity.id)
        if conditions:
            query = query.where(and_(*conditions))

        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.session.execute(count_query)).scalar_one()

        sort_column = self._get_sort_column(sort_by)
        if sort_order.lower() == "desc":
            query = query.order_by(sort_column.desc(), ItemEntity.id)
        else:
            query = query.order_by(sort_column.asc(), ItemEntity.id)

        query = query.offset(skip).limit(take)

        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def get_category_links(
        self,
        item_ids: Iterable[str],
    ) -> Sequence[CategoryItemRelationEntity]:
        """Get the catalog/category links of the given items."""
        ids = [item_id for item_id in item_ids if item_id]
        if not ids:
            return []
        result = await self.session.execute(
            select(CategoryItemRelationEntity)
            .where(CategoryItemRelationEntity.item_id.in_(ids))
            .order_by(CategoryItemRelationEntity.priority)
        )
        return result.scalars().all()

    async def remove_items(self, item_ids: Iterable[str]) -> int:
        """Delete items, their variations and every dependent row.

        Associations of other items pointing at the deleted items are
        removed as well.

        Args:
            item_ids: Ids of the items to delete.

        Returns:
            Number of items (including variations) deleted.
        """
        ids = [item_id for item_id in dict.fromkeys(item_ids) if item_id]
        if not ids:
            return 0

        # Relationships must be loaded: the async session cannot lazy-load
        # them while cascading the delete.
        items = await self.get_item_by_ids(ids, ItemResponseGroup.ITEM_LARGE)
        removed_ids = {item.id for item in items}
        removed_ids.update(child.id for item in items for child in item.children)

        if removed_ids:
            await self.session.execute(
                delete(AssociationEntity)
                .where(
                    AssociationEntity.associated_item_id.in_(removed_ids),
                    # Rows owned by removed items go through the ORM cascade
                    AssociationEntity.item_id.not_in(removed_ids),
                )
                .execution_options(synchronize_session=False)
            )

        for item in items:
            await self.session.delete(item)

        return len(removed_ids)

    # ------------------------------------------------------------------
    # Associations
    # ------------------------------------------------------------------

    async def get_associations_by_owner_ids(
        self,
        owner_ids: Iterable[str],
    ) -> Sequence[AssociationEntity]:
        """Get associations owned by the given items."""
        ids = [owner_id for owner_id in owner_ids if owner_id]
        if not ids:
            return []
        result = await self.session.execute(
            select(AssociationEntity)
            .where(AssociationEntity.item_id.in_(ids))
            .order_by(AssociationEntity.priority, AssociationEntity.id)
        )
        return result.scalars().all()

    async def get_associations_by_ids(
        self,
        association_ids: Iterable[str],
    ) -> Sequence[AssociationEntity]:
        """Get associations by their own ids."""
        ids = list(association_ids)
        if not ids:
            return []
        result = await self.session.execute(
            select(AssociationEntity).where(AssociationEntity.id.in_(ids))
        )
        return result.scalars().all()

    async def find_association(
        self,
        item_id: str | None,
        associated_item_id: str | None,
        associated_category_id: str | None,
    ) -> AssociationEntity | None:
        """Find the association of an owner to a product or category.

        Args:
            item_id: Owner item id.
            associated_item_id: Associated product id, if any.
            associated_category_id: Associated category id, if any.

        Returns:
            First matching association, or None.
        """

        def _matches(column: Any, value: str | None) -> Any:
            return column.is_(None) if value is None else column == value

        query = (
            select(AssociationEntity)
            .where(
                and_(
                    AssociationEntity.item_id == item_id,
                    _matches(AssociationEntity.associated_item_id, associated_item_id),
                    _matches(AssociationEntity.associated_category_id, associated_category_id),
                )
            )
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalars().first()

    async def search_associations(
        self,
        object_ids: list[str] | None = None,
        associated_object_ids: list[str] | None = None,
        group: str | None = None,
        keyword: str | None = None,
        sort_by: str = "priority",
        sort_order: str = "asc",
        skip: int = 0,
        take: int = 20,
    ) -> tuple[Sequence[AssociationEntity], int]:
        """Search associations.

        Args:
            object_ids: Owner item ids.
            associated_object_ids: Associated product or category ids.
            group: Association type.
            keyword: Substring of the association tags.
            sort_by: Sort field (priority, type).
            sort_order: Sort order (asc, desc).
            skip: Result offset.
            take: Maximum results.

        Returns:
            Tuple of (page of associations, total count).
        """
        conditions = []
        if object_ids:
            conditions.append(AssociationEntity.item_id.in_(object_ids))
        if associated_object_ids:
            conditions.append(
                or_(
                    AssociationEntity.associated_item_id.in_(associated_object_ids),
                    AssociationEntity.associated_category_id.in_(associated_object_ids),
                )
            )
        if group:
            conditions.append(AssociationEntity.association_type == group)
        if keyword:
            conditions.append(AssociationEntity.tags.ilike(f"%{keyword}%"))

        query = select(AssociationEntity)
        if conditions:
            query = query.where(and_(*conditions))

        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.session.execute(count_query)).scalar_one()

        sort_column = (
            AssociationEntity.association_type
            if sort_by == "type"
            else AssociationEntity.priority
        )
        if sort_order.lower() == "desc":
            query = query.order_by(sort_column.desc(), AssociationEntity.id)
        else:
            query = query.order_by(sort_column.asc(), AssociationEntity.id)

        result = await self.session.execute(query.offset(skip).limit(take))
        return result.scalars().all(), total

    # ------------------------------------------------------------------
    # SEO
    # ------------------------------------------------------------------

    async def get_seo_keywords(
        self,
        objects: Iterable[tuple[str, str]],
    ) -> Sequence[SeoUrlKeywordEntity]:
        """Get SEO keywords of the given objects.

        Args:
            objects: (object_type, object_id) pairs.

        Returns:
            Matching keywords.
        """
        ids_by_type: dict[str, set[str]] = {}
        for object_type, object_id in objects:
            if object_id:
                ids_by_type.setdefault(object_type, set()).add(object_id)
        if not ids_by_type:
            return []

        query = select(SeoUrlKeywordEntity).where(
            or_(
                *(
                    and_(
                        SeoUrlKeywordEntity.object_type == object_type,
                        SeoUrlKeywordEntity.object_id.in_(ids),
                    )
                    for object_type, ids in ids_by_type.items()
                )
            )
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _item_load_options(
        self,
        response_group: ItemResponseGroup,
        include_children: bool = True,
    ) -> list[Any]:
        """Build eager-load options for an item query.

        Args:
            response_group: Parts to load.
            include_children: Whether variations may be loaded.

        Returns:
            SQLAlchemy loader options.
        """
        options: list[Any] = []
        if ItemResponseGroup.ITEM_PROPERTIES in response_group:
            options.append(selectinload(ItemEntity.property_values))
        if ItemResponseGroup.ITEM_ASSETS in response_group:
            options.append(selectinload(ItemEntity.images))
        if ItemResponseGroup.ITEM_EDITORIAL_REVIEWS in response_group:
            options.append(selectinload(ItemEntity.editorial_reviews))
        if ItemResponseGroup.LINKS in response_group:
            options.append(selectinload(ItemEntity.category_links))
        if ItemResponseGroup.ITEM_ASSOCIATIONS in response_group:
            options.append(selectinload(ItemEntity.associations))
        if ItemResponseGroup.REFERENCED_ASSOCIATIONS in response_group:
            options.append(selectinload(ItemEntity.referenced_associations))
        if include_children and ItemResponseGroup.VARIATIONS in response_group:
            child_options = self._item_load_options(response_group, include_children=False)
            children = selectinload(ItemEntity.children)
            if child_options:
                children = children.options(*child_options)
            options.append(children)
        return options

    def _get_sort_column(self, sort_by: str) -> Any:
        """Get SQLAlchemy column for sorting.

        Args:
            sort_by: Sort field name.

        Returns:
            SQLAlchemy column.
        """
        columns = {
            "name": ItemEntity.name,
            "code": ItemEntity.code,
            "priority": ItemEntity.priority,
            "created_date": ItemEntity.created_date,
            "modified_date": ItemEntity.modified_date,
        }
        return columns.get(sort_by, ItemEntity.name)
