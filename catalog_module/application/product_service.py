"""Product application service.

Loads products by id with a response group and creates, updates and
deletes products together with their variations. Every mutation expires
the affected entries of the item cache region.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog_module.application.outline_service import OutlineService
from catalog_module.application.seo_service import SeoService
from catalog_module.application.service_base import CatalogServiceBase
from catalog_module.catalog.converters import (
    PrimaryKeyResolvingMap,
    item_from_model,
    item_to_model,
    patch_item,
)
from catalog_module.catalog.response_groups import ItemResponseGroup
from catalog_module.domain.entities import AssociatedObjectType, CatalogProduct
from catalog_module.infrastructure.cache import CacheManager

logger = structlog.get_logger()

_MISSING = object()

ResponseGroupLike = ItemResponseGroup | str | int | None


class ProductService(CatalogServiceBase):
    """Application service for catalog products.

    Example usage:
        service = ProductService(session_factory)
        product = await service.get_by_id("p1", "ItemInfo,Seo")
        product.name = "Renamed"
        await service.update([product])
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        cache: CacheManager | None = None,
        seo_service: SeoService | None = None,
        outline_service: OutlineService | None = None,
    ) -> None:
        """Initialize service.

        Args:
            session_factory: Factory for database sessions.
            cache: Cache manager holding the cache regions.
            seo_service: Service loading and storing SEO infos.
            outline_service: Service building product outlines.
        """
        super().__init__(session_factory, cache)
        self.seo_service = seo_service or SeoService(self.session_factory, self.cache)
        self.outline_service = outline_service or OutlineService(self.session_factory, self.cache)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_by_id(
        self,
        item_id: str,
        response_group: ResponseGroupLike = None,
        catalog_id: str | None = None,
    ) -> CatalogProduct | None:
        """Get a single product.

        Args:
            item_id: Product id.
            response_group: Parts to load (defaults to ItemLarge).
            catalog_id: Restrict outlines to this catalog.

        Returns:
            Product if found, None otherwise.
        """
        products = await self.get_by_ids([item_id], response_group, catalog_id)
        return products[0] if products else None

    async def get_by_ids(
        self,
        item_ids: Iterable[str],
        response_group: ResponseGroupLike = None,
        catalog_id: str | None = None,
    ) -> list[CatalogProduct]:
        """Get products by id.

        Args:
            item_ids: Product ids; unknown ids are skipped.
            response_group: Parts to load (defaults to ItemLarge).
            catalog_id: Restrict outlines to this catalog.

        Returns:
            Found products in the order of ``item_ids``.
        """
        group = ItemResponseGroup.parse(response_group)
        ids = [item_id for item_id in dict.fromkeys(item_ids) if item_id]
        if not ids:
            return []

        cache_key = ("GetByIds", tuple(ids), group.value, catalog_id)
        cached = self.cache.items.get(cache_key, _MISSING)
        if cached is not _MISSING:
            return cached

        token = self.cache.items.change_token()
        products = await self._load_products(ids, group, catalog_id)

        tags = set(ids)
        for product in products:
            tags.update(p.id for p in product.all_with_variations() if p.id)
        self.cache.items.set(cache_key, products, tags=tags, token=token)
        return products

    async def _load_products(
        self,
        ids: list[str],
        group: ItemResponseGroup,
        catalog_id: str | None,
    ) -> list[CatalogProduct]:
        catalogs = await self.get_all_catalogs()
        categories = await self.get_all_categories()

        async with self.repository() as repo:
            entities = await repo.get_item_by_ids(ids, group)
            converted = {
                entity.id: item_to_model(entity, catalogs, categories) for entity in entities
            }
        products = [converted[item_id] for item_id in ids if item_id in converted]

        if ItemResponseGroup.OUTLINES in group:
            await self.outline_service.fill_outlines_for_objects(products, catalog_id)

        if ItemResponseGroup.SEO in group:
            objects_with_seo: list = []
            for product in products:
                objects_with_seo.extend(product.all_with_variations())
            for product in list(objects_with_seo):
                for outline in product.outlines or []:
                    objects_with_seo.extend(outline.items)
            await self.seo_service.load_seo_for_objects(objects_with_seo)

        # Cleanup result model considered requested response group
        if ItemResponseGroup.ITEM_PROPERTIES not in group:
            for product in products:
                for target in product.all_with_variations():
                    target.properties = None

        return products

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def create(self, products: Sequence[CatalogProduct]) -> None:
        """Create products together with their variations.

        Generated ids are written back onto the given products. Variations
        are bound to their main product and inherit its catalog.

        Args:
            products: Products to create.

        Raises:
            CatalogPersistenceError: If the unit of work fails to commit.
        """
        if not products:
            return

        pk_map = PrimaryKeyResolvingMap()
        async with self.repository() as repo:
            for product in products:
                entity = item_from_model(product, pk_map)
                for variation in product.variations or []:
                    variation.main_product_id = product.id
                    variation.catalog_id = product.catalog_id
                    entity.children.append(item_from_model(variation, pk_map))
                repo.add(entity)
            await self.commit_changes(repo, "create_products")
        pk_map.resolve_primary_keys()

        all_products = self._with_variations(products)
        for product in products:
            for variation in product.variations or []:
                variation.main_product_id = product.id
        affected = {p.id for p in all_products}
        for product in all_products:
            for association in product.associations or []:
                association.item_id = product.id
                if association.associated_object_type == AssociatedObjectType.PRODUCT:
                    affected.add(association.associated_object_id)
        try:
            await self.seo_service.upsert_seo_for_objects(all_products)
        finally:
            self._expire(affected, any(p.associations for p in all_products))

        logger.info(
            "Products created",
            count=len(products),
            variation_count=len(all_products) - len(products),
            product_ids=[p.id for p in products],
        )

    async def create_one(self, product: CatalogProduct) -> CatalogProduct | None:
        """Create a single product and return it reloaded as ItemLarge.

        Args:
            product: Product to create.

        Returns:
            The stored product.
        """
        await self.create([product])
        return await self.get_by_id(product.id, ItemResponseGroup.ITEM_LARGE)

    async def update(self, products: Sequence[CatalogProduct]) -> None:
        """Update existing products.

        Scalar fields are always overwritten; collections that are None on
        a product are left untouched. Products that do not exist are
        skipped.

        Args:
            products: Products to update.

        Raises:
            CatalogPersistenceError: If the unit of work fails to commit.
        """
        by_id = {product.id: product for product in products if product.id}
        if not by_id:
            return

        pk_map = PrimaryKeyResolvingMap()
        updated: set[str] = set()
        affected: set[str | None] = set()
        now = datetime.now(timezone.utc)

        async with self.repository() as repo:
            entities = await repo.get_item_by_ids(list(by_id), ItemResponseGroup.ITEM_LARGE)
            for entity in entities:
                product = by_id.get(entity.id)
                if product is None:
                    continue
                if product.associations is not None:
                    # Targets of dropped rows lose a referenced association
                    affected.update(a.associated_item_id for a in entity.associations)
                patch_item(product, entity, pk_map)
                if product.associations is not None:
                    affected.update(a.associated_item_id for a in entity.associations)
                # Mark the product changed even when only child rows were patched
                entity.modified_date = now
                product.modified_date = now
                updated.add(entity.id)
                affected.add(entity.id)
                affected.add(entity.main_product_id)

            missing = set(by_id) - {entity.id for entity in entities}
            if missing:
                logger.warning("Products not found for update", product_ids=sorted(missing))

            await self.commit_changes(repo, "update_products")
        pk_map.resolve_primary_keys()

        try:
            await self.seo_service.upsert_seo_for_objects(
                [product for product in products if product.id in updated]
            )
        finally:
            self._expire(
                affected,
                any(product.associations is not None for product in by_id.values()),
            )

        logger.info("Products updated", count=len(updated), product_ids=sorted(updated))

    async def delete(self, item_ids: Sequence[str]) -> None:
        """Delete products, their variations and everything hanging off them.

        Args:
            item_ids: Ids of the products to delete.

        Raises:
            CatalogPersistenceError: If the unit of work fails to commit.
        """
        ids = [item_id for item_id in dict.fromkeys(item_ids) if item_id]
        if not ids:
            return

        products = await self.get_by_ids(
            ids,
            ItemResponseGroup.SEO | ItemResponseGroup.VARIATIONS,
        )

        async with self.repository() as repo:
            removed = await repo.remove_items(ids)
            await self.commit_changes(repo, "delete_products")

        all_products = self._with_variations(products)
        affected = set(ids)
        for product in all_products:
            affected.add(product.id)
            if product.main_product_id:
                affected.add(product.main_product_id)
        try:
            await self.seo_service.delete_seo_for_objects(all_products)
        finally:
            self._expire(affected, True)

        logger.info("Products deleted", count=removed, product_ids=ids)

    def _expire(self, product_ids: Iterable[str | None], associations_changed: bool) -> None:
        self.cache.items.expire_products(product_ids)
        if associations_changed:
            self.cache.association_search.expire_region()

    @staticmethod
    def _with_variations(products: Iterable[CatalogProduct]) -> list[CatalogProduct]:
        result = []
        for product in products:
            result.extend(product.all_with_variations())
        return result


def get_product_service() -> ProductService:
    """Get product service instance.

    Returns:
        ProductService bound to the default session factory and cache.
    """
    return ProductService()
