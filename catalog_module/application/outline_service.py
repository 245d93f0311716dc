"""Outline application service.

An outline is the path from a catalog root to a product:
catalog, category ancestors, category, product. A product gets one
outline per placement (its own category plus every link).
"""

from collections.abc import Mapping, Sequence

import structlog

from catalog_module.application.service_base import CatalogServiceBase
from catalog_module.catalog.converters import link_to_model
from catalog_module.domain.entities import (
    Catalog,
    CatalogProduct,
    Category,
    CategoryLink,
    Outline,
    OutlineItem,
)

logger = structlog.get_logger()


class OutlineService(CatalogServiceBase):
    """Builds outlines for products and their variations."""

    async def fill_outlines_for_objects(
        self,
        products: Sequence[CatalogProduct],
        catalog_id: str | None = None,
    ) -> None:
        """Assign ``outlines`` on each product and variation.

        Args:
            products: Products to fill.
            catalog_id: Keep only outlines rooted in this catalog.
        """
        targets = [
            target
            for product in products
            for target in product.all_with_variations()
            if target.id
        ]
        if not targets:
            return

        catalogs = await self.get_all_catalogs()
        categories = await self.get_all_categories()

        # Links are only loaded with the Links response group
        missing_links = [target.id for target in targets if target.links is None]
        links_by_item: dict[str, list[CategoryLink]] = {}
        if missing_links:
            async with self.repository() as repo:
                for entity in await repo.get_category_links(missing_links):
                    links_by_item.setdefault(entity.item_id, []).append(link_to_model(entity))

        for target in targets:
            links = target.links if target.links is not None else links_by_item.get(target.id, [])
            target.outlines = self.build_outlines(target, links, catalogs, categories, catalog_id)

    def build_outlines(
        self,
        product: CatalogProduct,
        links: Sequence[CategoryLink],
        catalogs: Mapping[str, Catalog],
        categories: Mapping[str, Category],
        catalog_id: str | None = None,
    ) -> list[Outline]:
        """Build the outlines of a single product.

        Args:
            product: Product (or variation).
            links: Additional placements of the product.
            catalogs: All catalogs by id.
            categories: All categories by id.
            catalog_id: Keep only outlines rooted in this catalog.

        Returns:
            One outline per known placement.
        """
        placements = [(product.catalog_id, product.category_id)]
        placements.extend((link.catalog_id, link.category_id) for link in links)

        outlines = []
        for placement_catalog_id, category_id in dict.fromkeys(placements):
            if catalog_id and placement_catalog_id != catalog_id:
                continue
            catalog = catalogs.get(placement_catalog_id or "")
            if catalog is None:
                logger.warning(
                    "Outline catalog not found",
                    product_id=product.id,
                    catalog_id=placement_catalog_id,
                )
                continue

            items = [
                OutlineItem(id=catalog.id, seo_object_type=catalog.seo_object_type, name=catalog.name)
            ]
            items.extend(
                OutlineItem(id=category.id, seo_object_type=category.seo_object_type, name=category.name)
                for category in self._category_path(category_id, categories)
            )
            items.append(
                OutlineItem(id=product.id, seo_object_type=product.seo_object_type, name=product.name)
            )
            outlines.append(Outline(items=items))

        return outlines

    @staticmethod
    def _category_path(
        category_id: str | None,
        categories: Mapping[str, Category],
    ) -> list[Category]:
        """Return the category and its ancestors, root first."""
        path: list[Category] = []
        seen: set[str] = set()
        current = categories.get(category_id) if category_id else None
        while current is not None and current.id not in seen:
            seen.add(current.id)
            path.append(current)
            current = categories.get(current.parent_id) if current.parent_id else None
        path.reverse()
        return path


def get_outline_service() -> OutlineService:
    """Get outline service instance."""
    return OutlineService()
