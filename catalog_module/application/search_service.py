"""Search application services.

Association search is cached in its own region, which every association
change expires. Product search resolves a page of ids and loads the
products through ProductService, so it shares the item cache.
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog_module.application.product_service import ProductService
from catalog_module.application.service_base import CatalogServiceBase
from catalog_module.catalog.converters import association_to_model
from catalog_module.catalog.search import (
    AssociationSearchCriteria,
    ProductExportDataQuery,
    SearchResult,
)
from catalog_module.domain.entities import CatalogProduct, ProductAssociation
from catalog_module.infrastructure.cache import CacheManager

logger = structlog.get_logger()


class AssociationSearchService(CatalogServiceBase):
    """Searches product associations."""

    async def search(self, criteria: AssociationSearchCriteria) -> SearchResult[ProductAssociation]:
        """Search associations.

        Args:
            criteria: Filter, paging and sorting parameters.

        Returns:
            Page of associations with the total count.
        """
        return await self.cache.association_search.get_or_create(
            criteria.cache_key(),
            lambda: self._search(criteria),
        )

    async def _search(self, criteria: AssociationSearchCriteria) -> SearchResult[ProductAssociation]:
        async with self.repository() as repo:
            entities, total = await repo.search_associations(
                object_ids=criteria.object_ids,
                associated_object_ids=criteria.associated_object_ids,
                group=criteria.group,
                keyword=criteria.keyword,
                sort_by=criteria.sort_by,
                sort_order=criteria.sort_order,
                skip=criteria.skip,
                take=criteria.take,
            )
            results = [association_to_model(entity) for entity in entities]
        return SearchResult(total_count=total, results=results)


class ProductSearchService(CatalogServiceBase):
    """Searches products for listing and export."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        cache: CacheManager | None = None,
        product_service: ProductService | None = None,
    ) -> None:
        """Initialize service.

        Args:
            session_factory: Factory for database sessions.
            cache: Cache manager holding the cache regions.
            product_service: Service loading the found products.
        """
        super().__init__(session_factory, cache)
        self.product_service = product_service or ProductService(self.session_factory, self.cache)

    async def search(self, query: ProductExportDataQuery) -> SearchResult[CatalogProduct]:
        """Search products.

        Args:
            query: Filter, paging, sorting and response group.

        Returns:
            Page of products with the total count.
        """
        async with self.repository() as repo:
            ids, total = await repo.search_item_ids(
                catalog_ids=query.catalog_ids,
                category_ids=query.category_ids,
                object_ids=query.object_ids,
                keyword=query.keyword,
                search_in_variations=query.search_in_variations,
                sort_by=query.sort_by,
                sort_order=query.sort_order,
                skip=query.skip,
                take=query.take,
            )

        products = await self.product_service.get_by_ids(ids, query.response_group)
        logger.debug("Products searched", total=total, page_size=len(products))
        return SearchResult(total_count=total, results=products)


def get_association_search_service() -> AssociationSearchService:
    """Get association search service instance."""
    return AssociationSearchService()


def get_product_search_service() -> ProductSearchService:
    """Get product search service instance."""
    return ProductSearchService()
