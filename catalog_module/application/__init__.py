"""Application layer module.

Contains application services (use cases) that orchestrate
the catalog repository, the converters and the cache.
"""

from catalog_module.application.association_service import (
    AssociationService,
    get_association_service,
)
from catalog_module.application.outline_service import (
    OutlineService,
    get_outline_service,
)
from catalog_module.application.product_service import (
    ProductService,
    get_product_service,
)
from catalog_module.application.search_service import (
    AssociationSearchService,
    ProductSearchService,
    get_association_search_service,
    get_product_search_service,
)
from catalog_module.application.seo_service import (
    SeoService,
    get_seo_service,
)

__all__ = [
    "AssociationService",
    "get_association_service",
    "AssociationSearchService",
    "get_association_search_service",
    "OutlineService",
    "get_outline_service",
    "ProductService",
    "get_product_service",
    "ProductSearchService",
    "get_product_search_service",
    "SeoService",
    "get_seo_service",
]
