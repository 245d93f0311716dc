"""Catalog persistence.

ORM models, the catalog repository, response groups, model converters
and search criteria.
"""

from catalog_module.catalog.models import (
    AssociationEntity,
    CatalogEntity,
    CategoryEntity,
    ItemEntity,
    SeoUrlKeywordEntity,
)
from catalog_module.catalog.patching import PatchResult, patch_collection
from catalog_module.catalog.repository import CatalogRepository
from catalog_module.catalog.response_groups import ItemResponseGroup
from catalog_module.catalog.search import (
    AssociationSearchCriteria,
    ProductExportDataQuery,
    SearchResult,
)

__all__ = [
    # Models
    "AssociationEntity",
    "CatalogEntity",
    "CategoryEntity",
    "ItemEntity",
    "SeoUrlKeywordEntity",
    # Patching
    "PatchResult",
    "patch_collection",
    # Repository
    "CatalogRepository",
    # Response groups
    "ItemResponseGroup",
    # Search
    "AssociationSearchCriteria",
    "ProductExportDataQuery",
    "SearchResult",
]
