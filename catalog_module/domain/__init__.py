"""Domain layer for the catalog module.

Contains the catalog entities and the domain exceptions.

Domain models are independent of infrastructure concerns and the
API layer.
"""

from catalog_module.domain.base import Entity, ValueObject
from catalog_module.domain.entities import (
    AssociatedObjectType,
    Catalog,
    CatalogProduct,
    Category,
    CategoryLink,
    EditorialReview,
    Image,
    Outline,
    OutlineItem,
    ProductAssociation,
    PropertyValue,
    PropertyValueType,
    SeoInfo,
)
from catalog_module.domain.exceptions import (
    CatalogError,
    CatalogPersistenceError,
    DomainError,
    InvalidResponseGroupError,
    ProductNotFoundError,
)

__all__ = [
    # Base
    "Entity",
    "ValueObject",
    # Entities
    "AssociatedObjectType",
    "Catalog",
    "CatalogProduct",
    "Category",
    "CategoryLink",
    "EditorialReview",
    "Image",
    "Outline",
    "OutlineItem",
    "ProductAssociation",
    "PropertyValue",
    "PropertyValueType",
    "SeoInfo",
    # Exceptions
    "CatalogError",
    "CatalogPersistenceError",
    "DomainError",
    "InvalidResponseGroupError",
    "ProductNotFoundError",
]
