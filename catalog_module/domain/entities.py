"""Catalog domain entities.

Products, variations and the objects hanging off them. Collections on
CatalogProduct are None when they were not requested (see
ItemResponseGroup), and an empty list when they were loaded but are empty.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar

from catalog_module.domain.base import Entity, ValueObject


# ============================================================================
# Enums
# ============================================================================


class PropertyValueType(str, Enum):
    """Storage type of a property value."""

    SHORT_TEXT = "ShortText"
    LONG_TEXT = "LongText"
    NUMBER = "Number"
    INTEGER = "Integer"
    BOOLEAN = "Boolean"
    DATE_TIME = "DateTime"


class AssociatedObjectType(str, Enum):
    """Kind of object an association points at."""

    PRODUCT = "product"
    CATEGORY = "category"


# ============================================================================
# SEO
# ============================================================================


@dataclass(eq=False)
class SeoInfo(Entity):
    """SEO record (semantic URL and meta tags) of a catalog object."""

    object_id: str | None = None
    object_type: str | None = None
    semantic_url: str = ""
    store_id: str | None = None
    language_code: str | None = None
    is_active: bool = True
    page_title: str | None = None
    meta_description: str | None = None
    meta_keywords: str | None = None
    image_alt_description: str | None = None


# ============================================================================
# Catalogs and Categories
# ============================================================================


@dataclass(eq=False)
class Catalog(Entity):
    """Catalog the products and categories belong to."""

    seo_object_type: ClassVar[str] = "Catalog"

    name: str = ""
    is_virtual: bool = False


@dataclass(eq=False)
class Category(Entity):
    """Category node inside a catalog tree."""

    seo_object_type: ClassVar[str] = "Category"

    catalog_id: str | None = None
    parent_id: str | None = None
    code: str = ""
    name: str = ""


@dataclass(eq=False)
class OutlineItem(Entity):
    """One step of an outline path."""

    seo_object_type: str = ""
    name: str = ""
    seo_infos: list[SeoInfo] | None = None


@dataclass
class Outline(ValueObject):
    """Path from a catalog root to a product.

    Attributes:
        items: Catalog, category ancestors, category and product, in order.
    """

    items: list[OutlineItem] = field(default_factory=list)

    @property
    def catalog_id(self) -> str | None:
        """Id of the catalog the outline is rooted in."""
        return self.items[0].id if self.items else None

    def __str__(self) -> str:
        return "/".join(item.id or "" for item in self.items)


# ============================================================================
# Product parts
# ============================================================================


@dataclass(eq=False)
class PropertyValue(Entity):
    """Value of a product property.

    Attributes:
        property_name: Name of the property.
        value: Typed value (str, Decimal, int, bool or datetime).
        value_type: Storage type of the value.
        language_code: Language for multilingual values.
        alias: Dictionary alias of the value.
    """

    property_name: str = ""
    value: Any = None
    value_type: PropertyValueType = PropertyValueType.SHORT_TEXT
    language_code: str | None = None
    alias: str | None = None


@dataclass(eq=False)
class Image(Entity):
    """Product image."""

    url: str = ""
    name: str | None = None
    group: str | None = None
    sort_order: int = 0
    language_code: str | None = None


@dataclass(eq=False)
class EditorialReview(Entity):
    """Editorial content such as a marketing description."""

    content: str = ""
    review_type: str = "QuickReview"
    language_code: str | None = None


@dataclass
class CategoryLink(ValueObject):
    """Placement of a product into a (usually virtual) catalog or category."""

    catalog_id: str = ""
    category_id: str | None = None
    priority: int = 0


@dataclass(eq=False)
class ProductAssociation(Entity):
    """Directed association from a product to a product or category.

    Attributes:
        type: Association group, e.g. "Accessories" or "Related Items".
        item_id: Owner product id.
        associated_object_id: Id of the associated product or category.
        associated_object_type: "product" or "category".
        priority: Display priority.
        quantity: Suggested quantity of the associated product.
        tags: Free-form tags.
        outer_id: Id in an external system.
    """

    type: str = ""
    item_id: str | None = None
    associated_object_id: str | None = None
    associated_object_type: AssociatedObjectType = AssociatedObjectType.PRODUCT
    priority: int = 0
    quantity: int | None = None
    tags: list[str] = field(default_factory=list)
    outer_id: str | None = None


# ============================================================================
# Product
# ============================================================================


@dataclass(eq=False)
class CatalogProduct(Entity):
    """Catalog product or variation.

    A variation is a product whose main_product_id points at its parent.
    """

    seo_object_type: ClassVar[str] = "CatalogProduct"

    code: str = ""
    name: str = ""
    catalog_id: str | None = None
    category_id: str | None = None
    main_product_id: str | None = None
    product_type: str | None = None
    gtin: str | None = None
    vendor: str | None = None
    outer_id: str | None = None
    priority: int = 0
    is_active: bool = True
    is_buyable: bool = True
    track_inventory: bool = True
    weight: Decimal | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    created_date: datetime | None = None
    modified_date: datetime | None = None

    # Resolved references
    catalog: Catalog | None = None
    category: Category | None = None

    # Collections controlled by the response group
    properties: list[PropertyValue] | None = None
    images: list[Image] | None = None
    reviews: list[EditorialReview] | None = None
    links: list[CategoryLink] | None = None
    associations: list[ProductAssociation] | None = None
    referenced_associations: list[ProductAssociation] | None = None
    variations: list["CatalogProduct"] | None = None
    outlines: list[Outline] | None = None
    seo_infos: list[SeoInfo] | None = None

    @property
    def is_variation(self) -> bool:
        """Whether this product is a variation of another product."""
        return self.main_product_id is not None

    def all_with_variations(self) -> list["CatalogProduct"]:
        """Return this product followed by its variations."""
        return [self, *(self.variations or [])]
