"""API schemas for the catalog API.

Pydantic models for request/response validation and serialization.
Response schemas read straight from the domain dataclasses
(``from_attributes``).
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from catalog_module.domain.entities import AssociatedObjectType, PropertyValueType


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class DomainSchema(BaseModel):
    """Base for schemas populated from domain objects."""

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# SEO and Outline Schemas
# ============================================================================


class SeoInfoSchema(DomainSchema):
    """SEO record of a catalog object."""

    id: str | None = None
    semantic_url: str = Field(..., description="URL keyword")
    store_id: str | None = None
    language_code: str | None = None
    is_active: bool = True
    page_title: str | None = None
    meta_description: str | None = None
    meta_keywords: str | None = None
    image_alt_description: str | None = None


class OutlineItemSchema(DomainSchema):
    """Step of an outline."""

    id: str | None = None
    seo_object_type: str
    name: str = ""
    seo_infos: list[SeoInfoSchema] | None = None


class OutlineSchema(DomainSchema):
    """Path from catalog root to product."""

    items: list[OutlineItemSchema] = Field(default_factory=list)


class CatalogRefSchema(DomainSchema):
    """Catalog reference."""

    id: str
    name: str
    is_virtual: bool = False


class CategoryRefSchema(DomainSchema):
    """Category reference."""

    id: str
    catalog_id: str | None = None
    parent_id: str | None = None
    code: str
    name: str


# ============================================================================
# Product Schemas
# ============================================================================


class PropertyValueSchema(DomainSchema):
    """Property value of a product."""

    id: str | None = None
    property_name: str = Field(..., min_length=1, description="Property name")
    value: Any = Field(default=None, description="Typed value")
    value_type: PropertyValueType = Field(default=PropertyValueType.SHORT_TEXT)
    language_code: str | None = None
    alias: str | None = None


class ImageSchema(DomainSchema):
    """Product image."""

    id: str | None = None
    url: str = Field(..., min_length=1)
    name: str | None = None
    group: str | None = None
    sort_order: int = 0
    language_code: str | None = None


class EditorialReviewSchema(DomainSchema):
    """Editorial review of a product."""

    id: str | None = None
    content: str
    review_type: str = "QuickReview"
    language_code: str | None = None


class CategoryLinkSchema(DomainSchema):
    """Placement of a product into a catalog or category."""

    catalog_id: str
    category_id: str | None = None
    priority: int = 0


class AssociationSchema(DomainSchema):
    """Association from a product to a product or category."""

    id: str | None = None
    type: str = Field(..., min_length=1, description="Association group")
    item_id: str | None = Field(default=None, description="Owner product id")
    associated_object_id: str = Field(..., description="Associated product or category id")
    associated_object_type: AssociatedObjectType = AssociatedObjectType.PRODUCT
    priority: int = 0
    quantity: int | None = None
    tags: list[str] = Field(default_factory=list)
    outer_id: str | None = None


class ProductSchema(DomainSchema):
    """Catalog product or variation.

    Collections left out (null) are not loaded on read and not touched
    on update.
    """

    id: str | None = None
    code: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=1024)
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

    catalog: CatalogRefSchema | None = None
    category: CategoryRefSchema | None = None

    properties: list[PropertyValueSchema] | None = None
    images: list[ImageSchema] | None = None
    reviews: list[EditorialReviewSchema] | None = None
    links: list[CategoryLinkSchema] | None = None
    associations: list[AssociationSchema] | None = None
    referenced_associations: list[AssociationSchema] | None = None
    variations: list["ProductSchema"] | None = None
    outlines: list[OutlineSchema] | None = None
    seo_infos: list[SeoInfoSchema] | None = None


class CreatedProductsResponse(BaseModel):
    """Ids of created products."""

    ids: list[str] = Field(..., description="Ids of the created products, in request order")


class ProductSearchRequest(BaseModel):
    """Product search / export query."""

    catalog_ids: list[str] | None = None
    category_ids: list[str] | None = None
    object_ids: list[str] | None = None
    keyword: str | None = None
    search_in_variations: bool = False
    response_group: str | None = Field(
        default=None, description="Comma-separated response group, e.g. 'ItemInfo,Seo'"
    )
    skip: int = Field(default=0, ge=0)
    take: int = Field(default=20, ge=0, le=500)
    sort_by: str = "name"
    sort_order: Literal["asc", "desc"] = "asc"


class ProductSearchResponse(BaseModel):
    """Page of products."""

    total_count: int
    results: list[ProductSchema]


# ============================================================================
# Association Schemas
# ============================================================================


class AssociationSearchRequest(BaseModel):
    """Association search criteria."""

    object_ids: list[str] | None = None
    associated_object_ids: list[str] | None = None
    group: str | None = None
    keyword: str | None = None
    skip: int = Field(default=0, ge=0)
    take: int = Field(default=20, ge=0, le=500)
    sort_by: str = "priority"
    sort_order: Literal["asc", "desc"] = "asc"


class AssociationSearchResponse(BaseModel):
    """Page of associations."""

    total_count: int
    results: list[AssociationSchema]
