"""Conversion from API schemas to domain objects.

Responses are built with ``model_validate`` straight from the domain
objects; requests go through the functions below so that collections
left out of a request stay None.
"""

from catalog_module.api.schemas import (
    AssociationSchema,
    CategoryLinkSchema,
    EditorialReviewSchema,
    ImageSchema,
    ProductSchema,
    PropertyValueSchema,
    SeoInfoSchema,
)
from catalog_module.domain.entities import (
    CatalogProduct,
    CategoryLink,
    EditorialReview,
    Image,
    ProductAssociation,
    PropertyValue,
    SeoInfo,
)


def property_value_from_schema(schema: PropertyValueSchema) -> PropertyValue:
    return PropertyValue(
        id=schema.id,
        property_name=schema.property_name,
        value=schema.value,
        value_type=schema.value_type,
        language_code=schema.language_code,
        alias=schema.alias,
    )


def image_from_schema(schema: ImageSchema) -> Image:
    return Image(
        id=schema.id,
        url=schema.url,
        name=schema.name,
        group=schema.group,
        sort_order=schema.sort_order,
        language_code=schema.language_code,
    )


def review_from_schema(schema: EditorialReviewSchema) -> EditorialReview:
    return EditorialReview(
        id=schema.id,
        content=schema.content,
        review_type=schema.review_type,
        language_code=schema.language_code,
    )


def link_from_schema(schema: CategoryLinkSchema) -> CategoryLink:
    return CategoryLink(
        catalog_id=schema.catalog_id,
        category_id=schema.category_id,
        priority=schema.priority,
    )


def seo_from_schema(schema: SeoInfoSchema) -> SeoInfo:
    return SeoInfo(
        id=schema.id,
        semantic_url=schema.semantic_url,
        store_id=schema.store_id,
        language_code=schema.language_code,
        is_active=schema.is_active,
        page_title=schema.page_title,
        meta_description=schema.meta_description,
        meta_keywords=schema.meta_keywords,
        image_alt_description=schema.image_alt_description,
    )


def association_from_schema(
    schema: AssociationSchema, item_id: str | None = None
) -> ProductAssociation:
    """Convert an association schema.

    Args:
        schema: Request schema.
        item_id: Owner id overriding the one in the schema.
    """
    return ProductAssociation(
        id=schema.id,
        type=schema.type,
        item_id=item_id or schema.item_id,
        associated_object_id=schema.associated_object_id,
        associated_object_type=schema.associated_object_type,
        priority=schema.priority,
        quantity=schema.quantity,
        tags=list(schema.tags),
        outer_id=schema.outer_id,
    )


def _convert_list(items, converter):
    if items is None:
        return None
    return [converter(item) for item in items]


def product_from_schema(schema: ProductSchema) -> CatalogProduct:
    """Convert a product schema, variations included.

    Read-only parts (catalog, category, outlines, referenced associations)
    are ignored.
    """
    return CatalogProduct(
        id=schema.id,
        code=schema.code,
        name=schema.name,
        catalog_id=schema.catalog_id,
        category_id=schema.category_id,
        main_product_id=schema.main_product_id,
        product_type=schema.product_type,
        gtin=schema.gtin,
        vendor=schema.vendor,
        outer_id=schema.outer_id,
        priority=schema.priority,
        is_active=schema.is_active,
        is_buyable=schema.is_buyable,
        track_inventory=schema.track_inventory,
        weight=schema.weight,
        start_date=schema.start_date,
        end_date=schema.end_date,
        properties=_convert_list(schema.properties, property_value_from_schema),
        images=_convert_list(schema.images, image_from_schema),
        reviews=_convert_list(schema.reviews, review_from_schema),
        links=_convert_list(schema.links, link_from_schema),
        associations=_convert_list(
            schema.associations,
            lambda a: association_from_schema(a, item_id=schema.id),
        ),
        variations=_convert_list(schema.variations, product_from_schema),
        seo_infos=_convert_list(schema.seo_infos, seo_from_schema),
    )
