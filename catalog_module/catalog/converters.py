"""Conversion between catalog domain models and ORM entities.

Three directions are covered for each kind of object:

- ``*_to_model``: entity to domain model,
- ``*_from_model``: domain model to a new entity,
- ``patch_*``: copy a (converted) source entity onto a tracked entity.

Only relationships that were eager-loaded are converted; anything the
response group did not ask for stays None on the domain model.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from sqlalchemy import inspect as sa_inspect

from catalog_module.catalog.models import (
    AssociationEntity,
    CatalogEntity,
    CategoryEntity,
    CategoryItemRelationEntity,
    EditorialReviewEntity,
    ImageEntity,
    ItemEntity,
    PropertyValueEntity,
    SeoUrlKeywordEntity,
)
from catalog_module.catalog.patching import patch_collection
from catalog_module.domain.base import Entity
from catalog_module.domain.entities import (
    AssociatedObjectType,
    Catalog,
    CatalogProduct,
    Category,
    CategoryLink,
    EditorialReview,
    Image,
    ProductAssociation,
    PropertyValue,
    PropertyValueType,
    SeoInfo,
)


class PrimaryKeyResolvingMap:
    """Remembers (model, entity) pairs to copy generated ids back.

    Entities get their primary keys when the unit of work flushes. After
    the commit, ``resolve_primary_keys`` writes those keys onto the domain
    models the entities were created from.
    """

    def __init__(self) -> None:
        self._pairs: list[tuple[Entity, Any]] = []

    def __len__(self) -> int:
        return len(self._pairs)

    def add_pair(self, model: Entity, entity: Any) -> None:
        self._pairs.append((model, entity))

    def resolve_primary_keys(self) -> None:
        for model, entity in self._pairs:
            # Matched-and-patched sources are never flushed and keep no id
            if entity.id is not None:
                model.id = entity.id


def _is_loaded(entity: Any, attribute: str) -> bool:
    """Whether a relationship was loaded and can be read without IO."""
    return attribute not in sa_inspect(entity).unloaded


# ============================================================================
# Catalogs and Categories
# ============================================================================


def catalog_to_model(entity: CatalogEntity) -> Catalog:
    return Catalog(id=entity.id, name=entity.name, is_virtual=entity.is_virtual)


def category_to_model(entity: CategoryEntity) -> Category:
    return Category(
        id=entity.id,
        catalog_id=entity.catalog_id,
        parent_id=entity.parent_id,
        code=entity.code,
        name=entity.name,
    )


# ============================================================================
# Property Values
# ============================================================================


_VALUE_COLUMNS: dict[PropertyValueType, str] = {
    PropertyValueType.SHORT_TEXT: "short_text_value",
    PropertyValueType.LONG_TEXT: "long_text_value",
    PropertyValueType.NUMBER: "decimal_value",
    PropertyValueType.INTEGER: "integer_value",
    PropertyValueType.BOOLEAN: "boolean_value",
    PropertyValueType.DATE_TIME: "datetime_value",
}


def _coerce_value(value_type: PropertyValueType, value: Any) -> Any:
    if value is None:
        return None
    if value_type is PropertyValueType.NUMBER:
        return value if isinstance(value, Decimal) else Decimal(str(value))
    if value_type is PropertyValueType.INTEGER:
        return int(value)
    if value_type is PropertyValueType.BOOLEAN:
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes")
        return bool(value)
    if value_type in (PropertyValueType.SHORT_TEXT, PropertyValueType.LONG_TEXT):
        return str(value)
    return value


def property_value_to_model(entity: PropertyValueEntity) -> PropertyValue:
    value_type = PropertyValueType(entity.value_type)
    return PropertyValue(
        id=entity.id,
        property_name=entity.name,
        value=getattr(entity, _VALUE_COLUMNS[value_type]),
        value_type=value_type,
        language_code=entity.locale,
        alias=entity.alias,
    )


def property_value_from_model(
    model: PropertyValue,
    pk_map: PrimaryKeyResolvingMap,
) -> PropertyValueEntity:
    value_type = PropertyValueType(model.value_type)
    entity = PropertyValueEntity(
        name=model.property_name,
        value_type=value_type.value,
        locale=model.language_code,
        alias=model.alias,
    )
    if model.id:
        entity.id = model.id
    setattr(entity, _VALUE_COLUMNS[value_type], _coerce_value(value_type, model.value))
    pk_map.add_pair(model, entity)
    return entity


def _property_value_key(entity: PropertyValueEntity) -> tuple:
    return (
        entity.name,
        entity.locale,
        entity.value_type,
        *(getattr(entity, column) for column in _VALUE_COLUMNS.values()),
    )


def patch_property_value(source: PropertyValueEntity, target: PropertyValueEntity) -> None:
    target.alias = source.alias


# ============================================================================
# Images, Reviews and Links
# ============================================================================


def image_to_model(entity: ImageEntity) -> Image:
    return Image(
        id=entity.id,
        url=entity.url,
        name=entity.name,
        group=entity.group,
        sort_order=entity.sort_order,
        language_code=entity.language_code,
    )


def image_from_model(model: Image, pk_map: PrimaryKeyResolvingMap) -> ImageEntity:
    entity = ImageEntity(
        url=model.url,
        name=model.name,
        group=model.group,
        sort_order=model.sort_order,
        language_code=model.language_code,
    )
    if model.id:
        entity.id = model.id
    pk_map.add_pair(model, entity)
    return entity


def patch_image(source: ImageEntity, target: ImageEntity) -> None:
    target.name = source.name
    target.sort_order = source.sort_order
    target.language_code = source.language_code


def review_to_model(entity: EditorialReviewEntity) -> EditorialReview:
    return EditorialReview(
        id=entity.id,
        content=entity.content,
        review_type=entity.review_type,
        language_code=entity.language_code,
    )


def review_from_model(
    model: EditorialReview,
    pk_map: PrimaryKeyResolvingMap,
) -> EditorialReviewEntity:
    entity = EditorialReviewEntity(
        content=model.content,
        review_type=model.review_type,
        language_code=model.language_code,
    )
    if model.id:
        entity.id = model.id
    pk_map.add_pair(model, entity)
    return entity


def patch_review(source: EditorialReviewEntity, target: EditorialReviewEntity) -> None:
    target.content = source.content


def link_to_model(entity: CategoryItemRelationEntity) -> CategoryLink:
    return CategoryLink(
        catalog_id=entity.catalog_id,
        category_id=entity.category_id,
        priority=entity.priority,
    )


def link_from_model(model: CategoryLink) -> CategoryItemRelationEntity:
    return CategoryItemRelationEntity(
        catalog_id=model.catalog_id,
        category_id=model.category_id,
        priority=model.priority,
    )


def patch_link(source: CategoryItemRelationEntity, target: CategoryItemRelationEntity) -> None:
    target.priority = source.priority


# ============================================================================
# Associations
# ============================================================================


def association_to_model(entity: AssociationEntity) -> ProductAssociation:
    if entity.associated_category_id:
        object_type = AssociatedObjectType.CATEGORY
        object_id = entity.associated_category_id
    else:
        object_type = AssociatedObjectType.PRODUCT
        object_id = entity.associated_item_id

    return ProductAssociation(
        id=entity.id,
        type=entity.association_type,
        item_id=entity.item_id,
        associated_object_id=object_id,
        associated_object_type=object_type,
        priority=entity.priority,
        quantity=entity.quantity,
        tags=[tag for tag in (entity.tags or "").split(",") if tag],
        outer_id=entity.outer_id,
    )


def association_from_model(model: ProductAssociation) -> AssociationEntity:
    object_type = AssociatedObjectType(model.associated_object_type)
    entity = AssociationEntity(
        item_id=model.item_id,
        association_type=model.type,
        associated_item_id=(
            model.associated_object_id
            if object_type is AssociatedObjectType.PRODUCT
            else None
        ),
        associated_category_id=(
            model.associated_object_id
            if object_type is AssociatedObjectType.CATEGORY
            else None
        ),
        priority=model.priority,
        quantity=model.quantity,
        tags=",".join(model.tags) if model.tags else None,
        outer_id=model.outer_id,
    )
    if model.id:
        entity.id = model.id
    return entity


def association_key(entity: AssociationEntity) -> str:
    """Identity of an association within its owner."""
    return ":".join(
        str(part or "")
        for part in (
            entity.item_id,
            entity.association_type,
            entity.associated_item_id,
            entity.associated_category_id,
        )
    )


def patch_association(source: AssociationEntity, target: AssociationEntity) -> None:
    target.association_type = source.association_type
    target.associated_item_id = source.associated_item_id
    target.associated_category_id = source.associated_category_id
    target.priority = source.priority
    target.quantity = source.quantity
    target.tags = source.tags
    target.outer_id = source.outer_id


# ============================================================================
# SEO
# ============================================================================


def seo_to_model(entity: SeoUrlKeywordEntity) -> SeoInfo:
    return SeoInfo(
        id=entity.id,
        object_id=entity.object_id,
        object_type=entity.object_type,
        semantic_url=entity.keyword,
        store_id=entity.store_id,
        language_code=entity.language,
        is_active=entity.is_active,
        page_title=entity.title,
        meta_description=entity.meta_description,
        meta_keywords=entity.meta_keywords,
        image_alt_description=entity.image_alt_description,
    )


def seo_from_model(
    model: SeoInfo,
    object_type: str,
    object_id: str,
    pk_map: PrimaryKeyResolvingMap,
) -> SeoUrlKeywordEntity:
    entity = SeoUrlKeywordEntity(
        object_type=object_type,
        object_id=object_id,
        keyword=model.semantic_url,
        store_id=model.store_id,
        language=model.language_code,
        is_active=model.is_active,
        title=model.page_title,
        meta_description=model.meta_description,
        meta_keywords=model.meta_keywords,
        image_alt_description=model.image_alt_description,
    )
    if model.id:
        entity.id = model.id
    pk_map.add_pair(model, entity)
    return entity


def seo_key(entity: SeoUrlKeywordEntity) -> tuple[str | None, str | None]:
    return (entity.store_id, entity.language)


def patch_seo(source: SeoUrlKeywordEntity, target: SeoUrlKeywordEntity) -> None:
    target.keyword = source.keyword
    target.is_active = source.is_active
    target.title = source.title
    target.meta_description = source.meta_description
    target.meta_keywords = source.meta_keywords
    target.image_alt_description = source.image_alt_description


# ============================================================================
# Items
# ============================================================================


_ITEM_FIELDS = (
    "code",
    "name",
    "catalog_id",
    "category_id",
    "product_type",
    "gtin",
    "vendor",
    "outer_id",
    "priority",
    "is_active",
    "is_buyable",
    "track_inventory",
    "weight",
    "start_date",
    "end_date",
)


def item_to_model(
    entity: ItemEntity,
    catalogs: Mapping[str, Catalog],
    categories: Mapping[str, Category],
) -> CatalogProduct:
    """Convert an item entity (and its loaded children) to a product.

    Args:
        entity: Item entity loaded by the repository.
        catalogs: All catalogs by id.
        categories: All categories by id.

    Returns:
        Domain product. Unloaded collections are None.
    """
    product = CatalogProduct(
        id=entity.id,
        main_product_id=entity.main_product_id,
        created_date=entity.created_date,
        modified_date=entity.modified_date,
        **{name: getattr(entity, name) for name in _ITEM_FIELDS},
    )
    product.catalog = catalogs.get(entity.catalog_id)
    if entity.category_id:
        product.category = categories.get(entity.category_id)

    if _is_loaded(entity, "property_values"):
        product.properties = [property_value_to_model(v) for v in entity.property_values]
    if _is_loaded(entity, "images"):
        product.images = [image_to_model(i) for i in entity.images]
    if _is_loaded(entity, "editorial_reviews"):
        product.reviews = [review_to_model(r) for r in entity.editorial_reviews]
    if _is_loaded(entity, "category_links"):
        product.links = [link_to_model(link) for link in entity.category_links]
    if _is_loaded(entity, "associations"):
        product.associations = [association_to_model(a) for a in entity.associations]
    if _is_loaded(entity, "referenced_associations"):
        product.referenced_associations = [
            association_to_model(a) for a in entity.referenced_associations
        ]
    if _is_loaded(entity, "children"):
        product.variations = [
            item_to_model(child, catalogs, categories) for child in entity.children
        ]

    return product


def item_from_model(product: CatalogProduct, pk_map: PrimaryKeyResolvingMap) -> ItemEntity:
    """Build a new item entity (with child rows) from a product.

    Variations are not converted here; the caller attaches them to
    ``children`` so that they share the unit of work.
    """
    entity = ItemEntity(
        main_product_id=product.main_product_id,
        **{name: getattr(product, name) for name in _ITEM_FIELDS},
    )
    if product.id:
        entity.id = product.id
    if product.created_date:
        entity.created_date = product.created_date
    pk_map.add_pair(product, entity)

    entity.property_values = [
        property_value_from_model(v, pk_map) for v in product.properties or []
    ]
    entity.images = [image_from_model(i, pk_map) for i in product.images or []]
    entity.editorial_reviews = [review_from_model(r, pk_map) for r in product.reviews or []]
    entity.category_links = [link_from_model(link) for link in product.links or []]

    associations = []
    for association in product.associations or []:
        association_entity = association_from_model(association)
        associations.append(association_entity)
        pk_map.add_pair(association, association_entity)
    entity.associations = associations

    return entity


def patch_item(
    product: CatalogProduct,
    entity: ItemEntity,
    pk_map: PrimaryKeyResolvingMap,
) -> None:
    """Apply a product onto a tracked item entity.

    Scalar fields are always copied. Each child collection is patched
    only when the product carries it (not None).
    """
    for name in _ITEM_FIELDS:
        setattr(entity, name, getattr(product, name))

    if product.properties is not None:
        patch_collection(
            [property_value_from_model(v, pk_map) for v in product.properties],
            entity.property_values,
            key=_property_value_key,
            patch=patch_property_value,
        )
    if product.images is not None:
        patch_collection(
            [image_from_model(i, pk_map) for i in product.images],
            entity.images,
            key=lambda image: (image.url, image.group),
            patch=patch_image,
        )
    if product.reviews is not None:
        patch_collection(
            [review_from_model(r, pk_map) for r in product.reviews],
            entity.editorial_reviews,
            key=lambda review: (review.review_type, review.language_code),
            patch=patch_review,
        )
    if product.links is not None:
        patch_collection(
            [link_from_model(link) for link in product.links],
            entity.category_links,
            key=lambda link: (link.catalog_id, link.category_id),
            patch=patch_link,
        )
    if product.associations is not None:
        sources = []
        for association in product.associations:
            association.item_id = entity.id
            source = association_from_model(association)
            pk_map.add_pair(association, source)
            sources.append(source)
        patch_collection(
            sources,
            entity.associations,
            key=association_key,
            patch=patch_association,
        )
