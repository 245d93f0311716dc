"""SQLAlchemy models for the product catalog.

Defines catalogs, categories, items (products and variations) and the
child tables hanging off an item, plus SEO keywords.
"""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog_module.infrastructure.database import Base


def _new_id() -> str:
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Catalog Structure
# ============================================================================


class CatalogEntity(Base):
    """Catalog (real or virtual)."""

    __tablename__ = "catalogs"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    is_virtual: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<CatalogEntity(id={self.id}, name={self.name})>"


class CategoryEntity(Base):
    """Category node of a catalog tree."""

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_id)
    catalog_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("catalogs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    parent_id: Mapped[str | None] = mapped_column(
        String(128),
        ForeignKey("categories.id"),
        nullable=True,
        index=True,
    )
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<CategoryEntity(id={self.id}, code={self.code})>"


# ============================================================================
# Items
# ============================================================================


class ItemEntity(Base):
    """Product or variation.

    Variations point at their main product through main_product_id and
    are exposed on the parent as ``children``.
    """

    __tablename__ = "items"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_id)
    code: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(1024), nullable=False)
    catalog_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("catalogs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    category_id: Mapped[str | None] = mapped_column(
        String(128),
        ForeignKey("categories.id"),
        nullable=True,
        index=True,
    )
    main_product_id: Mapped[str | None] = mapped_column(
        String(128),
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    product_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    gtin: Mapped[str | None] = mapped_column(String(64), nullable=True)
    vendor: Mapped[str | None] = mapped_column(String(128), nullable=True)
    outer_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_buyable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    track_inventory: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    weight: Mapped[Decimal | None] = mapped_column(Numeric(18, 4), nullable=True)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    modified_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=_utcnow,
        onupdate=_utcnow,
    )

    # Relationships
    parent: Mapped["ItemEntity | None"] = relationship(
        "ItemEntity",
        remote_side=[id],
        back_populates="children",
    )
    children: Mapped[list["ItemEntity"]] = relationship(
        "ItemEntity",
        back_populates="parent",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    property_values: Mapped[list["PropertyValueEntity"]] = relationship(
        back_populates="item",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    images: Mapped[list["ImageEntity"]] = relationship(
        back_populates="item",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ImageEntity.sort_order",
    )
    editorial_reviews: Mapped[list["EditorialReviewEntity"]] = relationship(
        back_populates="item",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    category_links: Mapped[list["CategoryItemRelationEntity"]] = relationship(
        back_populates="item",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    associations: Mapped[list["AssociationEntity"]] = relationship(
        back_populates="item",
        foreign_keys="AssociationEntity.item_id",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="AssociationEntity.priority",
    )
    referenced_associations: Mapped[list["AssociationEntity"]] = relationship(
        foreign_keys="AssociationEntity.associated_item_id",
        viewonly=True,
    )

    def __repr__(self) -> str:
        return f"<ItemEntity(id={self.id}, code={self.code}, name={self.name[:30]})>"


class PropertyValueEntity(Base):
    """Typed property value of an item.

    Exactly one of the *_value columns is used, chosen by value_type.
    """

    __tablename__ = "property_values"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_id)
    item_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    value_type: Mapped[str] = mapped_column(String(64), nullable=False)
    short_text_value: Mapped[str | None] = mapped_column(String(512), nullable=True)
    long_text_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    decimal_value: Mapped[Decimal | None] = mapped_column(Numeric(18, 5), nullable=True)
    integer_value: Mapped[int | None] = mapped_column(Integer, nullable=True)
    boolean_value: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    datetime_value: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    locale: Mapped[str | None] = mapped_column(String(64), nullable=True)
    alias: Mapped[str | None] = mapped_column(String(512), nullable=True)

    item: Mapped["ItemEntity"] = relationship(back_populates="property_values")


class ImageEntity(Base):
    """Image asset of an item."""

    __tablename__ = "images"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_id)
    item_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    url: Mapped[str] = mapped_column(String(2083), nullable=False)
    name: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    group: Mapped[str | None] = mapped_column("group_name", String(64), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    language_code: Mapped[str | None] = mapped_column(String(5), nullable=True)

    item: Mapped["ItemEntity"] = relationship(back_populates="images")


class EditorialReviewEntity(Base):
    """Editorial review (description) of an item."""

    __tablename__ = "editorial_reviews"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_id)
    item_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    review_type: Mapped[str] = mapped_column(String(128), nullable=False)
    language_code: Mapped[str | None] = mapped_column(String(5), nullable=True)

    item: Mapped["ItemEntity"] = relationship(back_populates="editorial_reviews")


class CategoryItemRelationEntity(Base):
    """Link of an item into another catalog or category."""

    __tablename__ = "category_item_relations"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_id)
    item_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    catalog_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("catalogs.id", ondelete="CASCADE"),
        nullable=False,
    )
    category_id: Mapped[str | None] = mapped_column(
        String(128),
        ForeignKey("categories.id"),
        nullable=True,
    )
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    item: Mapped["ItemEntity"] = relationship(back_populates="category_links")


class AssociationEntity(Base):
    """Association from an item to another item or to a category."""

    __tablename__ = "associations"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_id)
    item_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    association_type: Mapped[str] = mapped_column(String(128), nullable=False)
    associated_item_id: Mapped[str | None] = mapped_column(
        String(128),
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    associated_category_id: Mapped[str | None] = mapped_column(
        String(128),
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=True,
    )
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tags: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    outer_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    item: Mapped["ItemEntity"] = relationship(
        back_populates="associations",
        foreign_keys=[item_id],
    )

    def __repr__(self) -> str:
        target = self.associated_item_id or self.associated_category_id
        return f"<AssociationEntity(item_id={self.item_id}, type={self.association_type}, target={target})>"


# ============================================================================
# SEO
# ============================================================================


class SeoUrlKeywordEntity(Base):
    """Semantic URL keyword and meta tags of any catalog object."""

    __tablename__ = "seo_url_keywords"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_id)
    object_type: Mapped[str] = mapped_column(String(64), nullable=False)
    object_id: Mapped[str] = mapped_column(String(255), nullable=False)
    keyword: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    store_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    language: Mapped[str | None] = mapped_column(String(5), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meta_description: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    meta_keywords: Mapped[str | None] = mapped_column(String(255), nullable=True)
    image_alt_description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("ix_seo_url_keywords_object", "object_type", "object_id"),
    )
