#!/usr/bin/env python3
"""Seed demo catalog script.

Creates a small demo catalog (one real catalog, a virtual one and a
category tree) and seeds products, variations and associations through
the catalog services.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --products 50
    python scripts/seed_catalog.py --no-clear
"""

import argparse
import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import delete

from catalog_module.application import AssociationService, ProductService
from catalog_module.catalog.models import CatalogEntity, CategoryEntity, ItemEntity
from catalog_module.domain.entities import (
    AssociatedObjectType,
    CatalogProduct,
    CategoryLink,
    EditorialReview,
    Image,
    ProductAssociation,
    PropertyValue,
    PropertyValueType,
    SeoInfo,
)
from catalog_module.infrastructure.database import async_session_factory, create_tables
from catalog_module.infrastructure.logging_config import configure_logging

CATALOG_ID = "demo-catalog"
VIRTUAL_CATALOG_ID = "demo-virtual"

# (id, parent id, name)
CATEGORIES = [
    ("electronics", None, "Electronics"),
    ("audio", "electronics", "Audio"),
    ("headphones", "audio", "Headphones"),
    ("computers", "electronics", "Computers"),
    ("accessories", "computers", "Accessories"),
]

COLORS = ["Black", "White", "Blue"]


async def seed_structure(clear: bool) -> None:
    """Create demo catalogs and categories.

    Args:
        clear: Whether to delete the existing demo products first.
    """
    async with async_session_factory() as session:
        if clear:
            await session.execute(
                delete(ItemEntity).where(
                    ItemEntity.catalog_id.in_([CATALOG_ID, VIRTUAL_CATALOG_ID])
                )
            )
        for catalog_id, name, is_virtual in (
            (CATALOG_ID, "Demo Catalog", False),
            (VIRTUAL_CATALOG_ID, "Demo Storefront", True),
        ):
            await session.merge(CatalogEntity(id=catalog_id, name=name, is_virtual=is_virtual))
        for category_id, parent_id, name in CATEGORIES:
            await session.merge(
                CategoryEntity(
                    id=category_id,
                    catalog_id=CATALOG_ID,
                    parent_id=parent_id,
                    code=category_id,
                    name=name,
                )
            )
        await session.commit()


def build_product(index: int) -> CatalogProduct:
    """Build a demo product with variations.

    Args:
        index: Sequence number used for codes and names.
    """
    category_id = "headphones" if index % 2 else "accessories"
    code = f"DEMO-{index:04d}"
    product = CatalogProduct(
        code=code,
        name=f"Demo {category_id.title()} {index}",
        catalog_id=CATALOG_ID,
        category_id=category_id,
        vendor="Demo Vendor",
        weight=Decimal("0.35"),
        properties=[
            PropertyValue(property_name="Brand", value="Acme"),
            PropertyValue(
                property_name="Warranty",
                value=12 + index % 3 * 12,
                value_type=PropertyValueType.INTEGER,
            ),
        ],
        images=[Image(url=f"https://cdn.example.com/{code.lower()}.jpg", group="main")],
        reviews=[EditorialReview(content=f"Marketing description for {code}.", language_code="en-US")],
        links=[CategoryLink(catalog_id=VIRTUAL_CATALOG_ID)],
        seo_infos=[SeoInfo(semantic_url=code.lower(), language_code="en-US")],
    )
    product.variations = [
        CatalogProduct(
            code=f"{code}-{color[:3].upper()}",
            name=f"{product.name} ({color})",
            category_id=category_id,
            properties=[PropertyValue(property_name="Color", value=color)],
        )
        for color in COLORS[: 1 + index % len(COLORS)]
    ]
    return product


async def seed_products(count: int) -> dict:
    """Seed products and link neighbours as accessories.

    Args:
        count: Number of main products.

    Returns:
        Seeding result.
    """
    products = [build_product(index) for index in range(1, count + 1)]
    await ProductService().create(products)

    for product, accessory in zip(products, products[1:]):
        product.associations = [
            ProductAssociation(
                type="Accessories",
                associated_object_id=accessory.id,
                priority=1,
                quantity=1,
                tags=["demo"],
            ),
            ProductAssociation(
                type="Related Items",
                associated_object_id="audio",
                associated_object_type=AssociatedObjectType.CATEGORY,
            ),
        ]
    await AssociationService().save_changes(products)

    return {
        "products_created": len(products),
        "variations_created": sum(len(p.variations or []) for p in products),
        "associations_created": sum(len(p.associations or []) for p in products),
    }


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed a demo catalog",
    )
    parser.add_argument(
        "--products",
        type=int,
        default=20,
        help="Number of main products (default: 20)",
    )
    parser.add_argument(
        "--no-clear",
        action="store_true",
        help="Don't delete existing demo products before seeding",
    )

    args = parser.parse_args()
    configure_logging(level="WARNING", json=False)

    print("=" * 60)
    print("Catalog Seeder")
    print("=" * 60)
    print(f"Products: {args.products}")
    print(f"Clear existing: {not args.no_clear}")
    print()

    print("Creating database tables...")
    await create_tables()
    await seed_structure(clear=not args.no_clear)
    print("Catalogs and categories ready.")
    print()

    print("Seeding products...")
    result = await seed_products(args.products)
    print(f"  ✓ Products: {result['products_created']}")
    print(f"  ✓ Variations: {result['variations_created']}")
    print(f"  ✓ Associations: {result['associations_created']}")
    print()

    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
