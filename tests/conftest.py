"""Shared fixtures.

Every test gets its own in-memory SQLite database (aiosqlite) with
foreign keys enforced, a fresh cache manager and services bound to both.
"""

from collections.abc import Callable
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from catalog_module.application import (
    AssociationSearchService,
    AssociationService,
    OutlineService,
    ProductSearchService,
    ProductService,
    SeoService,
)
from catalog_module.catalog.models import CatalogEntity, CategoryEntity
from catalog_module.domain.entities import CatalogProduct
from catalog_module.infrastructure.cache import CacheManager
from catalog_module.infrastructure.database import Base

MAIN_CATALOG = "main"
VIRTUAL_CATALOG = "storefront"


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def engine():
    """In-memory database with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def catalog_tree(session_factory) -> None:
    """Seed a real catalog with a category tree and a virtual catalog.

    main: electronics > audio > headphones, electronics > computers
    storefront (virtual): deals
    """
    async with session_factory() as session:
        session.add_all(
            [
                CatalogEntity(id=MAIN_CATALOG, name="Main"),
                CatalogEntity(id=VIRTUAL_CATALOG, name="Storefront", is_virtual=True),
            ]
        )
        await session.flush()
        session.add_all(
            [
                CategoryEntity(id="electronics", catalog_id=MAIN_CATALOG, code="el", name="Electronics"),
                CategoryEntity(id="deals", catalog_id=VIRTUAL_CATALOG, code="deals", name="Deals"),
            ]
        )
        await session.flush()
        session.add_all(
            [
                CategoryEntity(
                    id="audio", catalog_id=MAIN_CATALOG, parent_id="electronics", code="au", name="Audio"
                ),
                CategoryEntity(
                    id="computers",
                    catalog_id=MAIN_CATALOG,
                    parent_id="electronics",
                    code="pc",
                    name="Computers",
                ),
            ]
        )
        await session.flush()
        session.add(
            CategoryEntity(
                id="headphones", catalog_id=MAIN_CATALOG, parent_id="audio", code="hp", name="Headphones"
            )
        )
        await session.commit()


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def cache() -> CacheManager:
    """Enabled cache manager private to the test."""
    return CacheManager(enabled=True)


@pytest.fixture
def seo_service(session_factory, cache) -> SeoService:
    return SeoService(session_factory, cache)


@pytest.fixture
def outline_service(session_factory, cache) -> OutlineService:
    return OutlineService(session_factory, cache)


@pytest.fixture
def product_service(session_factory, cache, seo_service, outline_service) -> ProductService:
    return ProductService(session_factory, cache, seo_service, outline_service)


@pytest.fixture
def association_service(session_factory, cache) -> AssociationService:
    return AssociationService(session_factory, cache)


@pytest.fixture
def association_search_service(session_factory, cache) -> AssociationSearchService:
    return AssociationSearchService(session_factory, cache)


@pytest.fixture
def product_search_service(session_factory, cache, product_service) -> ProductSearchService:
    return ProductSearchService(session_factory, cache, product_service)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def make_product() -> Callable[..., CatalogProduct]:
    """Factory for unsaved products in the main catalog."""

    def _make(code: str = "HP-001", **fields) -> CatalogProduct:
        fields.setdefault("name", f"Product {code}")
        fields.setdefault("catalog_id", MAIN_CATALOG)
        fields.setdefault("category_id", "headphones")
        fields.setdefault("weight", Decimal("0.25"))
        return CatalogProduct(code=code, **fields)

    return _make
