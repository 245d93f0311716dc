"""Shared plumbing for catalog application services.

Provides the repository factory, commit handling and the cached
catalog/category lookups used for conversion and outlines.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog_module.catalog.converters import catalog_to_model, category_to_model
from catalog_module.catalog.repository import CatalogRepository
from catalog_module.domain.entities import Catalog, Category
from catalog_module.domain.exceptions import CatalogPersistenceError
from catalog_module.infrastructure.cache import CacheManager, get_cache_manager
from catalog_module.infrastructure.database import async_session_factory

logger = structlog.get_logger()


class CatalogServiceBase:
    """Base class for services working on the catalog repository."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        cache: CacheManager | None = None,
    ) -> None:
        """Initialize service.

        Args:
            session_factory: Factory for database sessions (units of work).
            cache: Cache manager holding the cache regions.
        """
        self.session_factory = session_factory or async_session_factory
        self.cache = cache or get_cache_manager()

    @asynccontextmanager
    async def repository(self) -> AsyncIterator[CatalogRepository]:
        """Open a repository on a fresh session.

        Yields:
            CatalogRepository bound to the session.
        """
        async with self.session_factory() as session:
            yield CatalogRepository(session)

    async def commit_changes(self, repository: CatalogRepository, operation: str) -> None:
        """Commit the unit of work, translating database errors.

        Args:
            repository: Repository whose session holds the changes.
            operation: Operation name for logs and the raised error.

        Raises:
            CatalogPersistenceError: If the commit fails.
        """
        try:
            await repository.commit()
        except SQLAlchemyError as e:
            await repository.rollback()
            reason = str(getattr(e, "orig", None) or e)
            logger.exception(
                "Failed to commit catalog changes",
                operation=operation,
                error=reason,
            )
            raise CatalogPersistenceError(operation, reason) from e

    async def get_all_catalogs(self) -> dict[str, Catalog]:
        """Get all catalogs by id (cached)."""
        return await self.cache.catalogs.get_or_create("AllCatalogs", self._load_catalogs)

    async def get_all_categories(self) -> dict[str, Category]:
        """Get all categories by id (cached)."""
        return await self.cache.catalogs.get_or_create("AllCategories", self._load_categories)

    async def _load_catalogs(self) -> dict[str, Catalog]:
        async with self.repository() as repo:
            return {entity.id: catalog_to_model(entity) for entity in await repo.get_catalogs()}

    async def _load_categories(self) -> dict[str, Category]:
        async with self.repository() as repo:
            return {entity.id: category_to_model(entity) for entity in await repo.get_categories()}
