"""In-process cache regions.

Each region wraps a cachetools TTLCache and can expire its entries by key,
by tag, or all at once. Cached values are deep-copied on the way in and out
so that callers never share mutable state with the cache.

Every expiry advances the region's change token. A value loaded while the
token moved is returned to its caller but not stored, so a read that
overlaps a write never caches the pre-write state.
"""

import copy
import inspect
import threading
from collections.abc import Awaitable, Callable, Hashable, Iterable
from typing import Any, TypeVar

import structlog
from cachetools import TTLCache

from catalog_module.infrastructure.config import settings

logger = structlog.get_logger()

T = TypeVar("T")

_MISSING = object()


class _EvictingTTLCache(TTLCache):
    """TTLCache reporting every key it drops on its own."""

    def __init__(self, maxsize: int, ttl: float, on_evict: Callable[[Hashable], None]) -> None:
        super().__init__(maxsize=maxsize, ttl=ttl)
        self._on_evict = on_evict

    def popitem(self):
        key, value = super().popitem()
        self._on_evict(key)
        return key, value

    def expire(self, time=None):
        expired = super().expire(time)
        for key, _ in expired:
            self._on_evict(key)
        return expired


class CacheRegion:
    """A named group of cache entries that can be expired together.

    Example usage:
        region = CacheRegion(maxsize=100, ttl=60)
        products = await region.get_or_create(
            ("GetByIds", "p1", "ItemInfo"),
            lambda: load_products(["p1"]),
            tags=["p1"],
        )
        region.expire_tags(["p1"])
    """

    name = "default"

    def __init__(
        self,
        maxsize: int | None = None,
        ttl: float | None = None,
        enabled: bool | None = None,
    ) -> None:
        """Initialize region.

        Args:
            maxsize: Maximum number of entries kept.
            ttl: Entry time-to-live in seconds.
            enabled: When False, every lookup goes to the factory.
        """
        self.enabled = settings.cache_enabled if enabled is None else enabled
        self._cache = _EvictingTTLCache(
            maxsize=maxsize or settings.cache_max_size,
            ttl=ttl or settings.cache_ttl_seconds,
            on_evict=self._forget,
        )
        self._keys_by_tag: dict[str, set[Hashable]] = {}
        self._tags_by_key: dict[Hashable, set[str]] = {}
        self._token = 0
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._cache

    @property
    def tag_count(self) -> int:
        """Number of tags currently indexed."""
        with self._lock:
            return len(self._keys_by_tag)

    def change_token(self) -> int:
        """Return the current change token.

        Pass it to :meth:`set` to drop values loaded before a later expiry.
        """
        with self._lock:
            return self._token

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Get a copy of a cached value.

        Args:
            key: Cache key.
            default: Returned when the key is absent or expired.

        Returns:
            Copy of the cached value, or default.
        """
        with self._lock:
            value = self._cache.get(key, _MISSING)
        if value is _MISSING:
            return default
        return copy.deepcopy(value)

    def set(
        self,
        key: Hashable,
        value: Any,
        tags: Iterable[str] = (),
        token: int | None = None,
    ) -> bool:
        """Store a value.

        Args:
            key: Cache key.
            value: Value to cache (a copy is stored).
            tags: Tags the entry can later be expired by.
            token: Change token taken before the value was loaded. The value
                is discarded when the region was expired since.

        Returns:
            True if the value was stored.
        """
        if not self.enabled:
            return False
        stored = copy.deepcopy(value)
        with self._lock:
            if token is not None and token != self._token:
                logger.debug("Stale cache entry discarded", region=self.name, key=str(key))
                return False
            self._forget(key)
            self._cache[key] = stored
            tag_set = set(tags)
            self._tags_by_key[key] = tag_set
            for tag in tag_set:
                self._keys_by_tag.setdefault(tag, set()).add(key)
        return True

    async def get_or_create(
        self,
        key: Hashable,
        factory: Callable[[], T | Awaitable[T]],
        tags: Iterable[str] = (),
    ) -> T:
        """Return the cached value or build it with the factory.

        Args:
            key: Cache key.
            factory: Sync or async callable producing the value.
            tags: Tags attached to a newly created entry.

        Returns:
            The value (always a copy when caching is enabled).
        """
        if not self.enabled:
            value = factory()
            if inspect.isawaitable(value):
                value = await value
            return value

        cached = self.get(key, _MISSING)
        if cached is not _MISSING:
            return cached

        token = self.change_token()
        value = factory()
        if inspect.isawaitable(value):
            value = await value

        if self.set(key, value, tags, token=token):
            logger.debug("Cache entry created", region=self.name, key=str(key))
        return copy.deepcopy(value)

    def expire(self, key: Hashable) -> None:
        """Remove a single entry."""
        with self._lock:
            self._token += 1
            self._cache.pop(key, None)
            self._forget(key)

    def expire_tags(self, tags: Iterable[str]) -> int:
        """Remove every entry carrying any of the given tags.

        Args:
            tags: Tags to expire.

        Returns:
            Number of entries removed.
        """
        removed = 0
        with self._lock:
            self._token += 1
            for tag in set(tags):
                for key in list(self._keys_by_tag.get(tag, ())):
                    if self._cache.pop(key, _MISSING) is not _MISSING:
                        removed += 1
                    self._forget(key)
        if removed:
            logger.debug("Cache entries expired", region=self.name, count=removed)
        return removed

    def expire_region(self) -> None:
        """Remove every entry of this region."""
        with self._lock:
            self._token += 1
            self._cache.clear()
            self._keys_by_tag.clear()
            self._tags_by_key.clear()
        logger.debug("Cache region expired", region=self.name)

    def _forget(self, key: Hashable) -> None:
        # Caller holds the lock
        for tag in self._tags_by_key.pop(key, ()):
            keys = self._keys_by_tag.get(tag)
            if keys is None:
                continue
            keys.discard(key)
            if not keys:
                del self._keys_by_tag[tag]


class ItemCacheRegion(CacheRegion):
    """Cached product lookups, tagged by product id."""

    name = "items"

    def expire_products(self, product_ids: Iterable[str | None]) -> int:
        """Expire every cached lookup that includes one of the products.

        Args:
            product_ids: Product ids; None values are ignored.

        Returns:
            Number of entries removed.
        """
        return self.expire_tags(pid for pid in product_ids if pid)


class AssociationSearchCacheRegion(CacheRegion):
    """Cached association search results."""

    name = "association-search"


class CatalogCacheRegion(CacheRegion):
    """Cached catalogs and categories used for conversion and outlines."""

    name = "catalogs"


class CacheManager:
    """Owns the cache regions used by the catalog services."""

    def __init__(self, enabled: bool | None = None) -> None:
        """Initialize all regions.

        Args:
            enabled: Overrides settings.cache_enabled when given.
        """
        self.items = ItemCacheRegion(enabled=enabled)
        self.association_search = AssociationSearchCacheRegion(enabled=enabled)
        self.catalogs = CatalogCacheRegion(enabled=enabled)

    @property
    def regions(self) -> list[CacheRegion]:
        return [self.items, self.association_search, self.catalogs]

    def reset(self) -> None:
        """Expire every region."""
        for region in self.regions:
            region.expire_region()


# Global cache manager instance
_cache_manager: CacheManager | None = None


def get_cache_manager() -> CacheManager:
    """Get cache manager singleton."""
    global _cache_manager
    if _cache_manager is None:
        _cache_manager = CacheManager()
    return _cache_manager
