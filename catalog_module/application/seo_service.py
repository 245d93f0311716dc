"""SEO application service.

Loads, upserts and deletes SEO keywords of any object exposing ``id``,
``seo_object_type`` and ``seo_infos`` (products, variations, outline
items, catalogs, categories).
"""

from collections import defaultdict
from collections.abc import Sequence
from typing import Any

import structlog

from catalog_module.application.service_base import CatalogServiceBase
from catalog_module.catalog.converters import (
    PrimaryKeyResolvingMap,
    patch_seo,
    seo_from_model,
    seo_key,
    seo_to_model,
)
from catalog_module.catalog.patching import patch_collection
from catalog_module.domain.entities import SeoInfo

logger = structlog.get_logger()


def _object_key(obj: Any) -> tuple[str, str]:
    return (obj.seo_object_type, obj.id)


class SeoService(CatalogServiceBase):
    """Application service for SEO keywords."""

    async def load_seo_for_objects(self, objects: Sequence[Any]) -> None:
        """Assign ``seo_infos`` on each object from the stored keywords.

        Args:
            objects: Objects to fill; objects without an id are skipped.
        """
        targets = [obj for obj in objects if obj.id]
        if not targets:
            return

        async with self.repository() as repo:
            keywords = await repo.get_seo_keywords(_object_key(obj) for obj in targets)

        infos_by_object: dict[tuple[str, str], list[SeoInfo]] = defaultdict(list)
        for keyword in keywords:
            infos_by_object[(keyword.object_type, keyword.object_id)].append(seo_to_model(keyword))

        for obj in targets:
            obj.seo_infos = list(infos_by_object.get(_object_key(obj), []))

    async def upsert_seo_for_objects(self, objects: Sequence[Any]) -> None:
        """Store the ``seo_infos`` of each object.

        Objects whose seo_infos is None are left untouched. For the others,
        stored keywords are patched by (store, language): matches are
        updated, new ones inserted and missing ones deleted.

        Args:
            objects: Objects carrying SEO infos.
        """
        targets = [obj for obj in objects if obj.id and obj.seo_infos is not None]
        if not targets:
            return

        pk_map = PrimaryKeyResolvingMap()
        async with self.repository() as repo:
            existing = await repo.get_seo_keywords(_object_key(obj) for obj in targets)
            existing_by_object = defaultdict(list)
            for keyword in existing:
                existing_by_object[(keyword.object_type, keyword.object_id)].append(keyword)

            removed = []
            for obj in targets:
                for info in obj.seo_infos:
                    info.object_id = obj.id
                    info.object_type = obj.seo_object_type
                sources = [
                    seo_from_model(info, obj.seo_object_type, obj.id, pk_map)
                    for info in obj.seo_infos
                ]
                result = patch_collection(
                    sources,
                    list(existing_by_object.get(_object_key(obj), [])),
                    key=seo_key,
                    patch=patch_seo,
                    add=repo.add,
                )
                removed.extend(result.removed)

            for keyword in removed:
                await repo.remove(keyword)

            await self.commit_changes(repo, "upsert_seo")

        pk_map.resolve_primary_keys()
        logger.info("SEO infos saved", object_count=len(targets), removed=len(removed))

    async def delete_seo_for_objects(self, objects: Sequence[Any]) -> None:
        """Delete all stored keywords of the given objects.

        Args:
            objects: Objects whose SEO should be removed.
        """
        targets = [obj for obj in objects if obj.id]
        if not targets:
            return

        async with self.repository() as repo:
            keywords = await repo.get_seo_keywords(_object_key(obj) for obj in targets)
            for keyword in keywords:
                await repo.remove(keyword)
            await self.commit_changes(repo, "delete_seo")

        logger.info("SEO infos deleted", object_count=len(targets), removed=len(keywords))


def get_seo_service() -> SeoService:
    """Get SEO service instance."""
    return SeoService()
