"""Product association application service.

Associations link an owner product to another product or to a category
(cross-sells, accessories, ...). Every change expires the owners in the
item cache and the whole association search cache region.
"""

from collections.abc import Iterable, Sequence
from typing import Any

import structlog

from catalog_module.application.service_base import CatalogServiceBase
from catalog_module.catalog.converters import (
    PrimaryKeyResolvingMap,
    association_from_model,
    association_key,
    association_to_model,
    patch_association,
)
from catalog_module.catalog.models import AssociationEntity
from catalog_module.catalog.patching import patch_collection
from catalog_module.catalog.response_groups import ItemResponseGroup
from catalog_module.domain.entities import ProductAssociation

logger = structlog.get_logger()


class AssociationService(CatalogServiceBase):
    """Application service for product associations.

    Owners are any objects with an ``id`` and an ``associations`` list,
    usually CatalogProduct instances.
    """

    async def load_associations(self, owners: Sequence[Any]) -> None:
        """Replace ``associations`` of each owner with the stored ones.

        Args:
            owners: Association owners; owners that do not exist are left as is.
        """
        owners_by_id = {owner.id: owner for owner in owners if owner.id}
        if not owners_by_id:
            return

        async with self.repository() as repo:
            entities = await repo.get_item_by_ids(
                list(owners_by_id),
                ItemResponseGroup.ITEM_ASSOCIATIONS,
            )
            for entity in entities:
                owner = owners_by_id.get(entity.id)
                if owner is None:
                    continue
                if owner.associations is None:
                    owner.associations = []
                owner.associations.clear()
                owner.associations.extend(association_to_model(a) for a in entity.associations)

    async def get_associations(self, owner_ids: Iterable[str]) -> list[ProductAssociation]:
        """Get the associations of the given owners.

        Args:
            owner_ids: Owner product ids.

        Returns:
            Flat list of associations, grouped by owner in input order.
        """
        ids = [owner_id for owner_id in dict.fromkeys(owner_ids) if owner_id]
        async with self.repository() as repo:
            entities = await repo.get_item_by_ids(ids, ItemResponseGroup.ITEM_ASSOCIATIONS)
            by_owner = {
                entity.id: [association_to_model(a) for a in entity.associations]
                for entity in entities
            }
        return [association for owner_id in ids for association in by_owner.get(owner_id, [])]

    async def save_changes(self, owners: Sequence[Any]) -> None:
        """Make the stored associations of each owner match ``owner.associations``.

        Owners whose associations is None are skipped. For the others,
        associations are matched by owner, type and target; matches are
        updated, new ones inserted and missing ones deleted.

        Args:
            owners: Association owners.

        Raises:
            CatalogPersistenceError: If the unit of work fails to commit.
        """
        pk_map = PrimaryKeyResolvingMap()
        changed: list[AssociationEntity] = []
        owner_ids: list[str] = []
        for owner in owners:
            if owner.id is None or owner.associations is None:
                continue
            owner_ids.append(owner.id)
            for association in owner.associations:
                association.item_id = owner.id
                entity = association_from_model(association)
                pk_map.add_pair(association, entity)
                changed.append(entity)

        if not owner_ids:
            return

        async with self.repository() as repo:
            existing = await repo.get_associations_by_owner_ids(owner_ids)
            result = patch_collection(
                changed,
                list(existing),
                key=association_key,
                patch=patch_association,
                add=repo.add,
            )
            for source, target in result.updated:
                source.id = target.id
            for entity in result.removed:
                await repo.remove(entity)
            await self.commit_changes(repo, "save_associations")
        pk_map.resolve_primary_keys()

        affected = set(owner_ids)
        affected.update(e.associated_item_id for e in changed if e.associated_item_id)
        affected.update(e.associated_item_id for e in result.removed if e.associated_item_id)
        self._expire(affected)

        logger.info(
            "Associations saved",
            owner_ids=owner_ids,
            added=len(result.added),
            updated=len(result.updated),
            removed=len(result.removed),
        )

    async def update_associations(self, associations: Sequence[ProductAssociation]) -> None:
        """Insert or update individual associations.

        An association matches a stored one with the same owner and the
        same associated product or category.

        Args:
            associations: Associations to upsert; item_id must be set.

        Raises:
            CatalogPersistenceError: If the unit of work fails to commit.
        """
        if not associations:
            return

        pk_map = PrimaryKeyResolvingMap()
        affected: set[str] = set()
        async with self.repository() as repo:
            for association in associations:
                source = association_from_model(association)
                existing = await repo.find_association(
                    source.item_id,
                    source.associated_item_id,
                    source.associated_category_id,
                )
                if existing is None:
                    repo.add(source)
                    pk_map.add_pair(association, source)
                else:
                    patch_association(source, existing)
                    pk_map.add_pair(association, existing)

                affected.add(source.item_id)
                if source.associated_item_id:
                    affected.add(source.associated_item_id)

            await self.commit_changes(repo, "update_associations")
        pk_map.resolve_primary_keys()

        self._expire(affected)
        logger.info("Associations updated", count=len(associations))

    async def delete_associations(self, ids: Sequence[str]) -> None:
        """Delete associations by id.

        Args:
            ids: Association ids; unknown ids are ignored.

        Raises:
            CatalogPersistenceError: If the unit of work fails to commit.
        """
        if not ids:
            return

        async with self.repository() as repo:
            entities = await repo.get_associations_by_ids(ids)
            affected = {entity.item_id for entity in entities}
            affected.update(e.associated_item_id for e in entities if e.associated_item_id)
            for entity in entities:
                await repo.remove(entity)
            await self.commit_changes(repo, "delete_associations")

        self._expire(affected)
        logger.info("Associations deleted", count=len(entities))

    def _expire(self, product_ids: Iterable[str | None]) -> None:
        self.cache.items.expire_products(product_ids)
        self.cache.association_search.expire_region()


def get_association_service() -> AssociationService:
    """Get association service instance."""
    return AssociationService()
