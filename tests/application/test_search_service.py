"""Tests for product and association search."""

import pytest
import pytest_asyncio

from catalog_module.catalog.search import AssociationSearchCriteria, ProductExportDataQuery
from catalog_module.domain.entities import CatalogProduct, CategoryLink, ProductAssociation


@pytest_asyncio.fixture
async def catalog(catalog_tree, product_service, make_product) -> dict[str, CatalogProduct]:
    """Products spread over categories, one linked into the storefront."""
    products = {
        "earbuds": make_product(
            "EAR-1",
            name="Wireless Earbuds",
            priority=3,
            links=[CategoryLink(catalog_id="storefront", category_id="deals")],
            variations=[make_product("EAR-1-BLK", name="Wireless Earbuds Black")],
        ),
        "studio": make_product("STU-1", name="Studio Headphones", priority=1),
        "laptop": make_product("LAP-1", name="Laptop", category_id="computers", priority=2),
    }
    await product_service.create(list(products.values()))
    return products


class TestProductSearch:
    """Tests for ProductSearchService."""

    @pytest.mark.asyncio
    async def test_by_catalog_excludes_variations(self, product_search_service, catalog) -> None:
        result = await product_search_service.search(
            ProductExportDataQuery(catalog_ids=["main"], response_group="ItemInfo")
        )

        assert result.total_count == 3
        assert [p.name for p in result.results] == ["Laptop", "Studio Headphones", "Wireless Earbuds"]

    @pytest.mark.asyncio
    async def test_linked_products_found_in_virtual_catalog(
        self, product_search_service, catalog
    ) -> None:
        result = await product_search_service.search(
            ProductExportDataQuery(catalog_ids=["storefront"], response_group="ItemInfo")
        )

        assert [p.id for p in result.results] == [catalog["earbuds"].id]

    @pytest.mark.asyncio
    async def test_by_category(self, product_search_service, catalog) -> None:
        result = await product_search_service.search(
            ProductExportDataQuery(category_ids=["computers"], response_group="ItemInfo")
        )

        assert [p.code for p in result.results] == ["LAP-1"]

    @pytest.mark.asyncio
    async def test_keyword_and_variations(self, product_search_service, catalog) -> None:
        result = await product_search_service.search(
            ProductExportDataQuery(keyword="earbuds", search_in_variations=True, response_group="ItemInfo")
        )

        assert sorted(p.code for p in result.results) == ["EAR-1", "EAR-1-BLK"]

    @pytest.mark.asyncio
    async def test_paging_and_sorting(self, product_search_service, catalog) -> None:
        result = await product_search_service.search(
            ProductExportDataQuery(
                sort_by="priority",
                sort_order="desc",
                skip=1,
                take=1,
                response_group="ItemInfo",
            )
        )

        assert result.total_count == 3
        assert [p.code for p in result.results] == ["LAP-1"]

    @pytest.mark.asyncio
    async def test_response_group_applies_to_results(self, product_search_service, catalog) -> None:
        result = await product_search_service.search(
            ProductExportDataQuery(object_ids=[catalog["earbuds"].id], response_group="ItemInfo,Variations")
        )

        assert [v.code for v in result.results[0].variations] == ["EAR-1-BLK"]


class TestAssociationSearch:
    """Tests for AssociationSearchService."""

    @pytest_asyncio.fixture
    async def associated(self, association_service, catalog) -> dict[str, CatalogProduct]:
        earbuds, studio, laptop = catalog["earbuds"], catalog["studio"], catalog["laptop"]
        earbuds.associations = [
            ProductAssociation(type="Accessories", associated_object_id=studio.id, priority=2, tags=["audio"]),
            ProductAssociation(type="Related Items", associated_object_id=laptop.id, priority=1),
        ]
        laptop.associations = [
            ProductAssociation(type="Accessories", associated_object_id=earbuds.id, tags=["bundle", "audio"]),
        ]
        await association_service.save_changes([earbuds, laptop])
        return catalog

    @pytest.mark.asyncio
    async def test_by_owner_sorted_by_priority(self, association_search_service, associated) -> None:
        result = await association_search_service.search(
            AssociationSearchCriteria(object_ids=[associated["earbuds"].id])
        )

        assert result.total_count == 2
        assert [a.type for a in result.results] == ["Related Items", "Accessories"]

    @pytest.mark.asyncio
    async def test_by_group_and_keyword(self, association_search_service, associated) -> None:
        by_group = await association_search_service.search(AssociationSearchCriteria(group="Accessories"))
        by_tag = await association_search_service.search(AssociationSearchCriteria(keyword="bundle"))

        assert by_group.total_count == 2
        assert [a.item_id for a in by_tag.results] == [associated["laptop"].id]
        assert by_tag.results[0].tags == ["bundle", "audio"]

    @pytest.mark.asyncio
    async def test_by_associated_object(self, association_search_service, associated) -> None:
        result = await association_search_service.search(
            AssociationSearchCriteria(associated_object_ids=[associated["studio"].id])
        )

        assert [a.item_id for a in result.results] == [associated["earbuds"].id]

    @pytest.mark.asyncio
    async def test_results_are_cached(self, association_search_service, cache, associated) -> None:
        criteria = AssociationSearchCriteria(group="Accessories", take=1)

        first = await association_search_service.search(criteria)
        second = await association_search_service.search(criteria)

        assert first.total_count == second.total_count == 2
        assert len(cache.association_search) == 1
