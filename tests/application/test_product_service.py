"""Tests for ProductService."""

import asyncio

import pytest
from sqlalchemy import func, select

from catalog_module.catalog.models import AssociationEntity, ItemEntity, SeoUrlKeywordEntity
from catalog_module.application.product_service import ProductService
from catalog_module.catalog.response_groups import ItemResponseGroup
from catalog_module.domain.entities import (
    CatalogProduct,
    CategoryLink,
    EditorialReview,
    Image,
    ProductAssociation,
    PropertyValue,
    PropertyValueType,
    SeoInfo,
)
from catalog_module.domain.exceptions import CatalogPersistenceError

pytestmark = pytest.mark.usefixtures("catalog_tree")

MAIN_CATALOG = "main"
VIRTUAL_CATALOG = "storefront"


def full_product(make_product, code: str = "HP-001") -> CatalogProduct:
    """Product with every collection filled and two variations."""
    return make_product(
        code,
        properties=[
            PropertyValue(property_name="Brand", value="Acme"),
            PropertyValue(property_name="Warranty", value=24, value_type=PropertyValueType.INTEGER),
        ],
        images=[Image(url=f"https://cdn/{code}.jpg", group="main")],
        reviews=[EditorialReview(content="Great sound", language_code="en-US")],
        links=[CategoryLink(catalog_id=VIRTUAL_CATALOG, category_id="deals")],
        seo_infos=[SeoInfo(semantic_url=code.lower(), language_code="en-US")],
        variations=[
            make_product(f"{code}-BLK", name="Black"),
            make_product(f"{code}-WHT", name="White"),
        ],
    )


async def count_rows(session_factory, model) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


class PausingProductService(ProductService):
    """Holds every load after the database read until released."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.loaded = asyncio.Event()
        self.resume = asyncio.Event()

    async def _load_products(self, *args):
        products = await super()._load_products(*args)
        self.loaded.set()
        await self.resume.wait()
        return products


# ============================================================================
# Create
# ============================================================================


class TestCreate:
    """Tests for ProductService.create."""

    @pytest.mark.asyncio
    async def test_ids_are_written_back(self, product_service, make_product) -> None:
        product = full_product(make_product)

        await product_service.create([product])

        assert product.id is not None
        assert all(v.id for v in product.variations)
        assert all(v.main_product_id == product.id for v in product.variations)
        assert all(p.id for p in product.properties)
        assert product.images[0].id is not None
        assert product.seo_infos[0].id is not None

    @pytest.mark.asyncio
    async def test_variations_inherit_catalog(self, product_service, make_product) -> None:
        product = make_product(variations=[make_product("HP-001-BLK", catalog_id=None)])

        await product_service.create([product])

        stored = await product_service.get_by_id(product.variations[0].id, ItemResponseGroup.ITEM_INFO)
        assert stored.catalog_id == MAIN_CATALOG
        assert stored.main_product_id == product.id

    @pytest.mark.asyncio
    async def test_create_one_returns_item_large(self, product_service, make_product) -> None:
        created = await product_service.create_one(full_product(make_product))

        assert created.name == "Product HP-001"
        assert len(created.variations) == 2
        assert len(created.properties) == 2
        assert created.reviews[0].content == "Great sound"
        assert created.links == [CategoryLink(catalog_id=VIRTUAL_CATALOG, category_id="deals")]
        assert created.seo_infos[0].semantic_url == "hp-001"

    @pytest.mark.asyncio
    async def test_unknown_catalog_raises_persistence_error(
        self, product_service, make_product, session_factory
    ) -> None:
        with pytest.raises(CatalogPersistenceError) as exc_info:
            await product_service.create([make_product(catalog_id="missing")])

        assert exc_info.value.details["operation"] == "create_products"
        assert await count_rows(session_factory, ItemEntity) == 0


# ============================================================================
# Read
# ============================================================================


class TestGetByIds:
    """Tests for ProductService.get_by_ids."""

    @pytest.mark.asyncio
    async def test_results_follow_input_order(self, product_service, make_product) -> None:
        first, second = make_product("A"), make_product("B")
        await product_service.create([first, second])

        products = await product_service.get_by_ids(
            [second.id, "missing", first.id], ItemResponseGroup.ITEM_INFO
        )

        assert [p.id for p in products] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_empty_ids(self, product_service) -> None:
        assert await product_service.get_by_ids([]) == []
        assert await product_service.get_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_item_info_loads_no_collections(self, product_service, make_product) -> None:
        product = full_product(make_product)
        await product_service.create([product])

        loaded = await product_service.get_by_id(product.id, ItemResponseGroup.ITEM_INFO)

        assert loaded.name == product.name
        assert loaded.catalog.name == "Main"
        assert loaded.category.name == "Headphones"
        for collection in ("properties", "images", "reviews", "links", "associations",
                           "variations", "outlines", "seo_infos"):
            assert getattr(loaded, collection) is None, collection

    @pytest.mark.asyncio
    async def test_response_group_selects_parts(self, product_service, make_product) -> None:
        product = full_product(make_product)
        await product_service.create([product])

        loaded = await product_service.get_by_id(
            product.id, "ItemInfo,ItemAssets,ItemProperties,Variations"
        )

        assert [i.url for i in loaded.images] == ["https://cdn/HP-001.jpg"]
        assert {p.property_name: p.value for p in loaded.properties} == {"Brand": "Acme", "Warranty": 24}
        assert sorted(v.code for v in loaded.variations) == ["HP-001-BLK", "HP-001-WHT"]
        assert all(v.images == [] for v in loaded.variations)
        assert loaded.reviews is None

    @pytest.mark.asyncio
    async def test_properties_dropped_without_properties_group(
        self, product_service, make_product
    ) -> None:
        product = full_product(make_product)
        await product_service.create([product])

        loaded = await product_service.get_by_id(
            product.id, ItemResponseGroup.ITEM_SMALL | ItemResponseGroup.VARIATIONS
        )

        assert loaded.properties is None
        assert all(v.properties is None for v in loaded.variations)

    @pytest.mark.asyncio
    async def test_referenced_associations(self, product_service, association_service, make_product) -> None:
        owner, target = make_product("A"), make_product("B")
        await product_service.create([owner, target])
        owner.associations = [ProductAssociation(type="Accessories", associated_object_id=target.id)]
        await association_service.save_changes([owner])

        loaded = await product_service.get_by_id(
            target.id, ItemResponseGroup.ITEM_INFO | ItemResponseGroup.REFERENCED_ASSOCIATIONS
        )

        assert [a.item_id for a in loaded.referenced_associations] == [owner.id]


class TestOutlinesAndSeo:
    """Tests for outlines and SEO on loaded products."""

    @pytest.mark.asyncio
    async def test_outline_per_placement(self, product_service, make_product) -> None:
        product = full_product(make_product)
        await product_service.create([product])

        loaded = await product_service.get_by_id(product.id, ItemResponseGroup.ITEM_SMALL)

        assert [str(o) for o in loaded.outlines] == [
            f"{MAIN_CATALOG}/electronics/audio/headphones/{product.id}",
            f"{VIRTUAL_CATALOG}/deals/{product.id}",
        ]
        assert [item.name for item in loaded.outlines[0].items][:2] == ["Main", "Electronics"]

    @pytest.mark.asyncio
    async def test_outlines_filtered_by_catalog(self, product_service, make_product) -> None:
        product = full_product(make_product)
        await product_service.create([product])

        loaded = await product_service.get_by_id(
            product.id, ItemResponseGroup.ITEM_SMALL, catalog_id=VIRTUAL_CATALOG
        )

        assert [o.catalog_id for o in loaded.outlines] == [VIRTUAL_CATALOG]

    @pytest.mark.asyncio
    async def test_seo_loaded_for_product_and_outline_items(
        self, product_service, seo_service, make_product
    ) -> None:
        product = full_product(make_product)
        await product_service.create([product])

        loaded = await product_service.get_by_id(product.id, ItemResponseGroup.ITEM_SMALL)

        assert [s.semantic_url for s in loaded.seo_infos] == ["hp-001"]
        product_step = loaded.outlines[0].items[-1]
        assert [s.semantic_url for s in product_step.seo_infos] == ["hp-001"]
        assert loaded.outlines[0].items[0].seo_infos == []


# ============================================================================
# Cache
# ============================================================================


class TestCaching:
    """Tests for the item cache region."""

    @pytest.mark.asyncio
    async def test_results_are_cached_copies(self, product_service, cache, make_product) -> None:
        product = make_product()
        await product_service.create([product])

        first = await product_service.get_by_id(product.id, ItemResponseGroup.ITEM_INFO)
        first.name = "Changed by caller"
        second = await product_service.get_by_id(product.id, ItemResponseGroup.ITEM_INFO)

        assert second.name == "Product HP-001"
        assert len(cache.items) == 1

    @pytest.mark.asyncio
    async def test_update_expires_cached_lookups(self, product_service, make_product) -> None:
        product = make_product()
        await product_service.create([product])
        await product_service.get_by_id(product.id, ItemResponseGroup.ITEM_INFO)

        product.name = "Renamed"
        await product_service.update([product])

        loaded = await product_service.get_by_id(product.id, ItemResponseGroup.ITEM_INFO)
        assert loaded.name == "Renamed"

    @pytest.mark.asyncio
    async def test_variation_update_expires_parent_lookup(self, product_service, make_product) -> None:
        product = full_product(make_product)
        await product_service.create([product])
        await product_service.get_by_id(product.id, "ItemInfo,Variations")

        variation = product.variations[0]
        variation.name = "Midnight"
        await product_service.update([variation])

        loaded = await product_service.get_by_id(product.id, "ItemInfo,Variations")
        names = {v.id: v.name for v in loaded.variations}
        assert names[variation.id] == "Midnight"

    @pytest.mark.asyncio
    async def test_delete_expires_cached_lookups(self, product_service, make_product) -> None:
        product = make_product()
        await product_service.create([product])
        await product_service.get_by_ids([product.id])

        await product_service.delete([product.id])

        assert await product_service.get_by_ids([product.id]) == []

    @pytest.mark.asyncio
    async def test_failed_seo_update_still_expires_lookups(self, product_service, make_product) -> None:
        product = make_product()
        await product_service.create([product])
        await product_service.get_by_id(product.id, ItemResponseGroup.ITEM_INFO)

        product.name = "Renamed"
        product.seo_infos = [SeoInfo(semantic_url=None)]
        with pytest.raises(CatalogPersistenceError):
            await product_service.update([product])

        # The product row was committed before the SEO step failed
        loaded = await product_service.get_by_id(product.id, ItemResponseGroup.ITEM_INFO)
        assert loaded.name == "Renamed"

    @pytest.mark.asyncio
    async def test_failed_seo_delete_still_expires_lookups(
        self, product_service, make_product, monkeypatch
    ) -> None:
        product = make_product()
        await product_service.create([product])
        await product_service.get_by_ids([product.id])

        async def fail(objects):
            raise CatalogPersistenceError("delete_seo", "database is locked")

        monkeypatch.setattr(product_service.seo_service, "delete_seo_for_objects", fail)
        with pytest.raises(CatalogPersistenceError):
            await product_service.delete([product.id])

        assert await product_service.get_by_ids([product.id]) == []

    @pytest.mark.asyncio
    async def test_read_overlapping_update_is_not_cached(
        self, product_service, session_factory, cache, seo_service, outline_service, make_product
    ) -> None:
        product = make_product()
        await product_service.create([product])
        reader = PausingProductService(session_factory, cache, seo_service, outline_service)

        read = asyncio.create_task(reader.get_by_id(product.id, ItemResponseGroup.ITEM_INFO))
        await reader.loaded.wait()
        product.name = "Renamed"
        await product_service.update([product])
        reader.resume.set()

        assert (await read).name == "Product HP-001"
        loaded = await product_service.get_by_id(product.id, ItemResponseGroup.ITEM_INFO)
        assert loaded.name == "Renamed"

    @pytest.mark.asyncio
    async def test_update_expires_association_targets(self, product_service, make_product) -> None:
        owner, target = make_product("A"), make_product("B")
        await product_service.create([owner, target])
        group = ItemResponseGroup.ITEM_INFO | ItemResponseGroup.REFERENCED_ASSOCIATIONS
        assert (await product_service.get_by_id(target.id, group)).referenced_associations == []

        owner.associations = [ProductAssociation(type="Accessories", associated_object_id=target.id)]
        await product_service.update([owner])
        loaded = await product_service.get_by_id(target.id, group)
        assert [a.item_id for a in loaded.referenced_associations] == [owner.id]

        owner.associations = []
        await product_service.update([owner])
        assert (await product_service.get_by_id(target.id, group)).referenced_associations == []


# ============================================================================
# Update
# ============================================================================


class TestUpdate:
    """Tests for ProductService.update."""

    @pytest.mark.asyncio
    async def test_none_collections_are_not_touched(self, product_service, make_product) -> None:
        product = full_product(make_product)
        await product_service.create([product])

        update = make_product(id=product.id, name="Renamed")
        await product_service.update([update])

        loaded = await product_service.get_by_id(product.id)
        assert loaded.name == "Renamed"
        assert len(loaded.images) == 1
        assert len(loaded.properties) == 2
        assert len(loaded.variations) == 2
        assert loaded.seo_infos[0].semantic_url == "hp-001"
        assert loaded.modified_date is not None

    @pytest.mark.asyncio
    async def test_collections_are_patched(self, product_service, make_product) -> None:
        product = full_product(make_product)
        await product_service.create([product])
        original_image_id = product.images[0].id

        product.images = [
            Image(url="https://cdn/HP-001.jpg", group="main", sort_order=2),
            Image(url="https://cdn/HP-001-side.jpg", group="main", sort_order=3),
        ]
        product.properties = [PropertyValue(property_name="Brand", value="Acme")]
        product.links = []
        await product_service.update([product])

        loaded = await product_service.get_by_id(product.id)
        assert [(i.id == original_image_id, i.sort_order) for i in loaded.images] == [
            (True, 2),
            (False, 3),
        ]
        assert [p.property_name for p in loaded.properties] == ["Brand"]
        assert loaded.links == []

    @pytest.mark.asyncio
    async def test_seo_is_replaced(self, product_service, make_product, session_factory) -> None:
        product = full_product(make_product)
        await product_service.create([product])

        product.seo_infos = [SeoInfo(semantic_url="hp-001-de", language_code="de-DE")]
        await product_service.update([product])

        loaded = await product_service.get_by_id(product.id, ItemResponseGroup.SEO)
        assert [(s.semantic_url, s.language_code) for s in loaded.seo_infos] == [("hp-001-de", "de-DE")]
        assert await count_rows(session_factory, SeoUrlKeywordEntity) == 1

    @pytest.mark.asyncio
    async def test_missing_products_are_skipped(self, product_service, make_product) -> None:
        await product_service.update([make_product(id="missing")])

        assert await product_service.get_by_id("missing") is None


# ============================================================================
# Delete
# ============================================================================


class TestDelete:
    """Tests for ProductService.delete."""

    @pytest.mark.asyncio
    async def test_removes_variations_and_seo(self, product_service, make_product, session_factory) -> None:
        product = full_product(make_product)
        await product_service.create([product])
        variation_ids = [v.id for v in product.variations]

        await product_service.delete([product.id])

        assert await product_service.get_by_ids([product.id, *variation_ids]) == []
        assert await count_rows(session_factory, ItemEntity) == 0
        assert await count_rows(session_factory, SeoUrlKeywordEntity) == 0

    @pytest.mark.asyncio
    async def test_removes_associations_pointing_at_product(
        self, product_service, association_service, make_product, session_factory
    ) -> None:
        owner, target = make_product("A"), make_product("B")
        await product_service.create([owner, target])
        owner.associations = [ProductAssociation(type="Accessories", associated_object_id=target.id)]
        await association_service.save_changes([owner])

        await product_service.delete([target.id])

        assert await association_service.get_associations([owner.id]) == []
        assert await count_rows(session_factory, AssociationEntity) == 0

    @pytest.mark.asyncio
    async def test_unknown_ids_are_ignored(self, product_service, make_product) -> None:
        product = make_product()
        await product_service.create([product])

        await product_service.delete(["missing"])

        assert await product_service.get_by_id(product.id) is not None
