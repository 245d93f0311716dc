"""Product API endpoints.

Provides endpoints for reading, creating, updating, deleting and
searching catalog products, and for managing the associations owned by
a product.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from catalog_module.api.converters import association_from_schema, product_from_schema
from catalog_module.api.schemas import (
    AssociationSchema,
    CreatedProductsResponse,
    ErrorResponse,
    ProductSchema,
    ProductSearchRequest,
    ProductSearchResponse,
)
from catalog_module.application.association_service import (
    AssociationService,
    get_association_service,
)
from catalog_module.application.product_service import ProductService, get_product_service
from catalog_module.application.search_service import (
    ProductSearchService,
    get_product_search_service,
)
from catalog_module.catalog.response_groups import ItemResponseGroup
from catalog_module.catalog.search import ProductExportDataQuery
from catalog_module.domain.entities import CatalogProduct
from catalog_module.domain.exceptions import ProductNotFoundError
from catalog_module.infrastructure.config import settings

router = APIRouter(prefix="/products", tags=["Products"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


# ============================================================================
# Dependencies
# ============================================================================


def resolve_response_group(
    resp_group: Annotated[str | None, Query(alias="respGroup")] = None,
) -> ItemResponseGroup:
    """Parse the respGroup query parameter, falling back to the configured default."""
    return ItemResponseGroup.parse(resp_group or settings.default_response_group)


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "/{product_id}",
    response_model=ProductSchema,
    response_model_exclude_none=True,
    responses={**ERROR_RESPONSES, 404: {"model": ErrorResponse}},
    summary="Get product",
)
async def get_product(
    product_id: str,
    response_group: Annotated[ItemResponseGroup, Depends(resolve_response_group)],
    service: Annotated[ProductService, Depends(get_product_service)],
    catalog_id: Annotated[str | None, Query(alias="catalogId")] = None,
) -> ProductSchema:
    """Get a product by ID.

    Args:
        product_id: Product identifier.
        response_group: Parts of the product to load.
        service: Product service.
        catalog_id: Restrict outlines to this catalog.

    Raises:
        ProductNotFoundError: If the product does not exist.
    """
    product = await service.get_by_id(product_id, response_group, catalog_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return ProductSchema.model_validate(product)


@router.get(
    "",
    response_model=list[ProductSchema],
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    summary="Get products by ids",
)
async def get_products(
    ids: Annotated[list[str], Query()],
    response_group: Annotated[ItemResponseGroup, Depends(resolve_response_group)],
    service: Annotated[ProductService, Depends(get_product_service)],
    catalog_id: Annotated[str | None, Query(alias="catalogId")] = None,
) -> list[ProductSchema]:
    """Get products by ID. Unknown ids are skipped."""
    products = await service.get_by_ids(ids, response_group, catalog_id)
    return [ProductSchema.model_validate(p) for p in products]


@router.post(
    "",
    response_model=ProductSchema,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Create product",
)
async def create_product(
    request: ProductSchema,
    service: Annotated[ProductService, Depends(get_product_service)],
) -> ProductSchema:
    """Create a product with its variations.

    Returns:
        The stored product loaded as ItemLarge.
    """
    product = await service.create_one(product_from_schema(request))
    return ProductSchema.model_validate(product)


@router.post(
    "/batch",
    response_model=CreatedProductsResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Create products",
)
async def create_products(
    request: list[ProductSchema],
    service: Annotated[ProductService, Depends(get_product_service)],
) -> CreatedProductsResponse:
    """Create several products in one unit of work."""
    products = [product_from_schema(item) for item in request]
    await service.create(products)
    return CreatedProductsResponse(ids=[p.id for p in products])


@router.put(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=ERROR_RESPONSES,
    summary="Update products",
)
async def update_products(
    request: list[ProductSchema],
    service: Annotated[ProductService, Depends(get_product_service)],
) -> Response:
    """Update products.

    Collections that are left out of a product are not changed.
    """
    await service.update([product_from_schema(item) for item in request])
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=ERROR_RESPONSES,
    summary="Delete products",
)
async def delete_products(
    ids: Annotated[list[str], Query()],
    service: Annotated[ProductService, Depends(get_product_service)],
) -> Response:
    """Delete products with their variations."""
    await service.delete(ids)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/search",
    response_model=ProductSearchResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    summary="Search products",
)
async def search_products(
    request: ProductSearchRequest,
    service: Annotated[ProductSearchService, Depends(get_product_search_service)],
) -> ProductSearchResponse:
    """Search products by catalog, category, ids and keyword."""
    query = ProductExportDataQuery(
        catalog_ids=request.catalog_ids,
        category_ids=request.category_ids,
        object_ids=request.object_ids,
        keyword=request.keyword,
        search_in_variations=request.search_in_variations,
        response_group=request.response_group or settings.default_response_group,
        skip=request.skip,
        take=request.take,
        sort_by=request.sort_by,
        sort_order=request.sort_order,
    )
    result = await service.search(query)
    return ProductSearchResponse(
        total_count=result.total_count,
        results=[ProductSchema.model_validate(p) for p in result.results],
    )


@router.get(
    "/{product_id}/associations",
    response_model=list[AssociationSchema],
    responses=ERROR_RESPONSES,
    summary="Get product associations",
)
async def get_product_associations(
    product_id: str,
    service: Annotated[AssociationService, Depends(get_association_service)],
) -> list[AssociationSchema]:
    """List the associations owned by a product."""
    associations = await service.get_associations([product_id])
    return [AssociationSchema.model_validate(a) for a in associations]


@router.put(
    "/{product_id}/associations",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=ERROR_RESPONSES,
    summary="Replace product associations",
)
async def save_product_associations(
    product_id: str,
    request: list[AssociationSchema],
    service: Annotated[AssociationService, Depends(get_association_service)],
) -> Response:
    """Replace the associations owned by a product.

    Associations missing from the request are deleted.
    """
    owner = CatalogProduct(
        id=product_id,
        associations=[association_from_schema(a, item_id=product_id) for a in request],
    )
    await service.save_changes([owner])
    return Response(status_code=status.HTTP_204_NO_CONTENT)
