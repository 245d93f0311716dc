"""Association API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from catalog_module.api.converters import association_from_schema
from catalog_module.api.schemas import (
    AssociationSchema,
    AssociationSearchRequest,
    AssociationSearchResponse,
    ErrorResponse,
)
from catalog_module.application.association_service import (
    AssociationService,
    get_association_service,
)
from catalog_module.application.search_service import (
    AssociationSearchService,
    get_association_search_service,
)
from catalog_module.catalog.search import AssociationSearchCriteria

router = APIRouter(prefix="/associations", tags=["Associations"])


@router.put(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Upsert associations",
)
async def update_associations(
    request: list[AssociationSchema],
    service: Annotated[AssociationService, Depends(get_association_service)],
) -> Response:
    """Insert or update associations.

    Raises:
        HTTPException: If an association has no owner product.
    """
    missing_owner = [i for i, a in enumerate(request) if not a.item_id]
    if missing_owner:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error_code": "VALIDATION_ERROR",
                "message": "Association item_id is required",
                "details": [{"field": f"[{i}].item_id", "message": "required"} for i in missing_owner],
            },
        )

    await service.update_associations([association_from_schema(a) for a in request])
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={401: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Delete associations",
)
async def delete_associations(
    ids: Annotated[list[str], Query()],
    service: Annotated[AssociationService, Depends(get_association_service)],
) -> Response:
    """Delete associations by id. Unknown ids are ignored."""
    await service.delete_associations(ids)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/search",
    response_model=AssociationSearchResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Search associations",
)
async def search_associations(
    request: AssociationSearchRequest,
    service: Annotated[AssociationSearchService, Depends(get_association_search_service)],
) -> AssociationSearchResponse:
    """Search associations by owner, target, group and tag keyword."""
    criteria = AssociationSearchCriteria(
        object_ids=request.object_ids,
        associated_object_ids=request.associated_object_ids,
        group=request.group,
        keyword=request.keyword,
        sort_by=request.sort_by,
        sort_order=request.sort_order,
        skip=request.skip,
        take=request.take,
    )
    result = await service.search(criteria)
    return AssociationSearchResponse(
        total_count=result.total_count,
        results=[AssociationSchema.model_validate(a) for a in result.results],
    )
