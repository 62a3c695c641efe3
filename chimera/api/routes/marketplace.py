"""
Marketplace Endpoints - Browse, publish, install and rate agent templates.
"""

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Response

from chimera.core.dependencies import get_marketplace_service
from chimera.models.requests import (
    CreateTemplateRequest,
    InstallTemplateRequest,
    RateTemplateRequest,
    UpdateTemplateRequest,
)
from chimera.models.responses import (
    ErrorResponse,
    InstallationRecord,
    MarketplaceStatsResponse,
    RatingRecord,
    TemplateListResponse,
    TemplateRecord,
)
from chimera.services.marketplace import MarketplaceService


router = APIRouter(prefix="/marketplace", tags=["Marketplace"])

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Template not found"}}


@router.get(
    "/templates",
    response_model=TemplateListResponse,
    summary="List Templates",
    description="Filter by category, tags (any match), author and flags; search name, description and tags"
)
async def list_templates(
    category: Optional[str] = Query(None),
    tags: Optional[List[str]] = Query(None),
    author: Optional[str] = Query(None),
    verified_only: bool = Query(False),
    featured_only: bool = Query(False),
    search: Optional[str] = Query(None),
    sort_by: Literal["rating", "download_count", "created_at", "name"] = Query("rating"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    limit: Optional[int] = Query(None, ge=1, le=200),
    offset: int = Query(0, ge=0),
    service: MarketplaceService = Depends(get_marketplace_service),
) -> TemplateListResponse:
    templates, total = service.list_templates(
        category=category,
        tags=tags,
        author=author,
        verified_only=verified_only,
        featured_only=featured_only,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )
    return TemplateListResponse(
        templates=[TemplateRecord.model_validate(t) for t in templates],
        total=total,
    )


@router.post("/templates", response_model=TemplateRecord, status_code=201, summary="Publish Template")
async def create_template(
    request: CreateTemplateRequest,
    service: MarketplaceService = Depends(get_marketplace_service),
) -> TemplateRecord:
    return TemplateRecord.model_validate(service.create_template(**request.model_dump()))


@router.get("/stats", response_model=MarketplaceStatsResponse, summary="Marketplace Stats")
async def get_stats(
    service: MarketplaceService = Depends(get_marketplace_service),
) -> MarketplaceStatsResponse:
    stats = service.get_stats()
    for key in ("top_rated", "most_downloaded", "recent_templates"):
        stats[key] = [TemplateRecord.model_validate(t) for t in stats[key]]
    return MarketplaceStatsResponse(**stats)


@router.get("/search", response_model=List[TemplateRecord], summary="Search Templates")
async def search_templates(
    q: str = Query(..., min_length=1, description="Matches name, description or an exact tag"),
    limit: int = Query(10, ge=1, le=100),
    service: MarketplaceService = Depends(get_marketplace_service),
) -> List[TemplateRecord]:
    return [TemplateRecord.model_validate(t) for t in service.search_templates(q, limit=limit)]


@router.get("/categories", response_model=List[str], summary="Categories")
async def get_categories(
    service: MarketplaceService = Depends(get_marketplace_service),
) -> List[str]:
    return service.get_categories()


@router.get("/templates/{template_id}", response_model=TemplateRecord, responses=_NOT_FOUND, summary="Get Template")
async def get_template(
    template_id: str,
    service: MarketplaceService = Depends(get_marketplace_service),
) -> TemplateRecord:
    return TemplateRecord.model_validate(service.get_template(template_id))


@router.patch("/templates/{template_id}", response_model=TemplateRecord, responses=_NOT_FOUND, summary="Update Template")
async def update_template(
    template_id: str,
    request: UpdateTemplateRequest,
    service: MarketplaceService = Depends(get_marketplace_service),
) -> TemplateRecord:
    updates = request.model_dump(exclude_unset=True)
    return TemplateRecord.model_validate(service.update_template(template_id, **updates))


@router.delete("/templates/{template_id}", status_code=204, responses=_NOT_FOUND, summary="Delete Template")
async def delete_template(
    template_id: str,
    service: MarketplaceService = Depends(get_marketplace_service),
) -> Response:
    service.delete_template(template_id)
    return Response(status_code=204)


@router.post(
    "/templates/{template_id}/install",
    response_model=InstallationRecord,
    status_code=201,
    responses=_NOT_FOUND,
    summary="Install Template"
)
async def install_template(
    template_id: str,
    request: InstallTemplateRequest,
    service: MarketplaceService = Depends(get_marketplace_service),
) -> InstallationRecord:
    installation = service.install_template(
        template_id,
        user_id=request.user_id,
        agent_id=request.agent_id,
        configuration_overrides=request.configuration_overrides,
    )
    return InstallationRecord.model_validate(installation)


@router.post(
    "/installations/{installation_id}/uninstall",
    response_model=InstallationRecord,
    responses={404: {"model": ErrorResponse, "description": "Installation not found"}},
    summary="Uninstall"
)
async def uninstall(
    installation_id: str,
    service: MarketplaceService = Depends(get_marketplace_service),
) -> InstallationRecord:
    return InstallationRecord.model_validate(service.uninstall(installation_id))


@router.get("/installations", response_model=List[InstallationRecord], summary="User Installations")
async def list_installations(
    user_id: str = Query(..., min_length=1),
    service: MarketplaceService = Depends(get_marketplace_service),
) -> List[InstallationRecord]:
    return [InstallationRecord.model_validate(i) for i in service.list_installations(user_id)]


@router.post(
    "/templates/{template_id}/ratings",
    response_model=RatingRecord,
    status_code=201,
    responses=_NOT_FOUND,
    summary="Rate Template",
    description="Create or replace the user's rating; the template average is recomputed"
)
async def rate_template(
    template_id: str,
    request: RateTemplateRequest,
    service: MarketplaceService = Depends(get_marketplace_service),
) -> RatingRecord:
    rating = service.rate_template(template_id, request.user_id, request.rating, request.review)
    return RatingRecord.model_validate(rating)


@router.get("/templates/{template_id}/ratings", response_model=List[RatingRecord], responses=_NOT_FOUND, summary="Template Ratings")
async def get_ratings(
    template_id: str,
    service: MarketplaceService = Depends(get_marketplace_service),
) -> List[RatingRecord]:
    return [RatingRecord.model_validate(r) for r in service.get_ratings(template_id)]
