"""
Season API Endpoints

RESTful endpoints for seasonal travel windows.
"""

from typing import Any, Optional
from fastapi import APIRouter, Body, Depends, Header, Query, Request, Response, status

from destinations.api.deps import Pagination, get_base_url, get_season_service
from destinations.schemas.season import (
    SeasonCreate,
    SeasonListResponse,
    SeasonResponse,
)
from destinations.services.season_service import SeasonService
from destinations.utils.etag import (
    compute_fingerprint,
    matches_precondition,
    not_modified_response,
    set_cache_headers,
)
from destinations.utils.hateoas import pagination_links, season_links, total_pages, with_links

router = APIRouter(prefix="/seasons", tags=["seasons"])


@router.get("", response_model=SeasonListResponse, response_model_exclude_none=True)
async def list_seasons(
    request: Request,
    response: Response,
    pagination: Pagination = Depends(),
    city_id: Optional[str] = Query(None, description="Only seasons of this city"),
    if_none_match: Optional[str] = Header(None),
    service: SeasonService = Depends(get_season_service),
):
    """List seasons, optionally for one city."""
    seasons, total = await service.list_seasons(
        page=pagination.page, limit=pagination.limit, city_id=city_id
    )
    meta = {
        "page": pagination.page,
        "limit": pagination.limit,
        "total": total,
        "total_pages": total_pages(total, pagination.limit),
    }

    etag = compute_fingerprint({"data": seasons, "pagination": meta})
    if matches_precondition(if_none_match, etag):
        return not_modified_response(etag)

    base_url = get_base_url(request)
    set_cache_headers(response, etag)
    return {
        "data": [with_links(season, season_links(season, base_url)) for season in seasons],
        "pagination": meta,
        "_links": pagination_links(
            base_url,
            "/seasons",
            pagination.page,
            pagination.limit,
            total,
            filters={"city_id": city_id},
        ),
    }


@router.get("/{season_id}", response_model=SeasonResponse, response_model_exclude_none=True)
async def get_season(
    season_id: str,
    request: Request,
    response: Response,
    if_none_match: Optional[str] = Header(None),
    service: SeasonService = Depends(get_season_service),
):
    """Get season by ID."""
    season = await service.get_season(season_id)

    etag = compute_fingerprint(season)
    if matches_precondition(if_none_match, etag):
        return not_modified_response(etag)

    set_cache_headers(response, etag)
    return with_links(season, season_links(season, get_base_url(request)))


@router.post(
    "",
    response_model=SeasonResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_season(
    payload: SeasonCreate,
    request: Request,
    response: Response,
    service: SeasonService = Depends(get_season_service),
):
    """Create a season for an existing city."""
    season = await service.create_season(payload)

    links = season_links(season, get_base_url(request))
    response.headers["Location"] = links["self"]["href"]
    response.headers["ETag"] = compute_fingerprint(season)
    return with_links(season, links)


@router.put("/{season_id}", response_model=SeasonResponse, response_model_exclude_none=True)
async def update_season(
    season_id: str,
    request: Request,
    response: Response,
    payload: Any = Body(..., description="Fields to change: city_id, season_name, start_month, end_month"),
    if_match: Optional[str] = Header(None),
    service: SeasonService = Depends(get_season_service),
):
    """Update a season; honours If-Match for optimistic concurrency."""
    season = await service.update_season(season_id, payload, if_match=if_match)

    response.headers["ETag"] = compute_fingerprint(season)
    return with_links(season, season_links(season, get_base_url(request)))


@router.delete("/{season_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_season(
    season_id: str,
    service: SeasonService = Depends(get_season_service),
):
    """Delete a season."""
    await service.delete_season(season_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
