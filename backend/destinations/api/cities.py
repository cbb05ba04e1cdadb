"""
City API Endpoints

RESTful endpoints for cities, including conditional requests and the
asynchronous batch import.
"""

from typing import Any, Optional
from fastapi import APIRouter, Body, Depends, Header, Query, Request, Response, status

from destinations.api.deps import Pagination, get_base_url, get_city_service
from destinations.schemas.city import (
    BatchAcceptedResponse,
    CityBatchRequest,
    CityCreate,
    CityListResponse,
    CityResponse,
)
from destinations.schemas.season import CitySeasonsResponse
from destinations.services.city_service import CityService
from destinations.utils.etag import (
    compute_fingerprint,
    matches_precondition,
    not_modified_response,
    set_cache_headers,
)
from destinations.utils.hateoas import (
    city_links,
    job_links,
    pagination_links,
    season_links,
    total_pages,
    with_links,
)
from destinations.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/cities", tags=["cities"])


@router.get("", response_model=CityListResponse, response_model_exclude_none=True)
async def list_cities(
    request: Request,
    response: Response,
    pagination: Pagination = Depends(),
    country_code: Optional[str] = Query(None, min_length=2, max_length=2),
    currency: Optional[str] = Query(None, min_length=3, max_length=3),
    search: Optional[str] = Query(None, min_length=1, max_length=255),
    if_none_match: Optional[str] = Header(None),
    service: CityService = Depends(get_city_service),
):
    """List cities with filtering and pagination."""
    cities, total = await service.list_cities(
        page=pagination.page,
        limit=pagination.limit,
        country_code=country_code,
        currency=currency,
        search=search,
    )
    meta = {
        "page": pagination.page,
        "limit": pagination.limit,
        "total": total,
        "total_pages": total_pages(total, pagination.limit),
    }

    etag = compute_fingerprint({"data": cities, "pagination": meta})
    if matches_precondition(if_none_match, etag):
        return not_modified_response(etag)

    base_url = get_base_url(request)
    set_cache_headers(response, etag)
    return {
        "data": [with_links(city, city_links(city, base_url)) for city in cities],
        "pagination": meta,
        "_links": pagination_links(
            base_url,
            "/cities",
            pagination.page,
            pagination.limit,
            total,
            filters={"country_code": country_code, "currency": currency, "search": search},
        ),
    }


@router.post(
    "/batch",
    response_model=BatchAcceptedResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_202_ACCEPTED,
)
async def batch_import_cities(
    request: Request,
    response: Response,
    batch: CityBatchRequest,
    service: CityService = Depends(get_city_service),
):
    """Queue a batch import and return a job handle to poll."""
    job = service.start_batch_import(batch.cities)

    links = job_links(job.id, get_base_url(request))
    response.headers["Location"] = links["self"]["href"]
    logger.info("Batch import accepted", job_id=job.id, items=len(batch.cities))
    return {
        "message": "Batch import accepted and is being processed",
        "job_id": job.id,
        "status": job.status.value,
        "_links": {"job_status": links["self"]},
    }


@router.get("/{city_id}", response_model=CityResponse, response_model_exclude_none=True)
async def get_city(
    city_id: str,
    request: Request,
    response: Response,
    if_none_match: Optional[str] = Header(None),
    service: CityService = Depends(get_city_service),
):
    """Get city by ID."""
    city = await service.get_city(city_id)

    etag = compute_fingerprint(city)
    if matches_precondition(if_none_match, etag):
        return not_modified_response(etag)

    set_cache_headers(response, etag)
    return with_links(city, city_links(city, get_base_url(request)))


@router.post(
    "",
    response_model=CityResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_city(
    payload: CityCreate,
    request: Request,
    response: Response,
    service: CityService = Depends(get_city_service),
):
    """Create a new city."""
    city = await service.create_city(payload)

    links = city_links(city, get_base_url(request))
    response.headers["Location"] = links["self"]["href"]
    response.headers["ETag"] = compute_fingerprint(city)
    return with_links(city, links)


@router.put("/{city_id}", response_model=CityResponse, response_model_exclude_none=True)
async def update_city(
    city_id: str,
    request: Request,
    response: Response,
    payload: Any = Body(..., description="Fields to change: name, country_code, currency"),
    if_match: Optional[str] = Header(None),
    service: CityService = Depends(get_city_service),
):
    """
    Update a city; honours If-Match for optimistic concurrency.

    The body is validated after the existence and If-Match checks, so a
    missing city is 404 and a stale token 412 whatever the body holds.
    """
    city = await service.update_city(city_id, payload, if_match=if_match)

    response.headers["ETag"] = compute_fingerprint(city)
    return with_links(city, city_links(city, get_base_url(request)))


@router.delete("/{city_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_city(
    city_id: str,
    service: CityService = Depends(get_city_service),
):
    """Delete a city and its seasons."""
    await service.delete_city(city_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{city_id}/seasons",
    response_model=CitySeasonsResponse,
    response_model_exclude_none=True,
)
async def list_city_seasons(
    city_id: str,
    request: Request,
    service: CityService = Depends(get_city_service),
):
    """List the seasons of one city."""
    seasons = await service.get_city_seasons(city_id)

    base_url = get_base_url(request)
    return {
        "data": [with_links(season, season_links(season, base_url)) for season in seasons],
        "_links": {
            "self": {"href": f"{base_url}/cities/{city_id}/seasons"},
            "city": {"href": f"{base_url}/cities/{city_id}"},
        },
    }
