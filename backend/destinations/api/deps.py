"""
API Dependencies

Common dependencies used across API endpoints: container-scoped services,
pagination and request helpers.
"""

from typing import Any, Dict, Optional

from fastapi import Query, Request

from destinations.core.container import AppContainer
from destinations.core.exceptions import ValidationException
from destinations.services.city_service import CityService
from destinations.services.job_tracker import JobTracker
from destinations.services.season_service import SeasonService


class Pagination:
    """Pagination parameters for API endpoints."""

    def __init__(
        self,
        request: Request,
        page: int = Query(1, ge=1, description="Page number"),
        limit: Optional[int] = Query(None, ge=1, description="Page size"),
    ) -> None:
        """
        Initialize pagination parameters.

        Args:
            request: Current request, used for the configured page size bounds
            page: Page number (1-based)
            limit: Number of items per page, at most ``MAX_PAGE_SIZE``

        Raises:
            ValidationException: If ``limit`` exceeds the configured maximum
        """
        settings = get_container(request).settings
        if limit is not None and limit > settings.MAX_PAGE_SIZE:
            raise ValidationException(
                "Invalid request data",
                field_errors=[{
                    "field": "limit",
                    "message": f"Input should be less than or equal to {settings.MAX_PAGE_SIZE}",
                }],
            )

        self.page = page
        self.limit = limit if limit is not None else min(
            settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert pagination to dictionary."""
        return {"page": self.page, "limit": self.limit}


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def get_city_service(request: Request) -> CityService:
    return get_container(request).city_service


def get_season_service(request: Request) -> SeasonService:
    return get_container(request).season_service


def get_job_tracker(request: Request) -> JobTracker:
    return get_container(request).job_tracker


def get_base_url(request: Request) -> str:
    """Scheme and host of the current request, without trailing slash."""
    return str(request.base_url).rstrip("/")
