"""
Pydantic Schemas Package

Request and response models for the Destinations API.
"""

from destinations.schemas.common import Link, PaginationMeta, format_validation_errors
from destinations.schemas.city import (
    CityCreate,
    CityUpdate,
    CityResponse,
    CityListResponse,
    CityBatchRequest,
    BatchAcceptedResponse,
)
from destinations.schemas.season import (
    SeasonName,
    SeasonCreate,
    SeasonUpdate,
    SeasonResponse,
    SeasonListResponse,
    CitySeasonsResponse,
)
from destinations.schemas.job import JobResponse

__all__ = [
    "Link",
    "PaginationMeta",
    "format_validation_errors",
    "CityCreate",
    "CityUpdate",
    "CityResponse",
    "CityListResponse",
    "CityBatchRequest",
    "BatchAcceptedResponse",
    "SeasonName",
    "SeasonCreate",
    "SeasonUpdate",
    "SeasonResponse",
    "SeasonListResponse",
    "CitySeasonsResponse",
    "JobResponse",
]
