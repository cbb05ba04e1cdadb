"""
Season Pydantic Schemas

Request/response models for season endpoints.
"""

from typing import Optional, List, Dict, Any
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict, field_validator

from destinations.schemas.common import Link, PaginationMeta


class SeasonName(str, Enum):
    """Season labels a city can define."""
    PEAK = "peak"
    SHOULDER = "shoulder"
    OFF = "off"


def _lowercase_label(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


class SeasonCreate(BaseModel):
    """Schema for creating a new season."""

    id: Optional[UUID] = Field(None, description="Client supplied identifier")
    city_id: UUID = Field(..., description="City the season belongs to")
    season_name: SeasonName = Field(..., description="Season label")
    start_month: int = Field(..., ge=1, le=12, description="First month (1-12)")
    end_month: int = Field(..., ge=1, le=12, description="Last month (1-12), may wrap")

    @field_validator("season_name", mode="before")
    @classmethod
    def normalize_label(cls, value: Any) -> Any:
        return _lowercase_label(value)


class SeasonUpdate(BaseModel):
    """Schema for a partial season update; only supplied fields are changed."""

    city_id: Optional[UUID] = Field(None, description="City the season belongs to")
    season_name: Optional[SeasonName] = Field(None, description="Season label")
    start_month: Optional[int] = Field(None, ge=1, le=12, description="First month (1-12)")
    end_month: Optional[int] = Field(None, ge=1, le=12, description="Last month (1-12)")

    @field_validator("city_id", "season_name", "start_month", "end_month", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("may not be null")
        return _lowercase_label(value)


class SeasonResponse(BaseModel):
    """Schema for season response."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str = Field(..., description="Season ID")
    city_id: str = Field(..., description="City ID")
    season_name: str = Field(..., description="Season label")
    start_month: int = Field(..., description="First month")
    end_month: int = Field(..., description="Last month")
    links: Dict[str, Link] = Field(default_factory=dict, alias="_links")


class SeasonListResponse(BaseModel):
    """Schema for paginated season list response."""

    model_config = ConfigDict(populate_by_name=True)

    data: List[SeasonResponse] = Field(..., description="Seasons on this page")
    pagination: PaginationMeta
    links: Dict[str, Link] = Field(default_factory=dict, alias="_links")


class CitySeasonsResponse(BaseModel):
    """Schema for the seasons of a single city."""

    model_config = ConfigDict(populate_by_name=True)

    data: List[SeasonResponse]
    links: Dict[str, Link] = Field(default_factory=dict, alias="_links")
