"""
City Pydantic Schemas

Request/response models for city endpoints.
"""

from typing import Optional, List, Dict, Any
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict, field_validator

from destinations.schemas.common import Link, PaginationMeta


def _normalize_code(value: str) -> str:
    if not (value.isascii() and value.isalpha()):
        raise ValueError("must contain letters only")
    return value.upper()


class CityBase(BaseModel):
    """Base city schema with common fields."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255, description="City name")
    country_code: str = Field(
        ..., min_length=2, max_length=2, description="ISO 3166-1 alpha-2 country code"
    )
    currency: str = Field(..., min_length=3, max_length=3, description="ISO 4217 currency code")

    @field_validator("country_code", "currency")
    @classmethod
    def uppercase_code(cls, value: str) -> str:
        return _normalize_code(value)


class CityCreate(CityBase):
    """Schema for creating a new city."""

    id: Optional[UUID] = Field(None, description="Client supplied identifier")


class CityUpdate(BaseModel):
    """Schema for a partial city update; only supplied fields are changed."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=255, description="City name")
    country_code: Optional[str] = Field(None, min_length=2, max_length=2, description="Country code")
    currency: Optional[str] = Field(None, min_length=3, max_length=3, description="Currency code")

    @field_validator("name", "country_code", "currency", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("may not be null")
        return value

    @field_validator("country_code", "currency")
    @classmethod
    def uppercase_code(cls, value: str) -> str:
        return _normalize_code(value)


class CityResponse(BaseModel):
    """Schema for city response."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str = Field(..., description="City ID")
    name: str = Field(..., description="City name")
    country_code: str = Field(..., description="Country code")
    currency: str = Field(..., description="Currency code")
    links: Dict[str, Link] = Field(default_factory=dict, alias="_links")


class CityListResponse(BaseModel):
    """Schema for paginated city list response."""

    model_config = ConfigDict(populate_by_name=True)

    data: List[CityResponse] = Field(..., description="Cities on this page")
    pagination: PaginationMeta
    links: Dict[str, Link] = Field(default_factory=dict, alias="_links")


class CityBatchRequest(BaseModel):
    """Schema for a batch import request; items are validated one by one later."""

    cities: List[Any] = Field(..., min_length=1, description="City payloads to import")


class BatchAcceptedResponse(BaseModel):
    """Schema for an accepted batch import."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    job_id: str
    status: str
    links: Dict[str, Link] = Field(default_factory=dict, alias="_links")
