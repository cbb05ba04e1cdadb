"""
Job Pydantic Schemas

Response model for background job status polling.
"""

from typing import Optional, Dict, Any
from datetime import datetime

from pydantic import BaseModel, Field, ConfigDict

from destinations.schemas.common import Link


class JobResponse(BaseModel):
    """Status envelope of a background job."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Job ID")
    type: str = Field(..., description="Job type")
    status: str = Field(..., description="pending, processing, completed or failed")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last transition timestamp")
    result: Optional[Any] = Field(None, description="Job output, present once completed")
    error: Optional[str] = Field(None, description="Failure reason, present once failed")
    links: Dict[str, Link] = Field(default_factory=dict, alias="_links")
