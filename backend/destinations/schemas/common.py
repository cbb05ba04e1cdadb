"""
Shared Pydantic Schemas

Hypermedia links, pagination metadata and validation error formatting
used by every resource.
"""

from typing import Optional, List, Dict, Any, Sequence

from pydantic import BaseModel, Field


class Link(BaseModel):
    """Hypermedia link to a related resource or action."""

    href: str = Field(..., description="Absolute URL")
    method: Optional[str] = Field(None, description="HTTP method when not GET")


class PaginationMeta(BaseModel):
    """Page window of a collection response."""

    page: int = Field(..., ge=1, description="Current page number")
    limit: int = Field(..., ge=1, description="Page size")
    total: int = Field(..., ge=0, description="Total number of matching items")
    total_pages: int = Field(..., ge=0, description="Total number of pages")


def format_validation_errors(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    Flatten Pydantic error dicts into ``{field, message}`` pairs.

    The request body prefix is dropped so fields read the same whether they
    came from an HTTP payload or a batch item.
    """
    formatted = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        formatted.append({
            "field": ".".join(location) or "__root__",
            "message": error.get("msg", "Invalid value"),
        })
    return formatted
