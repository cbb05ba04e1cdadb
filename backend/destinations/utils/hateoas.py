"""
Hypermedia Link Helpers

Builds the ``_links`` sections of resource and collection responses and
computes page windows.
"""

import math
from typing import Dict, Any, Optional
from urllib.parse import urlencode


def page_offset(page: int, limit: int) -> int:
    """Row offset of the first item on a 1-based page."""
    return (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


def city_links(city: Dict[str, Any], base_url: str) -> Dict[str, Dict[str, str]]:
    href = f"{base_url}/cities/{city['id']}"
    return {
        "self": {"href": href},
        "seasons": {"href": f"{href}/seasons"},
        "update": {"href": href, "method": "PUT"},
        "delete": {"href": href, "method": "DELETE"},
    }


def season_links(season: Dict[str, Any], base_url: str) -> Dict[str, Dict[str, str]]:
    href = f"{base_url}/seasons/{season['id']}"
    return {
        "self": {"href": href},
        "city": {"href": f"{base_url}/cities/{season['city_id']}"},
        "update": {"href": href, "method": "PUT"},
        "delete": {"href": href, "method": "DELETE"},
    }


def job_links(job_id: str, base_url: str) -> Dict[str, Dict[str, str]]:
    return {"self": {"href": f"{base_url}/jobs/{job_id}"}}


def with_links(representation: Dict[str, Any], links: Dict[str, Any]) -> Dict[str, Any]:
    return {**representation, "_links": links}


def pagination_links(
    base_url: str,
    path: str,
    page: int,
    limit: int,
    total: int,
    filters: Optional[Dict[str, Any]] = None,
) -> Dict[str, Dict[str, str]]:
    """
    Navigation links for a paginated collection.

    ``first``/``prev`` appear after the first page and ``next``/``last``
    before the last one. Active filters are carried into every link.

    Args:
        base_url: Scheme and host, without trailing slash
        path: Collection path, e.g. ``/cities``
        page: Current page (1-based)
        limit: Page size
        total: Total matching items
        filters: Query parameters to preserve; ``None`` values are skipped
    """
    active_filters = {k: v for k, v in (filters or {}).items() if v not in (None, "")}
    last_page = total_pages(total, limit)

    def href(target_page: int) -> str:
        query = urlencode({**active_filters, "page": target_page, "limit": limit})
        return f"{base_url}{path}?{query}"

    links = {"self": {"href": href(page)}}

    if page > 1:
        links["first"] = {"href": href(1)}
        links["prev"] = {"href": href(page - 1)}

    if page < last_page:
        links["next"] = {"href": href(page + 1)}
        links["last"] = {"href": href(last_page)}

    return links
