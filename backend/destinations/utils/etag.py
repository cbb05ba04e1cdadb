"""
Conditional Request Helpers

Content fingerprints used as ETags, and the comparisons behind
If-None-Match (cache validation) and If-Match (optimistic concurrency).
"""

import hashlib
import json
from typing import Any, Optional

from fastapi import Response, status

CACHE_CONTROL = "public, max-age=60"


def compute_fingerprint(representation: Any) -> str:
    """
    Derive an opaque, quoted fingerprint from a resource representation.

    The representation is serialized to canonical JSON (sorted keys, compact
    separators) so identical content always yields the same token.
    """
    canonical = json.dumps(
        representation,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    digest = hashlib.md5(canonical.encode("utf-8")).hexdigest()
    return f'"{digest}"'


def matches_precondition(supplied: Optional[str], current: str) -> bool:
    """Exact comparison of a client supplied token with the current one."""
    if supplied is None:
        return False
    return supplied == current


def not_modified_response(etag: str) -> Response:
    """Bodiless 304 carrying the current validator."""
    return Response(
        status_code=status.HTTP_304_NOT_MODIFIED,
        headers={"ETag": etag, "Cache-Control": CACHE_CONTROL},
    )


def set_cache_headers(response: Response, etag: str) -> None:
    response.headers["ETag"] = etag
    response.headers["Cache-Control"] = CACHE_CONTROL
