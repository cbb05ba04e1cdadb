"""
Monitoring Middleware for the Destinations service

Times every request, records it in the Prometheus metrics and tags the
response with a request id.
"""

import time
import uuid
from typing import List, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from destinations.utils.logger import get_logger
from destinations.utils.metrics import metrics

logger = get_logger(__name__)


def _route_label(request: Request) -> str:
    # Path templates keep label cardinality bounded
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class MonitoringMiddleware(BaseHTTPMiddleware):
    """Middleware for monitoring requests and collecting metrics."""

    def __init__(self, app, exclude_paths: Optional[List[str]] = None):
        super().__init__(app)
        self.exclude_paths = set(exclude_paths or ['/metrics'])

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint
    ) -> Response:
        """Monitor request and collect metrics."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        if request.url.path in self.exclude_paths:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response

        start_time = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as e:
            logger.error(
                "Request failed",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                error=str(e),
            )
            raise
        finally:
            duration = time.perf_counter() - start_time
            metrics.record_request(request.method, _route_label(request), status_code, duration)

        log = logger.warning if status_code >= 500 else logger.info
        log(
            "Request handled",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=round(duration * 1000, 2),
        )

        response.headers["X-Request-ID"] = request_id
        return response
