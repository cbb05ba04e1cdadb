"""
Metrics API Router

Provides Prometheus-compatible metrics endpoint.
"""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST

from destinations.utils.metrics import metrics

router = APIRouter(tags=["metrics"])


@router.get("/metrics")
async def get_metrics():
    """
    Prometheus metrics endpoint.

    Returns application metrics in Prometheus format for scraping by monitoring systems.
    """
    return Response(content=metrics.get_metrics(), media_type=CONTENT_TYPE_LATEST)
