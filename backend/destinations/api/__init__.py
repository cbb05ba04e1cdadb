"""
API Package

Contains all HTTP endpoints of the Destinations service.
"""

from .cities import router as cities_router
from .seasons import router as seasons_router
from .jobs import router as jobs_router
from .health import router as health_router
from .metrics import router as metrics_router

__all__ = [
    "cities_router",
    "seasons_router",
    "jobs_router",
    "health_router",
    "metrics_router",
]
