"""
Database Models Package

Contains SQLAlchemy ORM models for the Destinations service.
"""

from destinations.core.database import Base
from destinations.models.city import City
from destinations.models.season import Season, SEASON_NAMES

__all__ = [
    "Base",
    "City",
    "Season",
    "SEASON_NAMES",
]
