"""
Repository Layer

Data access layer using the repository pattern for clean separation
of database operations from business logic.
"""

from .base_repository import BaseRepository
from .city_repository import CityRepository
from .season_repository import SeasonRepository

__all__ = [
    "BaseRepository",
    "CityRepository",
    "SeasonRepository",
]
