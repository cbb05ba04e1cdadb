"""
Season Repository Implementation

Repository for season database operations.
"""

from typing import List, Optional, Dict, Any, Type, Tuple
from sqlalchemy.exc import IntegrityError

from destinations.core.exceptions import (
    BaseApplicationException,
    DuplicateSeasonException,
    InvalidCityReferenceException,
)
from destinations.repositories.base_repository import (
    BaseRepository,
    is_foreign_key_violation,
    is_primary_key_violation,
    is_unique_violation,
)
from destinations.models.season import Season, SEASON_NAMES


class SeasonRepository(BaseRepository[Season]):
    """Repository for season database operations."""

    @property
    def model(self) -> Type[Season]:
        return Season

    def translate_integrity_error(
        self, exc: IntegrityError, data: Dict[str, Any]
    ) -> BaseApplicationException:
        if is_foreign_key_violation(exc):
            return InvalidCityReferenceException(str(data.get("city_id")))
        if is_primary_key_violation(exc, self.model.__tablename__):
            return super().translate_integrity_error(exc, data)
        if is_unique_violation(exc):
            return DuplicateSeasonException(
                city_id=data.get("city_id"),
                season_name=data.get("season_name"),
            )
        return super().translate_integrity_error(exc, data)

    async def list_seasons(
        self,
        city_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[List[Season], int]:
        """
        Page of seasons ordered by city and start month.

        Returns:
            Tuple[List[Season], int]: Seasons on the page and total match count
        """
        filters = {"city_id": city_id}
        seasons = await self.get_multi(
            skip=skip,
            limit=limit,
            filters=filters,
            order_by=(self.model.city_id, self.model.start_month),
        )
        total = await self.count(filters)
        return seasons, total

    async def get_by_city(self, city_id: str) -> List[Season]:
        """All seasons of one city ordered by start month."""
        return await self.get_multi(
            limit=len(SEASON_NAMES),
            filters={"city_id": city_id},
            order_by=(self.model.start_month,),
        )
