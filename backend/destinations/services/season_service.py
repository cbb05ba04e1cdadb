"""
Season Service Layer

Business logic for seasons, including the check that every season
references an existing city.
"""

from typing import Any, Dict, List, Optional, Tuple

from destinations.core.exceptions import InvalidCityReferenceException, SeasonNotFoundException
from destinations.repositories.city_repository import CityRepository
from destinations.repositories.season_repository import SeasonRepository
from destinations.schemas.season import SeasonCreate, SeasonUpdate
from destinations.services.base_service import BaseService
from destinations.utils.hateoas import page_offset
from destinations.utils.logger import get_logger

logger = get_logger(__name__)


class SeasonService(BaseService):
    """Service layer for season operations."""

    resource_type = "Season"

    def __init__(self, season_repo: SeasonRepository, city_repo: CityRepository):
        self.season_repo = season_repo
        self.city_repo = city_repo

    async def _ensure_city_exists(self, city_id: str) -> None:
        if not await self.city_repo.exists(city_id):
            raise InvalidCityReferenceException(city_id)

    async def list_seasons(
        self,
        page: int,
        limit: int,
        city_id: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        seasons, total = await self.season_repo.list_seasons(
            city_id=city_id,
            skip=page_offset(page, limit),
            limit=limit,
        )
        return [season.to_dict() for season in seasons], total

    async def get_season(self, season_id: str) -> Dict[str, Any]:
        season = await self.season_repo.get_by_id(season_id)
        if season is None:
            raise SeasonNotFoundException(season_id)
        return season.to_dict()

    async def create_season(self, payload: SeasonCreate) -> Dict[str, Any]:
        """
        Insert a season after checking its city exists.

        Raises:
            InvalidCityReferenceException: If ``city_id`` matches no city
            DuplicateSeasonException: If the city already has this label
        """
        data = payload.model_dump(mode="json", exclude_none=True)
        await self._ensure_city_exists(data["city_id"])

        season = await self.season_repo.create(data)
        logger.info(
            "Season created",
            season_id=season.id,
            city_id=season.city_id,
            season_name=season.season_name,
        )
        return season.to_dict()

    async def update_season(
        self,
        season_id: str,
        payload: Any,
        if_match: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Partially update a season from a raw body, guarded by an optional If-Match token."""

        async def check_city(changes: Dict[str, Any]) -> None:
            if "city_id" in changes:
                await self._ensure_city_exists(changes["city_id"])

        return await self._conditional_update(
            self.season_repo,
            season_id,
            payload,
            SeasonUpdate,
            if_match,
            SeasonNotFoundException,
            check_changes=check_city,
        )

    async def delete_season(self, season_id: str) -> None:
        if not await self.season_repo.delete(season_id):
            raise SeasonNotFoundException(season_id)
        logger.info("Season deleted", season_id=season_id)
