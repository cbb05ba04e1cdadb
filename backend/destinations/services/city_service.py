"""
City Service Layer

Business logic for cities: validated CRUD, conditional updates and the
asynchronous batch import.
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from destinations.core.config import Settings
from destinations.core.exceptions import (
    BaseApplicationException,
    CityNotFoundException,
    ValidationException,
)
from destinations.repositories.city_repository import CityRepository
from destinations.repositories.season_repository import SeasonRepository
from destinations.schemas.city import CityCreate, CityUpdate
from destinations.schemas.common import format_validation_errors
from destinations.services.base_service import BaseService
from destinations.services.job_tracker import Job, JobTracker
from destinations.utils.hateoas import page_offset
from destinations.utils.logger import get_logger
from destinations.utils.metrics import metrics

logger = get_logger(__name__)

BATCH_IMPORT_JOB = "batch_import_cities"


class CityService(BaseService):
    """Service layer for city operations."""

    resource_type = "City"

    def __init__(
        self,
        city_repo: CityRepository,
        season_repo: SeasonRepository,
        job_tracker: JobTracker,
        settings: Settings,
    ):
        self.city_repo = city_repo
        self.season_repo = season_repo
        self.job_tracker = job_tracker
        self.settings = settings

    async def list_cities(
        self,
        page: int,
        limit: int,
        country_code: Optional[str] = None,
        currency: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Filtered page of cities.

        Returns:
            Tuple[List[Dict[str, Any]], int]: City representations and the
            total number of matches
        """
        cities, total = await self.city_repo.search_cities(
            country_code=country_code,
            currency=currency,
            search=search,
            skip=page_offset(page, limit),
            limit=limit,
        )
        return [city.to_dict() for city in cities], total

    async def get_city(self, city_id: str) -> Dict[str, Any]:
        city = await self.city_repo.get_by_id(city_id)
        if city is None:
            raise CityNotFoundException(city_id)
        return city.to_dict()

    async def create_city(self, payload: CityCreate) -> Dict[str, Any]:
        """Insert a validated city; duplicates surface as DuplicateCityException."""
        data = payload.model_dump(mode="json", exclude_none=True)
        city = await self.city_repo.create(data)
        logger.info("City created", city_id=city.id, name=city.name, country_code=city.country_code)
        return city.to_dict()

    async def update_city(
        self,
        city_id: str,
        payload: Any,
        if_match: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Partially update a city, guarded by an optional If-Match token.

        ``payload`` is the raw body; it is validated against ``CityUpdate``
        only after the existence and If-Match checks.
        """
        return await self._conditional_update(
            self.city_repo, city_id, payload, CityUpdate, if_match, CityNotFoundException
        )

    async def delete_city(self, city_id: str) -> None:
        """Delete a city; its seasons go with it."""
        if not await self.city_repo.delete(city_id):
            raise CityNotFoundException(city_id)
        logger.info("City deleted", city_id=city_id)

    async def get_city_seasons(self, city_id: str) -> List[Dict[str, Any]]:
        if not await self.city_repo.exists(city_id):
            raise CityNotFoundException(city_id)
        seasons = await self.season_repo.get_by_city(city_id)
        return [season.to_dict() for season in seasons]

    def start_batch_import(self, items: List[Any]) -> Job:
        """
        Register a batch import job and queue it for background processing.

        Args:
            items: Raw city payloads; each is validated when its turn comes

        Returns:
            Job: Snapshot of the new, still pending job

        Raises:
            ValidationException: If the batch exceeds the configured size
        """
        if len(items) > self.settings.BATCH_MAX_ITEMS:
            raise ValidationException(
                f"A batch may contain at most {self.settings.BATCH_MAX_ITEMS} cities",
                field_errors=[{
                    "field": "cities",
                    "message": f"Expected at most {self.settings.BATCH_MAX_ITEMS} items, got {len(items)}",
                }],
            )

        job = self.job_tracker.create_job(BATCH_IMPORT_JOB, {"cities": items})
        self.job_tracker.process_job(job.id, lambda: self.import_cities(items))
        return job

    async def import_cities(self, items: List[Any]) -> List[Dict[str, Any]]:
        """
        Import cities one after another.

        A bad item never stops the batch: every item yields an outcome,
        either ``created`` with the new id or ``failed`` with the reason.
        """
        outcomes = []
        for index, item in enumerate(items):
            outcome = await self._import_one(index, item)
            metrics.record_batch_item(outcome["status"])
            outcomes.append(outcome)

        created = sum(1 for outcome in outcomes if outcome["status"] == "created")
        logger.info(
            "Batch import finished",
            total=len(outcomes),
            created=created,
            failed=len(outcomes) - created,
        )
        return outcomes

    async def _import_one(self, index: int, item: Any) -> Dict[str, Any]:
        try:
            payload = CityCreate.model_validate(item)
        except ValidationError as e:
            return {
                "index": index,
                "status": "failed",
                "error": "Invalid city data",
                "errors": format_validation_errors(e.errors()),
            }

        try:
            city = await self.create_city(payload)
        except BaseApplicationException as e:
            outcome = {"index": index, "status": "failed", "error": e.user_message}
            if payload.id is not None:
                outcome["id"] = str(payload.id)
            return outcome

        return {"index": index, "status": "created", "id": city["id"]}
