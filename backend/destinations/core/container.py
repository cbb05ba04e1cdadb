"""
Application Container

Owns the long-lived collaborators of one application instance: settings,
database manager, job tracker, repositories and services.
"""

from typing import Optional

from destinations.core.config import Settings, get_settings
from destinations.core.database import DatabaseManager
from destinations.repositories.city_repository import CityRepository
from destinations.repositories.season_repository import SeasonRepository
from destinations.services.city_service import CityService
from destinations.services.job_tracker import JobTracker
from destinations.services.season_service import SeasonService
from destinations.utils.logger import get_logger

logger = get_logger(__name__)


class AppContainer:
    """Dependency container built at startup and torn down at shutdown."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.db_manager = DatabaseManager(settings)
        self.job_tracker = JobTracker(
            worker_count=settings.JOB_WORKER_COUNT,
            job_timeout=settings.JOB_TIMEOUT_SECONDS,
            retention_seconds=settings.JOB_RETENTION_SECONDS,
            shutdown_grace=settings.JOB_SHUTDOWN_GRACE_SECONDS,
        )

        self.city_repo = CityRepository(self.db_manager)
        self.season_repo = SeasonRepository(self.db_manager)

        self.city_service = CityService(
            self.city_repo, self.season_repo, self.job_tracker, settings
        )
        self.season_service = SeasonService(self.season_repo, self.city_repo)

        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Connect to the database, create tables and start job workers."""
        if self._initialized:
            return

        logger.info("Initializing application container...")

        await self.db_manager.init_database()
        await self.db_manager.create_tables()
        self.job_tracker.start()

        self._initialized = True
        logger.info("Container initialized successfully")

    async def shutdown(self) -> None:
        """Stop job workers and release database connections."""
        logger.info("Shutting down container...")

        await self.job_tracker.stop()
        await self.db_manager.close_connections()

        self._initialized = False
        logger.info("Container shutdown complete")


def build_container(settings: Optional[Settings] = None) -> AppContainer:
    """Create a container for the given (or cached) settings."""
    return AppContainer(settings or get_settings())
