"""
Test Configuration for the Destinations service

Every test gets its own SQLite database file and, for API tests, a
TestClient whose context runs the application lifespan.
"""

import time
from typing import Any, Dict

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from destinations.core.config import Settings
from destinations.core.database import DatabaseManager
from destinations.main import create_app


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway database."""
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        ENVIRONMENT="test",
        JOB_SHUTDOWN_GRACE_SECONDS=1.0,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """Test client for API endpoints."""
    with TestClient(app) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def db_manager(settings):
    """Initialized database manager with all tables created."""
    manager = DatabaseManager(settings)
    await manager.init_database()
    await manager.create_tables()
    yield manager
    await manager.close_connections()


@pytest.fixture
def create_city(client):
    """Factory creating a city through the API and returning its body."""

    def _create(name: str = "Paris", country_code: str = "FR", currency: str = "EUR") -> Dict[str, Any]:
        response = client.post(
            "/cities",
            json={"name": name, "country_code": country_code, "currency": currency},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def create_season(client):
    """Factory creating a season through the API and returning its body."""

    def _create(city_id: str, season_name: str = "peak", start_month: int = 6, end_month: int = 8) -> Dict[str, Any]:
        response = client.post(
            "/seasons",
            json={
                "city_id": city_id,
                "season_name": season_name,
                "start_month": start_month,
                "end_month": end_month,
            },
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create


def wait_for_job(client: TestClient, job_url: str, attempts: int = 100) -> Dict[str, Any]:
    """Poll a job until it reaches a terminal status."""
    body: Dict[str, Any] = {}
    for _ in range(attempts):
        response = client.get(job_url)
        assert response.status_code == 200
        body = response.json()
        if body["status"] in ("completed", "failed"):
            return body
        time.sleep(0.05)
    raise AssertionError(f"Job did not finish in time: {body}")
