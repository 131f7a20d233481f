"""
Pytest configuration and fixtures.
Provides an in-memory storage engine, repositories, and a test app client.
"""

import pytest
from dependency_injector import providers
from httpx import ASGITransport, AsyncClient

from phonebook.core.config import settings
from phonebook.db.repositories.contact_repository import ContactRepository
from phonebook.db.storage import StorageEngine
from phonebook.deps.di_container import create_container
from phonebook.main import create_app
from phonebook.services.contact_service import ContactService
from phonebook.services.weather_service import WeatherService

# Tests hammer the API from a single client address
settings.RATE_LIMIT_ENABLED = False

# Test database URL (in-memory SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

SUNNY_WEATHER_PAYLOAD = {
    "results": {
        "city": "São Paulo, SP",
        "temp": 32,
        "condition_slug": "clear_day",
        "description": "Tempo limpo",
        "humidity": 40,
        "wind_speedy": "3.5 km/h",
        "date": "18/10/2026",
        "time": "10:00",
    }
}


class FakeHttpClient:
    """Stands in for HttpClient; returns a canned payload or raises a canned error."""

    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.calls = []

    async def get(self, endpoint="", params=None, headers=None):
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        return self.payload

    async def close(self):
        pass


@pytest.fixture
async def storage():
    """
    Create a connected storage engine with the schema in place.
    Uses in-memory SQLite for fast tests.
    """
    engine = StorageEngine(TEST_DATABASE_URL)
    await engine.connect()
    await engine.create_schema()

    yield engine

    await engine.close()


@pytest.fixture
def contact_repo(storage) -> ContactRepository:
    return ContactRepository(storage)


@pytest.fixture
def contact_service(contact_repo) -> ContactService:
    return ContactService(contact_repo)


@pytest.fixture
def weather_http_client() -> FakeHttpClient:
    return FakeHttpClient(payload=SUNNY_WEATHER_PAYLOAD)


@pytest.fixture
def weather_service(weather_http_client) -> WeatherService:
    return WeatherService(http_client=weather_http_client, api_key="test-key")


@pytest.fixture
def make_weather_service():
    """Factory for a WeatherService over a fake client answering with a payload or an error."""
    def _make(payload=SUNNY_WEATHER_PAYLOAD, error=None, api_key="test-key"):
        client = FakeHttpClient(payload=payload, error=error)
        return WeatherService(http_client=client, api_key=api_key), client
    return _make


@pytest.fixture
def test_app(storage, weather_service):
    """Application wired to the test storage engine and a fake weather API."""
    container = create_container()
    container.storage.override(providers.Object(storage))
    container.weather_service.override(providers.Object(weather_service))

    yield create_app(container)

    container.reset_override()


@pytest.fixture
async def test_client(test_app):
    """
    Create a test HTTP client.
    """
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as client:
        yield client
