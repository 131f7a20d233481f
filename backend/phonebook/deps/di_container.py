"""
Dependency injection container using dependency-injector.
Wires storage, repositories, services, and controllers.
"""

from typing import Optional

from dependency_injector import containers, providers
from fastapi import Request

from phonebook.controllers.contact_controller import ContactController
from phonebook.controllers.health_controller import HealthController
from phonebook.core.config import settings
from phonebook.core.integrations.http.http_client import HttpClient
from phonebook.db.repositories.contact_repository import ContactRepository
from phonebook.db.repositories.health_repository import HealthRepository
from phonebook.db.storage import StorageEngine
from phonebook.services.contact_service import ContactService
from phonebook.services.health_service import HealthService
from phonebook.services.weather_service import WeatherService


class Container(containers.DeclarativeContainer):
    """Dependency injection container."""

    # Configuration
    config = providers.Configuration()

    # One storage engine (and so one shared connection) per application
    storage = providers.Singleton(
        StorageEngine,
        database_url=config.database_url,
        echo=config.database_echo,
    )

    # Integrations
    weather_http_client = providers.Singleton(
        HttpClient,
        base_url=config.weather_base_url,
        timeout=config.weather_timeout_seconds,
        max_retries=1,
        headers=providers.Dict({"User-Agent": config.user_agent}),
    )

    # Repositories
    contact_repository = providers.Factory(
        ContactRepository,
        storage=storage,
    )

    health_repository = providers.Factory(
        HealthRepository,
        storage=storage,
    )

    # Services
    weather_service = providers.Singleton(
        WeatherService,
        http_client=weather_http_client,
        api_key=config.weather_api_key,
    )

    health_service = providers.Singleton(
        HealthService,
        health_repo=health_repository,
    )

    contact_service = providers.Factory(
        ContactService,
        contact_repo=contact_repository,
    )

    # Controllers
    contact_controller = providers.Factory(
        ContactController,
        contact_service=contact_service,
        weather_service=weather_service,
    )

    health_controller = providers.Factory(
        HealthController,
        health_service=health_service,
    )


def create_container() -> Container:
    """Build a container configured from application settings."""
    container = Container()
    container.config.from_dict({
        "database_url": settings.DATABASE_URL,
        "database_echo": settings.DATABASE_ECHO,
        "weather_base_url": settings.WEATHER_BASE_URL,
        "weather_timeout_seconds": settings.WEATHER_TIMEOUT_SECONDS,
        "weather_api_key": settings.WEATHER_API_KEY,
        "user_agent": f"{settings.PROJECT_NAME.replace(' ', '-')}/{settings.VERSION}",
    })
    return container


# Global container instance
_container: Optional[Container] = None


def get_container() -> Container:
    """Get the global dependency injection container."""
    global _container
    if _container is None:
        _container = create_container()
    return _container


def set_container(container: Container) -> None:
    """Replace the global container (application startup and tests)."""
    global _container
    _container = container


def get_contact_controller(request: Request) -> ContactController:
    """FastAPI dependency resolving the contact controller from the app's container."""
    container: Container = getattr(request.app.state, "container", None) or get_container()
    return container.contact_controller()


def get_health_controller(request: Request) -> HealthController:
    """FastAPI dependency resolving the health controller from the app's container."""
    container: Container = getattr(request.app.state, "container", None) or get_container()
    return container.health_controller()
