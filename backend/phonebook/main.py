"""
FastAPI application entry point.
Assembles the app with routers, middleware, lifespan handlers, and exception handlers.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from phonebook.api.v1.router import api_router
from phonebook.controllers.health_controller import HealthController
from phonebook.core.config import settings
from phonebook.core.exceptions import setup_exception_handlers
from phonebook.core.logging import get_logger, setup_logging
from phonebook.deps.di_container import (
    Container,
    create_container,
    get_health_controller,
    set_container,
)
from phonebook.schemas.health import HealthResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    Connects storage, creates the schema, and releases connections on shutdown.
    """
    # Startup
    setup_logging()

    container: Container = app.state.container
    storage = container.storage()
    await storage.connect()
    await storage.create_schema()

    logger.info("Application started", extra={"environment": settings.ENVIRONMENT})

    yield

    # Shutdown
    await container.weather_http_client().close()
    await storage.close()
    logger.info("Application stopped")


def create_app(container: Optional[Container] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Phonebook API with soft delete and weather-based contact suggestions",
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        docs_url="/api-docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    container = container or create_container()
    app.state.container = container
    set_container(container)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiting middleware, applied to every route
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
        enabled=settings.RATE_LIMIT_ENABLED,
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Include API router
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/health", response_model=HealthResponse, include_in_schema=False)
    async def root_health(
        controller: HealthController = Depends(get_health_controller),
    ) -> HealthResponse:
        """Root-level health check endpoint."""
        return await controller.get_health()

    # Global exception handlers
    setup_exception_handlers(app)

    return app


app = create_app()
