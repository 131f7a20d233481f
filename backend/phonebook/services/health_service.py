"""
Health service.
Provides health check functionality.
"""

import time
from datetime import datetime, timezone

from phonebook.core.config import settings
from phonebook.db.repositories.health_repository import HealthRepository
from phonebook.schemas.health import HealthResponse
from phonebook.services.base_service import BaseService


class HealthService(BaseService):
    """Service for health check operations."""

    def __init__(self, health_repo: HealthRepository):
        self.health_repo = health_repo
        self.start_time = time.time()

    async def get_health(self) -> HealthResponse:
        """
        Get system health status.

        Returns:
            HealthResponse with status, uptime, and checks
        """
        # Calculate uptime
        uptime_seconds = int(time.time() - self.start_time)
        uptime_str = f"PT{uptime_seconds}S"  # ISO 8601 duration format

        checks = {}

        # Check database connectivity
        db_status = await self.health_repo.check_database()
        checks["database"] = "ok" if db_status else "error"

        # Determine overall status
        status = "ok" if all(check == "ok" for check in checks.values()) else "degraded"

        return HealthResponse(
            status=status,
            version=settings.VERSION,
            uptime=uptime_str,
            timestamp=datetime.now(timezone.utc),
            checks=checks,
        )
