"""
Health check endpoint.
Returns system status and uptime information.
"""

from fastapi import APIRouter, Depends

from phonebook.controllers.health_controller import HealthController
from phonebook.deps.di_container import get_health_controller
from phonebook.schemas.health import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def get_health(
    controller: HealthController = Depends(get_health_controller),
) -> HealthResponse:
    """
    Health check endpoint.
    Returns system status, uptime, and health checks.
    """
    return await controller.get_health()
