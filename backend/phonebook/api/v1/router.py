"""
API router that aggregates all endpoint routers.
"""

from fastapi import APIRouter

from phonebook.api.v1.endpoints import (
    health,
    contacts,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(
    contacts.router,
    prefix="/contacts",
    tags=["contacts"],
)
