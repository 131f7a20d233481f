"""
Health check response schemas.
"""

from datetime import datetime
from pydantic import BaseModel
from typing import Dict, Any


class HealthResponse(BaseModel):
    """Health check response schema."""
    status: str
    version: str
    uptime: str
    timestamp: datetime
    checks: Dict[str, Any] = {}
