"""
Weather lookup schemas.
"""

from datetime import datetime
from pydantic import BaseModel
from typing import Optional


class WeatherInfo(BaseModel):
    """Current weather reading for a city."""
    city: str
    temperature: Optional[float] = None
    condition: Optional[str] = None
    description: Optional[str] = None
    humidity: Optional[float] = None
    wind_speed: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None


class WeatherUnavailable(BaseModel):
    """Structured result returned when the weather lookup fails."""
    message: str
    city: str


class WeatherSuggestion(BaseModel):
    """Suggestion derived from a weather reading."""
    suggestion: str
    status: str
    temperature: Optional[float] = None
    condition: Optional[str] = None
    city: Optional[str] = None


class WeatherReport(BaseModel):
    """Weather block attached to a contact detail response."""
    city: Optional[str] = None
    temperature: Optional[float] = None
    condition: Optional[str] = None
    suggestion: str
    status: str
    available: bool
    error: Optional[str] = None
    last_updated: datetime
