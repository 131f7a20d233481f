"""
Weather service.
Looks up the current weather for a contact's city and turns it into a contact suggestion.
Lookups are best effort: every failure becomes a WeatherUnavailable result, never an exception.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional, Union

import aiohttp

from phonebook.core.integrations.http.http_client import HttpClient
from phonebook.schemas.weather import (
    WeatherInfo,
    WeatherReport,
    WeatherSuggestion,
    WeatherUnavailable,
)
from phonebook.services.base_service import BaseService

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEY = "your_api_key_here"
UNKNOWN_CITY = "Unknown city"

RAIN_KEYWORDS = ("chuva", "chuvisco", "rain", "drizzle")
SUN_KEYWORDS = ("sol", "limpo", "clear", "sunny")

COLD_MAX_TEMPERATURE = 18
HOT_MIN_TEMPERATURE = 30


class WeatherLookupError(Exception):
    """The weather API answered with an unusable payload."""


class WeatherService(BaseService):
    """Service for weather lookups keyed off a postal address."""

    def __init__(self, http_client: HttpClient, api_key: str = ""):
        self.http_client = http_client
        self.api_key = api_key

    @staticmethod
    def extract_city(address: Optional[str]) -> Optional[str]:
        """
        Extract the city from a "street, number, city, region" address.

        With three or more comma-separated parts the city is the second to
        last; with two it is the second; a single part is used as is.
        """
        if not address:
            return None

        parts = [part.strip() for part in address.split(",")]

        if len(parts) >= 3:
            city = parts[-2]
        elif len(parts) == 2:
            city = parts[1]
        else:
            city = parts[0]

        return city or None

    async def get_weather(self, address: str) -> Union[WeatherInfo, WeatherUnavailable]:
        """
        Fetch the current weather for the city in an address.

        Returns:
            WeatherInfo on success, WeatherUnavailable with a readable message otherwise
        """
        city = self.extract_city(address)

        try:
            if not city:
                raise WeatherLookupError("Could not extract a city from the address")

            params = {
                "format": "json-cors",
                "city_name": city,
            }
            if self.api_key and self.api_key != PLACEHOLDER_API_KEY:
                params["key"] = self.api_key

            logger.info(f"Fetching weather for: {city}")
            payload = await self.http_client.get(params=params)

            results = payload.get("results") if isinstance(payload, dict) else None
            if not isinstance(results, dict) or not results:
                raise WeatherLookupError("Invalid response from weather API")

            now = datetime.now()
            weather = WeatherInfo(
                city=results.get("city") or city,
                temperature=results.get("temp"),
                condition=results.get("condition_slug") or results.get("description"),
                description=results.get("description") or results.get("condition_slug"),
                humidity=results.get("humidity"),
                wind_speed=results.get("wind_speedy"),
                date=results.get("date") or now.date().isoformat(),
                time=results.get("time") or now.strftime("%H:%M:%S"),
            )

            logger.info(
                f"Weather fetched for {city}: {weather.temperature}°C, {weather.description}"
            )
            return weather
        except (aiohttp.ClientError, asyncio.TimeoutError, WeatherLookupError, ValueError) as e:
            logger.warning(
                f"Weather lookup failed: {e!r}",
                extra={"city": city, "exception_type": type(e).__name__},
            )
            return WeatherUnavailable(
                message=self.error_message(e),
                city=city or UNKNOWN_CITY,
            )

    @staticmethod
    def error_message(error: BaseException) -> str:
        """Map a lookup failure to a user-facing message."""
        if isinstance(error, asyncio.TimeoutError):
            return "Timed out connecting to the weather service"
        if isinstance(error, aiohttp.ClientResponseError):
            if error.status == 401:
                return "Invalid weather API key"
            if error.status == 429:
                return "Weather API request limit exceeded"
            if error.status >= 500:
                return "Weather service internal error"
            return "Error querying the weather service"
        if isinstance(error, aiohttp.ClientConnectionError):
            return "Weather service unavailable at the moment"
        return "Unexpected error querying the weather"

    @staticmethod
    def build_suggestion(weather: Union[WeatherInfo, WeatherUnavailable]) -> WeatherSuggestion:
        """
        Turn a weather reading into a suggestion for getting in touch.

        Up to 18°C is cold, from 30°C is hot; rain and sun are detected by
        keywords in the condition (Portuguese or English).
        """
        if isinstance(weather, WeatherUnavailable):
            return WeatherSuggestion(
                suggestion="Weather information is unavailable right now. Get in touch anyway!",
                status="unavailable",
                city=weather.city,
            )

        temperature = weather.temperature
        condition = (weather.condition or weather.description or "").lower()
        is_rainy = any(keyword in condition for keyword in RAIN_KEYWORDS)
        is_sunny = any(keyword in condition for keyword in SUN_KEYWORDS)

        if temperature is None:
            suggestion, status = "How about getting in touch to see how their day is going?", "normal"
        elif temperature <= COLD_MAX_TEMPERATURE:
            suggestion, status = "Offer your contact a hot chocolate...", "cold"
        elif temperature >= HOT_MIN_TEMPERATURE and is_sunny:
            suggestion, status = "Invite your contact to the beach in this heat!", "hot_sunny"
        elif temperature >= HOT_MIN_TEMPERATURE and is_rainy:
            suggestion, status = "Invite your contact for an ice cream", "hot_rainy"
        elif temperature < HOT_MIN_TEMPERATURE and is_sunny:
            suggestion, status = "Invite your contact to do something outdoors", "mild_sunny"
        elif temperature < HOT_MIN_TEMPERATURE and is_rainy:
            suggestion, status = "Invite your contact to watch a movie", "mild_rainy"
        else:
            suggestion, status = "How about getting in touch to see how their day is going?", "normal"

        return WeatherSuggestion(
            suggestion=suggestion,
            status=status,
            temperature=temperature,
            condition=weather.description or weather.condition,
            city=weather.city,
        )

    async def get_report(self, address: str) -> WeatherReport:
        """Look up the weather for an address and package it with its suggestion."""
        weather = await self.get_weather(address)
        suggestion = self.build_suggestion(weather)
        available = isinstance(weather, WeatherInfo)

        return WeatherReport(
            city=suggestion.city or weather.city,
            temperature=suggestion.temperature,
            condition=suggestion.condition,
            suggestion=suggestion.suggestion,
            status=suggestion.status,
            available=available,
            error=None if available else weather.message,
            last_updated=datetime.now(timezone.utc),
        )

    async def test_connection(self) -> bool:
        """Check the weather API with a known city."""
        weather = await self.get_weather("Praça da Sé, 1, São Paulo, SP")
        return isinstance(weather, WeatherInfo)
