"""
Weather service tests: city extraction, suggestion rules, and failure handling.
The HTTP client is replaced by a fake; no network access is needed.
"""

import asyncio
from unittest.mock import Mock

import aiohttp
import pytest

from phonebook.schemas.weather import WeatherInfo, WeatherUnavailable
from phonebook.services.weather_service import PLACEHOLDER_API_KEY, WeatherService


def _response_error(status: int) -> aiohttp.ClientResponseError:
    return aiohttp.ClientResponseError(request_info=Mock(), history=(), status=status)


@pytest.mark.parametrize(
    "address, expected",
    [
        ("Rua das Flores, 10, São Paulo, SP", "São Paulo"),
        ("Av. Paulista, 1000, Bela Vista, São Paulo, SP", "São Paulo"),
        ("Rua A, Recife", "Recife"),
        ("Curitiba", "Curitiba"),
        ("", None),
        (None, None),
    ],
)
def test_extract_city(address, expected):
    assert WeatherService.extract_city(address) == expected


@pytest.mark.parametrize(
    "temperature, condition, expected_status",
    [
        (15, "clear_day", "cold"),
        (18, "rain", "cold"),
        (32, "clear_day", "hot_sunny"),
        (35, "chuva forte", "hot_rainy"),
        (25, "Tempo limpo", "mild_sunny"),
        (22, "chuvisco", "mild_rainy"),
        (25, "cloudly_day", "normal"),
        (30, "storm", "normal"),
        (None, "clear_day", "normal"),
    ],
)
def test_build_suggestion(temperature, condition, expected_status):
    weather = WeatherInfo(city="Recife", temperature=temperature, condition=condition)

    suggestion = WeatherService.build_suggestion(weather)

    assert suggestion.status == expected_status
    assert suggestion.city == "Recife"
    assert suggestion.temperature == temperature


def test_cold_suggestion_text():
    suggestion = WeatherService.build_suggestion(WeatherInfo(city="Curitiba", temperature=10))

    assert suggestion.suggestion == "Offer your contact a hot chocolate..."


def test_condition_falls_back_to_description():
    weather = WeatherInfo(city="Natal", temperature=31, description="Ensolarado com sol forte")

    assert WeatherService.build_suggestion(weather).status == "hot_sunny"


def test_unavailable_weather_suggestion():
    suggestion = WeatherService.build_suggestion(
        WeatherUnavailable(message="Weather service unavailable at the moment", city="Recife")
    )

    assert suggestion.status == "unavailable"
    assert suggestion.temperature is None
    assert suggestion.city == "Recife"


@pytest.mark.asyncio
async def test_get_weather_sends_city_and_key(weather_service, weather_http_client):
    weather = await weather_service.get_weather("Rua das Flores, 10, São Paulo, SP")

    assert isinstance(weather, WeatherInfo)
    assert weather.temperature == 32
    assert weather.city == "São Paulo, SP"
    assert weather_http_client.calls == [
        {"format": "json-cors", "city_name": "São Paulo", "key": "test-key"},
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("api_key", ["", PLACEHOLDER_API_KEY])
async def test_get_weather_omits_unset_key(make_weather_service, api_key):
    service, client = make_weather_service(api_key=api_key)

    await service.get_weather("Rua A, 1, Recife, PE")

    assert "key" not in client.calls[0]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error, expected_message",
    [
        (asyncio.TimeoutError(), "Timed out connecting to the weather service"),
        (_response_error(401), "Invalid weather API key"),
        (_response_error(429), "Weather API request limit exceeded"),
        (_response_error(503), "Weather service internal error"),
        (_response_error(404), "Error querying the weather service"),
        (aiohttp.ClientConnectionError(), "Weather service unavailable at the moment"),
    ],
)
async def test_get_weather_failures_become_unavailable(make_weather_service, error, expected_message):
    service, _ = make_weather_service(error=error)

    weather = await service.get_weather("Rua A, 1, Recife, PE")

    assert isinstance(weather, WeatherUnavailable)
    assert weather.message == expected_message
    assert weather.city == "Recife"


@pytest.mark.asyncio
async def test_get_weather_rejects_payload_without_results(make_weather_service):
    service, _ = make_weather_service(payload={"error": True})

    weather = await service.get_weather("Rua A, 1, Recife, PE")

    assert isinstance(weather, WeatherUnavailable)
    assert weather.message == "Unexpected error querying the weather"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"results": ["unexpected"]},
        {"results": "unexpected"},
        {"results": {"temp": "very hot"}},
        ["unexpected"],
    ],
)
async def test_get_weather_rejects_malformed_results(make_weather_service, payload):
    service, _ = make_weather_service(payload=payload)

    weather = await service.get_weather("Rua A, 1, São Paulo, SP")

    assert isinstance(weather, WeatherUnavailable)
    assert weather.city == "São Paulo"


@pytest.mark.asyncio
async def test_get_weather_without_city_makes_no_request(make_weather_service):
    service, client = make_weather_service()

    weather = await service.get_weather("")

    assert isinstance(weather, WeatherUnavailable)
    assert weather.city == "Unknown city"
    assert client.calls == []


@pytest.mark.asyncio
async def test_get_report_available(weather_service):
    report = await weather_service.get_report("Rua das Flores, 10, São Paulo, SP")

    assert report.available is True
    assert report.status == "hot_sunny"
    assert report.temperature == 32
    assert report.condition == "Tempo limpo"
    assert report.error is None
    assert report.last_updated is not None


@pytest.mark.asyncio
async def test_get_report_unavailable(make_weather_service):
    service, _ = make_weather_service(error=aiohttp.ClientConnectionError())

    report = await service.get_report("Rua A, 1, Recife, PE")

    assert report.available is False
    assert report.status == "unavailable"
    assert report.city == "Recife"
    assert report.error == "Weather service unavailable at the moment"


@pytest.mark.asyncio
async def test_connection_check_succeeds(make_weather_service):
    service, client = make_weather_service()

    assert await service.test_connection() is True
    assert client.calls[0]["city_name"] == "São Paulo"


@pytest.mark.asyncio
async def test_connection_check_reports_failure(make_weather_service):
    service, _ = make_weather_service(error=_response_error(401))

    assert await service.test_connection() is False
