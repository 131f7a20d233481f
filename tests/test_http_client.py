"""
HttpClient tests against a local aiohttp server.
"""

import asyncio

import aiohttp
import pytest
from aiohttp import test_utils, web

from phonebook.core.integrations.http.http_client import HttpClient, is_retryable


@pytest.fixture
async def weather_server():
    """Local server whose /weather handler answers with queued (status, body) pairs."""
    responses = []
    requests = []

    async def handler(request):
        requests.append(dict(request.query))
        status, body = responses.pop(0) if responses else (200, {"results": {"temp": 20}})
        return web.json_response(body, status=status)

    app = web.Application()
    app.router.add_get("/weather", handler)
    server = test_utils.TestServer(app)
    await server.start_server()

    yield server, responses, requests

    await server.close()


def _client(server, **kwargs) -> HttpClient:
    return HttpClient(base_url=str(server.make_url("/weather")), retry_delay=0, **kwargs)


def test_build_url():
    client = HttpClient(base_url="https://api.example.com/weather/")

    assert client.build_url() == "https://api.example.com/weather/"
    assert client.build_url("/today") == "https://api.example.com/weather/today"
    assert HttpClient().build_url("https://other.example.com") == "https://other.example.com"


@pytest.mark.parametrize(
    "error, expected",
    [
        (aiohttp.ClientConnectionError(), True),
        (asyncio.TimeoutError(), True),
        (aiohttp.ClientResponseError(request_info=None, history=(), status=503), True),
        (aiohttp.ClientResponseError(request_info=None, history=(), status=401), False),
        (aiohttp.ClientResponseError(request_info=None, history=(), status=429), False),
        (ValueError(), False),
    ],
)
def test_is_retryable(error, expected):
    assert is_retryable(error) is expected


@pytest.mark.asyncio
async def test_get_decodes_json_and_sends_params(weather_server):
    server, _, requests = weather_server
    client = _client(server)

    try:
        body = await client.get(params={"city_name": "Recife"})
    finally:
        await client.close()

    assert body == {"results": {"temp": 20}}
    assert requests == [{"city_name": "Recife"}]


@pytest.mark.asyncio
async def test_get_retries_gateway_errors(weather_server):
    server, responses, requests = weather_server
    responses.append((503, {"error": "busy"}))
    client = _client(server, max_retries=2)

    try:
        body = await client.get()
    finally:
        await client.close()

    assert body == {"results": {"temp": 20}}
    assert len(requests) == 2


@pytest.mark.asyncio
async def test_get_does_not_retry_client_errors(weather_server):
    server, responses, requests = weather_server
    responses.append((401, {"error": "bad key"}))
    client = _client(server, max_retries=3)

    try:
        with pytest.raises(aiohttp.ClientResponseError) as exc_info:
            await client.get()
    finally:
        await client.close()

    assert exc_info.value.status == 401
    assert len(requests) == 1
