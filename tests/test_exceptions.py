"""
Exception handler tests: storage failures map to the uniform error envelope.
"""

import json

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.requests import Request

from phonebook.core.exceptions import storage_exception_handler


def _request(path: str = "/api/contacts") -> Request:
    return Request({
        "type": "http",
        "method": "POST",
        "scheme": "http",
        "server": ("test", 80),
        "path": path,
        "query_string": b"",
        "headers": [],
    })


@pytest.mark.asyncio
async def test_integrity_error_maps_to_conflict():
    error = IntegrityError("INSERT INTO contacts ...", {}, Exception("UNIQUE constraint failed"))

    response = await storage_exception_handler(_request(), error)

    assert response.status_code == 409
    assert json.loads(response.body) == {
        "error": {"message": "Conflicting data", "path": "/api/contacts"},
    }


@pytest.mark.asyncio
async def test_other_storage_errors_map_to_server_error():
    error = OperationalError("SELECT 1", {}, Exception("disk I/O error"))

    response = await storage_exception_handler(_request("/api/contacts/1"), error)

    assert response.status_code == 500
    assert json.loads(response.body)["error"]["message"] == "Database operation failed"
