"""Shared fixtures and configuration for tests."""

from __future__ import annotations

import json
import os
from typing import Any
from unittest.mock import patch

import pytest
import respx
from httpx import Request, Response

from puter_sdk import Puter

# ==================== MOCK DATA ====================


def make_envelope(result: Any = None, success: bool = True, **extra: Any) -> dict[str, Any]:
    """Create a /drivers/call response envelope."""
    return {"success": success, "result": result, **extra}


def make_error_envelope(message: str, code: str = "UNKNOWN_ERROR") -> dict[str, Any]:
    """Create a failed /drivers/call response envelope."""
    return {"success": False, "error": {"code": code, "message": message}}


def make_app_dict(
    name: str = "test-app",
    uid: str = "app-1234",
    owner: str = "testuser",
    index_url: str = "https://test.app",
) -> dict[str, Any]:
    """Create a mock app record."""
    return {
        "uid": uid,
        "name": name,
        "title": name,
        "owner": {"username": owner},
        "index_url": index_url,
        "description": "",
        "metadata": {"window_resizable": True},
    }


def make_dir_dict(
    uid: str = "abcd1234-5678-90ef",
    path: str = "/testuser/AppData/app-1234/app-dir",
) -> dict[str, Any]:
    """Create a mock /mkdir response."""
    return {"uid": uid, "path": path, "name": path.rsplit("/", 1)[-1], "is_dir": True}


def make_subdomain_dict(
    subdomain: str = "test-app-abcd1234",
    uid: str = "sd-1",
    root_dir: Any = None,
) -> dict[str, Any]:
    """Create a mock subdomain record."""
    return {"uid": uid, "subdomain": subdomain, "root_dir": root_dir}


def make_file_dict(
    name: str = "notes.txt",
    path: str = "/testuser/Desktop/notes.txt",
    uid: str = "file-1",
    is_dir: bool = False,
    size: int = 42,
) -> dict[str, Any]:
    """Create a mock file entry."""
    return {"uid": uid, "name": name, "path": path, "is_dir": is_dir, "size": size}


def request_json(request: Request) -> Any:
    """Decode the JSON body of a recorded request."""
    return json.loads(request.content)


def driver_calls(route) -> list[dict[str, Any]]:
    """Bodies of every call recorded on a /drivers/call route."""
    return [request_json(call.request) for call in route.calls]


# ==================== FIXTURES ====================


@pytest.fixture
def api_base_url() -> str:
    """Base URL for API mocks."""
    return "https://api.puter.com"


@pytest.fixture
def mock_api_key() -> str:
    """Mock session token for testing."""
    return "tok_test_12345678901234567890"


@pytest.fixture
def temp_credentials_file(tmp_path, mock_api_key):
    """Create a temporary credentials file."""
    creds_dir = tmp_path / ".puter"
    creds_dir.mkdir()
    creds_file = creds_dir / "credentials.json"
    creds_file.write_text(json.dumps({"api_key": mock_api_key}))
    return creds_file


@pytest.fixture
def respx_mock():
    """Fixture for respx mocking."""
    with respx.mock(assert_all_called=False) as mock:
        yield mock


# ==================== API MOCK HELPERS ====================


def mock_driver_call(respx_mock, base_url: str, *responses: dict[str, Any]):
    """Mock /drivers/call, answering successive calls with the given bodies."""
    route = respx_mock.post(f"{base_url}/drivers/call")
    if len(responses) == 1:
        route.mock(return_value=Response(200, json=responses[0]))
    else:
        route.mock(side_effect=[Response(200, json=body) for body in responses])
    return route


@pytest.fixture
def anonymous_client(tmp_path):
    """A client without any token from arguments, env or credentials file."""
    with patch.dict(os.environ, {}, clear=True):
        return Puter(credentials_path=tmp_path / "missing.json")
