"""Credential handling and session state for Puter SDK."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from .config import DEFAULT_CREDENTIALS_PATH, PUTER_API_KEY_ENV

logger = logging.getLogger(__name__)


class Credentials(BaseModel):
    """Stored authentication credentials."""

    api_key: str = Field(..., description="API key or session token")
    token_type: str = Field(default="Bearer", description="Token type")


def get_api_key(
    api_key: str | None = None,
    credentials_path: Path | None = None,
) -> str | None:
    """Get the API key from various sources.

    Checks in order of priority:
    1. Explicitly provided api_key parameter
    2. PUTER_API_KEY environment variable
    3. ~/.puter/credentials.json file

    Args:
        api_key: Explicitly provided API key.
        credentials_path: Path to credentials file. Defaults to ~/.puter/credentials.json.

    Returns:
        The API key if found, None otherwise.
    """
    if api_key:
        return api_key

    env_key = os.environ.get(PUTER_API_KEY_ENV)
    if env_key:
        return env_key

    creds = load_credentials_from_file(credentials_path or DEFAULT_CREDENTIALS_PATH)
    if creds:
        return creds.api_key

    return None


def load_credentials_from_file(path: Path) -> Credentials | None:
    """Load credentials from a JSON file.

    Args:
        path: Path to the credentials file.

    Returns:
        Credentials if found and valid, None otherwise.
    """
    if not path.exists():
        return None

    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError) as e:
        logger.debug(f"Ignoring unreadable credentials file {path}: {e}")
        return None

    if not isinstance(data, dict):
        return None

    # Handle different credential formats
    api_key = data.get("api_key") or data.get("token") or data.get("access_token")
    if not api_key:
        return None

    return Credentials(
        api_key=api_key,
        token_type=data.get("token_type", "Bearer"),
    )


def save_credentials_to_file(
    api_key: str,
    path: Path | None = None,
    token_type: str = "Bearer",
) -> None:
    """Save credentials to a JSON file.

    Args:
        api_key: The API key to save.
        path: Path to save credentials. Defaults to ~/.puter/credentials.json.
        token_type: Token type for the API key.
    """
    creds_path = path or DEFAULT_CREDENTIALS_PATH
    creds_path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {
        "api_key": api_key,
        "token_type": token_type,
    }

    creds_path.write_text(json.dumps(data, indent=2))
    creds_path.chmod(0o600)


def clear_credentials(path: Path | None = None) -> bool:
    """Clear saved credentials.

    Args:
        path: Path to credentials file. Defaults to ~/.puter/credentials.json.

    Returns:
        True if credentials were cleared, False if file didn't exist.
    """
    creds_path = path or DEFAULT_CREDENTIALS_PATH

    if creds_path.exists():
        creds_path.unlink()
        return True

    return False


class Session:
    """Base URL and bearer token shared by every resource of one client.

    The token is replaced by sign-in and cleared by sign-out; everything
    else only reads it, once per request.
    """

    def __init__(self, base_url: str, token: str | None = None) -> None:
        self.base_url = base_url
        self.token = token

    def set_token(self, token: str) -> None:
        self.token = token

    def clear(self) -> None:
        self.token = None

    def is_authenticated(self) -> bool:
        """Check if a token is available."""
        return bool(self.token)

    def get_headers(self) -> dict[str, str]:
        """Get authorization headers for requests.

        Returns:
            Headers dictionary with an Authorization header if a token is set,
            empty otherwise. Unauthenticated requests are sent as-is.
        """
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
