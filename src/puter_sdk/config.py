"""Configuration constants and environment handling for Puter SDK."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

SDK_VERSION = "0.1.0"

# Environment variable names
PUTER_API_KEY_ENV = "PUTER_API_KEY"
PUTER_BASE_URL_ENV = "PUTER_BASE_URL"

DEFAULT_BASE_URL = "https://api.puter.com"
DEFAULT_TIMEOUT = 30.0
DEFAULT_STREAM_TIMEOUT = 300.0
USER_AGENT = f"puter-sdk-python/{SDK_VERSION}"

PUTER_CONFIG_DIR = Path.home() / ".puter"
DEFAULT_CREDENTIALS_PATH = PUTER_CONFIG_DIR / "credentials.json"

# Hosted sites are served from https://<subdomain>.<SITE_DOMAIN>
SITE_DOMAIN = "puter.site"

# Driver interfaces reachable through /drivers/call
INTERFACE_APPS = "puter-apps"
INTERFACE_SUBDOMAINS = "puter-subdomains"
INTERFACE_KVSTORE = "puter-kvstore"
INTERFACE_CHAT_COMPLETION = "puter-chat-completion"
INTERFACE_OCR = "puter-ocr"
INTERFACE_TTS = "puter-tts"
INTERFACE_IMAGE_GENERATION = "puter-image-generation"

CHAT_DRIVER = "openai-completion"
CHAT_SERVICE = "ai-chat"

MAX_KEY_LENGTH = 1024

# Images attached to chat messages are uploaded here first
IMAGE_UPLOAD_DIR = "/"


def load_env(path: str | os.PathLike[str] | None = None) -> bool:
    """Load a ``.env`` file into the process environment.

    Existing environment variables are not overridden.

    Args:
        path: Path to the env file. Defaults to ``.env`` lookup from the
            current directory.

    Returns:
        True if a file was found and loaded.
    """
    return load_dotenv(path)


def get_base_url(base_url: str | None = None) -> str:
    """Resolve the API base URL.

    Checks the explicit argument, then PUTER_BASE_URL, then the default.
    """
    resolved = base_url or os.environ.get(PUTER_BASE_URL_ENV) or DEFAULT_BASE_URL
    return resolved.rstrip("/")
