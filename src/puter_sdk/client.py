"""Async client for the Puter API."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .auth import Session, get_api_key
from .config import DEFAULT_TIMEOUT, get_base_url
from .resources import (
    PuterAI,
    PuterApps,
    PuterAuth,
    PuterFileSystem,
    PuterHosting,
    PuterKV,
    PuterSites,
    PuterUsage,
)
from .transport import Transport


class Puter:
    """Async client for the Puter API.

    Each resource is an attribute of the client: ``auth``, ``fs``, ``kv``,
    ``apps``, ``hosting``, ``sites``, ``ai`` and ``usage``. They share one
    session, so signing in through ``auth`` authenticates all of them.

    Example:
        ```python
        import asyncio
        from puter_sdk import Puter

        async def main():
            async with Puter() as client:
                await client.auth.sign_in("alice", "s3cret")
                await client.kv.set("greeting", "hello")
                reply = await client.ai.chat("Tell me a joke")
                print(reply.message["content"])

        asyncio.run(main())
        ```
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        credentials_path: Path | None = None,
    ) -> None:
        """Initialize the Puter client.

        Args:
            api_key: Session token or API key. If not provided, will be read
                from PUTER_API_KEY env var or ~/.puter/credentials.json.
                Without one, call ``auth.sign_in`` before other operations.
            base_url: Base URL for the Puter API. Defaults to PUTER_BASE_URL
                or https://api.puter.com.
            timeout: Default request timeout in seconds.
            credentials_path: Path to credentials file.
        """
        self._session = Session(
            base_url=get_base_url(base_url),
            token=get_api_key(api_key, credentials_path),
        )
        self._transport = Transport(self._session, timeout=timeout)

        self.auth = PuterAuth(self._transport)
        self.fs = PuterFileSystem(self._transport)
        self.kv = PuterKV(self._transport)
        self.hosting = PuterHosting(self._transport)
        self.sites = PuterSites(self._transport, self.hosting)
        self.apps = PuterApps(self._transport, self.fs, self.hosting)
        self.ai = PuterAI(self._transport, self.fs)
        self.usage = PuterUsage(self._transport)

    @property
    def session(self) -> Session:
        return self._session

    @property
    def base_url(self) -> str:
        return self._session.base_url

    async def __aenter__(self) -> Puter:
        """Enter async context manager."""
        await self._transport._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._transport.close()
