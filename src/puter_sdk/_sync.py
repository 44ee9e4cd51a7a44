"""Synchronous wrapper for the Puter client."""

from __future__ import annotations

import asyncio
import inspect
import threading
from pathlib import Path
from typing import Any

from .client import Puter
from .config import DEFAULT_TIMEOUT
from .streaming import ByteStream


def _run_sync(loop: asyncio.AbstractEventLoop, coro: Any) -> Any:
    """Run a coroutine to completion on the given loop.

    This handles the case where we may or may not already be in an event loop.
    The same loop is used for every call so the HTTP client, which is bound to
    the loop it was created on, stays usable.
    """
    try:
        running = asyncio.get_running_loop()
    except RuntimeError:
        running = None

    if running is None:
        return loop.run_until_complete(coro)

    # We're in an async context, drive the private loop from another thread
    result: Any = None
    exception: BaseException | None = None

    def run_in_thread() -> None:
        nonlocal result, exception
        try:
            result = loop.run_until_complete(coro)
        except BaseException as e:
            exception = e

    thread = threading.Thread(target=run_in_thread)
    thread.start()
    thread.join()

    if exception is not None:
        raise exception
    return result


async def _drain(stream: ByteStream) -> list[bytes]:
    async with stream:
        return [chunk async for chunk in stream]


class _SyncResource:
    """Blocking view of a resource adapter.

    Coroutine methods are run to completion; everything else is passed through.
    """

    def __init__(self, resource: Any, loop: asyncio.AbstractEventLoop) -> None:
        self._resource = resource
        self._loop = loop

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self._resource, name)
        if not inspect.iscoroutinefunction(attr):
            return attr

        def method(*args: Any, **kwargs: Any) -> Any:
            return self._run(attr(*args, **kwargs))

        method.__name__ = name
        method.__doc__ = attr.__doc__
        return method

    def _run(self, coro: Any) -> Any:
        result = _run_sync(self._loop, coro)
        if isinstance(result, ByteStream):
            # A live stream can't outlive the loop run, hand back its chunks
            return iter(_run_sync(self._loop, _drain(result)))
        return result


class PuterSync:
    """Synchronous client for the Puter API.

    This is a blocking wrapper around the async :class:`~puter_sdk.Puter`
    client, with the same resource attributes. Streamed results (chat with
    ``stream=True``, speech synthesis) are read to the end and returned as an
    iterator of byte chunks.

    Example:
        ```python
        from puter_sdk import PuterSync

        with PuterSync() as client:
            client.auth.sign_in("alice", "s3cret")
            client.kv.set("greeting", "hello")

            for chunk in client.ai.txt2speech("Hello", voice="Joanna"):
                out.write(chunk)
        ```
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        credentials_path: Path | None = None,
    ) -> None:
        """Initialize the synchronous Puter client.

        Args:
            api_key: Session token or API key. If not provided, will be read
                from PUTER_API_KEY env var or ~/.puter/credentials.json.
            base_url: Base URL for the Puter API.
            timeout: Default request timeout in seconds.
            credentials_path: Path to credentials file.
        """
        self._loop = asyncio.new_event_loop()
        self._async_client = Puter(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            credentials_path=credentials_path,
        )

        self.auth = _SyncResource(self._async_client.auth, self._loop)
        self.fs = _SyncResource(self._async_client.fs, self._loop)
        self.kv = _SyncResource(self._async_client.kv, self._loop)
        self.apps = _SyncResource(self._async_client.apps, self._loop)
        self.hosting = _SyncResource(self._async_client.hosting, self._loop)
        self.sites = _SyncResource(self._async_client.sites, self._loop)
        self.ai = _SyncResource(self._async_client.ai, self._loop)
        self.usage = _SyncResource(self._async_client.usage, self._loop)

    @property
    def session(self):
        return self._async_client.session

    def __enter__(self) -> PuterSync:
        """Enter context manager."""
        _run_sync(self._loop, self._async_client.__aenter__())
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit context manager."""
        self.close()

    def close(self) -> None:
        """Close the HTTP client and the event loop."""
        if self._loop.is_closed():
            return
        try:
            _run_sync(self._loop, self._async_client.close())
        finally:
            self._loop.close()
