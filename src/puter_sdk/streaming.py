"""Live streamed responses (chat completion, speech synthesis)."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import httpx

from .exceptions import StreamError


class ByteStream:
    """A streamed response body handed straight to the caller.

    Nothing is buffered or transformed: iterate to pull chunks as the server
    sends them, then close (or use ``async with``) to release the connection.

    Example:
        ```python
        stream = await client.ai.chat("Tell me a story", stream=True)
        async with stream:
            async for line in stream.aiter_lines():
                print(line)
        ```
    """

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def is_closed(self) -> bool:
        return self._response.is_closed

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self.aiter_bytes()

    async def __aenter__(self) -> ByteStream:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        """Yield raw body chunks."""
        try:
            async for chunk in self._response.aiter_bytes():
                yield chunk
        except httpx.HTTPError as e:
            raise StreamError(f"Connection lost during streaming: {e}", e) from e
        finally:
            await self._response.aclose()

    async def aiter_text(self) -> AsyncIterator[str]:
        """Yield decoded text chunks."""
        try:
            async for text in self._response.aiter_text():
                yield text
        except httpx.HTTPError as e:
            raise StreamError(f"Connection lost during streaming: {e}", e) from e
        finally:
            await self._response.aclose()

    async def aiter_lines(self) -> AsyncIterator[str]:
        """Yield the body line by line, skipping blank lines."""
        try:
            async for line in self._response.aiter_lines():
                if line:
                    yield line
        except httpx.HTTPError as e:
            raise StreamError(f"Connection lost during streaming: {e}", e) from e
        finally:
            await self._response.aclose()

    async def aread(self) -> bytes:
        """Read the remaining body into memory."""
        try:
            return await self._response.aread()
        except httpx.HTTPError as e:
            raise StreamError(f"Connection lost during streaming: {e}", e) from e
        finally:
            await self._response.aclose()

    async def aclose(self) -> None:
        await self._response.aclose()
