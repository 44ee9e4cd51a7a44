"""HTTP transport for the Puter API.

Every request of every resource goes through :class:`Transport`, which is the
only place where HTTP responses and httpx failures are turned into the
exceptions of :mod:`puter_sdk.exceptions`.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from .auth import Session
from .config import DEFAULT_STREAM_TIMEOUT, DEFAULT_TIMEOUT, USER_AGENT
from .exceptions import (
    BackendError,
    ConnectionError,
    TimeoutError,
    TransportError,
    error_from_body,
    raise_for_status,
)
from .streaming import ByteStream

logger = logging.getLogger(__name__)

DRIVER_CALL_ENDPOINT = "/drivers/call"


def _decode(response: httpx.Response) -> Any:
    """Decode a JSON body, returning None for empty or non-JSON bodies."""
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, ValueError):
        return None


def check_envelope(
    envelope: Any,
    expect_success: bool = False,
    failure_message: str = "Request failed",
) -> None:
    """Raise if a ``{success, result, error}`` envelope reports a failure.

    Args:
        envelope: Decoded body of a driver call.
        expect_success: Also fail when ``success`` is missing or falsy.
        failure_message: Message used when the envelope carries none.

    Raises:
        BackendError: If the envelope reports a failure.
    """
    if not isinstance(envelope, dict):
        if expect_success:
            raise BackendError(failure_message, "INVALID_RESPONSE", envelope)
        return

    if envelope.get("success") is False or envelope.get("error"):
        raise error_from_body(envelope.get("error"), None, failure_message)

    if expect_success and not envelope.get("success"):
        raise BackendError(failure_message, "UNKNOWN_ERROR", envelope)


class Transport:
    """Sends requests for one :class:`~puter_sdk.auth.Session`.

    The underlying ``httpx.AsyncClient`` is created on first use. The bearer
    header is read from the session for each request, so sign-in and
    sign-out take effect immediately.
    """

    def __init__(
        self,
        session: Session,
        timeout: float = DEFAULT_TIMEOUT,
        stream_timeout: float = DEFAULT_STREAM_TIMEOUT,
    ) -> None:
        self._session = session
        self._timeout = timeout
        self._stream_timeout = stream_timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def session(self) -> Session:
        return self._session

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure the HTTP client is initialized."""
        if self._client is None:
            # Content-Type is left to httpx so multipart bodies get their boundary
            self._client = httpx.AsyncClient(
                base_url=self._session.base_url,
                timeout=httpx.Timeout(self._timeout),
                headers={"User-Agent": USER_AGENT},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _send(self, request: httpx.Request, stream: bool = False) -> httpx.Response:
        client = await self._ensure_client()
        logger.debug(f"{request.method} {request.url.path}")

        try:
            return await client.send(request, stream=stream)
        except httpx.ConnectError as e:
            raise ConnectionError(f"Cannot connect to Puter API: {e}", e) from e
        except httpx.TimeoutException as e:
            raise TimeoutError(f"Request timed out: {e}", self._timeout, e) from e
        except httpx.HTTPError as e:
            raise TransportError(str(e) or "Network request failed", e) from e

    @staticmethod
    def _parse(response: httpx.Response) -> Any:
        """Unwrap a buffered response or raise the matching typed error."""
        data = _decode(response)
        # A plain-text error body is the server's message
        reason = response.text.strip() if data is None and response.content else ""
        raise_for_status(response.status_code, data, reason or response.reason_phrase)

        if response.status_code == 204 or not response.content:
            return {}
        if data is None:
            raise BackendError(
                "Unexpected response from server",
                "INVALID_RESPONSE",
                response.text,
                response.status_code,
            )
        return data

    async def request(
        self,
        method: str,
        endpoint: str,
        json_data: Any = None,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
    ) -> Any:
        """Make a request to the API.

        Args:
            method: HTTP method.
            endpoint: API endpoint, relative to the base URL.
            json_data: JSON body data.
            params: Query parameters.
            data: Form fields for multipart uploads.
            files: Files for multipart uploads.

        Returns:
            Parsed JSON response.

        Raises:
            BackendError: On API errors.
            TransportError: On connection errors or timeouts.
        """
        client = await self._ensure_client()
        request = client.build_request(
            method,
            endpoint,
            headers=self._session.get_headers(),
            json=json_data,
            params=params,
            data=data,
            files=files,
        )
        response = await self._send(request)
        return self._parse(response)

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", endpoint, params=params)

    async def post(self, endpoint: str, json_data: Any = None) -> Any:
        return await self.request("POST", endpoint, json_data=json_data)

    async def stream(self, method: str, endpoint: str, json_data: Any = None) -> ByteStream:
        """Make a request and return the live response body.

        An error status is read, closed and raised like a buffered one;
        otherwise the body is left unread for the caller.

        Raises:
            BackendError: On API errors reported through the status code.
            TransportError: On connection errors or timeouts.
        """
        client = await self._ensure_client()
        request = client.build_request(
            method,
            endpoint,
            headers=self._session.get_headers(),
            json=json_data,
            timeout=httpx.Timeout(self._stream_timeout),
        )
        response = await self._send(request, stream=True)

        if response.status_code >= 400:
            try:
                await response.aread()
            except httpx.HTTPError as e:
                raise TransportError(str(e) or "Network request failed", e) from e
            finally:
                await response.aclose()
            self._parse(response)

        return ByteStream(response)

    @staticmethod
    def driver_payload(
        interface: str,
        method: str,
        args: dict[str, Any] | None = None,
        driver: str | None = None,
        test_mode: bool | None = None,
        service: str | None = None,
    ) -> dict[str, Any]:
        """Build a /drivers/call body.

        Keys are emitted in the order ``interface, driver, test_mode, service,
        method, args``; optional ones are left out when not given.
        """
        payload: dict[str, Any] = {"interface": interface}
        if driver is not None:
            payload["driver"] = driver
        if test_mode is not None:
            payload["test_mode"] = test_mode
        if service is not None:
            payload["service"] = service
        payload["method"] = method
        if args is not None:
            payload["args"] = args
        return payload

    async def call(
        self,
        interface: str,
        method: str,
        args: dict[str, Any] | None = None,
        *,
        driver: str | None = None,
        test_mode: bool | None = None,
        service: str | None = None,
        expect_success: bool = False,
        failure_message: str = "Request failed",
    ) -> dict[str, Any]:
        """Invoke a driver method through /drivers/call.

        Args:
            interface: Driver interface, e.g. ``puter-kvstore``.
            method: Interface method, e.g. ``get``.
            args: Method arguments.
            driver: Concrete driver implementation, if the interface needs one.
            test_mode: Legacy test flag of the chat interface.
            service: Service name, if the interface needs one.
            expect_success: Require ``success: true`` in the envelope.
            failure_message: Message for failures that carry none.

        Returns:
            The response envelope.

        Raises:
            BackendError: If the call failed.
            TransportError: On connection errors or timeouts.
        """
        payload = self.driver_payload(interface, method, args, driver, test_mode, service)
        envelope = await self.post(DRIVER_CALL_ENDPOINT, payload)
        check_envelope(envelope, expect_success, failure_message)
        return envelope

    async def call_stream(
        self,
        interface: str,
        method: str,
        args: dict[str, Any] | None = None,
        *,
        driver: str | None = None,
        test_mode: bool | None = None,
        service: str | None = None,
    ) -> ByteStream:
        """Invoke a driver method and return its streamed body."""
        payload = self.driver_payload(interface, method, args, driver, test_mode, service)
        return await self.stream("POST", DRIVER_CALL_ENDPOINT, payload)
