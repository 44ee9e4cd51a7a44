"""Tests for the HTTP transport and driver call envelopes."""

from __future__ import annotations

import httpx
import pytest
from httpx import Response

from puter_sdk.auth import Session
from puter_sdk.exceptions import (
    AuthenticationError,
    BackendError,
    ConnectionError,
    NotFoundError,
    TimeoutError,
    TransportError,
)
from puter_sdk.streaming import ByteStream
from puter_sdk.transport import Transport, check_envelope

from .conftest import make_envelope, make_error_envelope, request_json


class BrokenBody(httpx.AsyncByteStream):
    """Response body whose connection drops before the first byte."""

    async def __aiter__(self):
        raise httpx.ReadError("connection reset")
        yield b""


@pytest.fixture
def transport(api_base_url):
    return Transport(Session(api_base_url, token="tok_test"))


class TestRequest:
    """Tests for buffered requests."""

    @pytest.mark.asyncio
    async def test_bearer_header(self, respx_mock, transport, api_base_url):
        """Test the session token is sent as a bearer header."""
        route = respx_mock.get(f"{api_base_url}/whoami").mock(
            return_value=Response(200, json={"username": "testuser"})
        )

        data = await transport.get("/whoami")

        assert data == {"username": "testuser"}
        assert route.calls.last.request.headers["Authorization"] == "Bearer tok_test"
        assert route.calls.last.request.headers["User-Agent"].startswith("puter-sdk-python/")
        await transport.close()

    @pytest.mark.asyncio
    async def test_no_header_without_token(self, respx_mock, api_base_url):
        """Test unauthenticated requests carry no Authorization header."""
        transport = Transport(Session(api_base_url))
        route = respx_mock.post(f"{api_base_url}/login").mock(
            return_value=Response(200, json={"proceed": False})
        )

        await transport.post("/login", {"username": "a", "password": "b"})

        assert "Authorization" not in route.calls.last.request.headers
        await transport.close()

    @pytest.mark.asyncio
    async def test_token_read_per_request(self, respx_mock, transport, api_base_url):
        """Test that clearing the session drops the header on the next request."""
        route = respx_mock.post(f"{api_base_url}/df").mock(return_value=Response(200, json={}))

        await transport.post("/df")
        transport.session.clear()
        await transport.post("/df")

        assert "Authorization" in route.calls[0].request.headers
        assert "Authorization" not in route.calls[1].request.headers
        await transport.close()

    @pytest.mark.asyncio
    async def test_empty_body(self, respx_mock, transport, api_base_url):
        """Test a 204 yields an empty dict."""
        respx_mock.post(f"{api_base_url}/delete").mock(return_value=Response(204))

        data = await transport.post("/delete", {"path": "/a"})

        assert data == {}
        await transport.close()

    @pytest.mark.asyncio
    async def test_non_json_body(self, respx_mock, transport, api_base_url):
        """Test a non-JSON success body is rejected."""
        respx_mock.get(f"{api_base_url}/whoami").mock(return_value=Response(200, text="<html>"))

        with pytest.raises(BackendError) as exc_info:
            await transport.get("/whoami")

        assert exc_info.value.code == "INVALID_RESPONSE"
        await transport.close()

    @pytest.mark.asyncio
    async def test_plain_text_error_body(self, respx_mock, transport, api_base_url):
        """Test the text of a non-JSON error body becomes the message."""
        respx_mock.post(f"{api_base_url}/login").mock(
            return_value=Response(400, text="Invalid password.\n")
        )

        with pytest.raises(BackendError) as exc_info:
            await transport.post("/login", {"username": "a", "password": "b"})

        assert exc_info.value.message == "Invalid password."
        assert exc_info.value.status_code == 400
        await transport.close()

    @pytest.mark.asyncio
    async def test_empty_error_body(self, respx_mock, transport, api_base_url):
        """Test an error without a body falls back to the reason phrase."""
        respx_mock.get(f"{api_base_url}/whoami").mock(return_value=Response(500))

        with pytest.raises(BackendError, match="Internal Server Error"):
            await transport.get("/whoami")
        await transport.close()

    @pytest.mark.asyncio
    async def test_status_401(self, respx_mock, transport, api_base_url):
        """Test 401 maps to AuthenticationError."""
        respx_mock.get(f"{api_base_url}/whoami").mock(
            return_value=Response(401, json={"error": {"message": "Token expired"}})
        )

        with pytest.raises(AuthenticationError, match="Token expired"):
            await transport.get("/whoami")
        await transport.close()

    @pytest.mark.asyncio
    async def test_status_404(self, respx_mock, transport, api_base_url):
        """Test 404 maps to NotFoundError."""
        respx_mock.post(f"{api_base_url}/stat").mock(
            return_value=Response(404, json={"error": {"code": "subject_does_not_exist"}})
        )

        with pytest.raises(NotFoundError) as exc_info:
            await transport.post("/stat", {"path": "/missing"})

        assert exc_info.value.code == "subject_does_not_exist"
        await transport.close()

    @pytest.mark.asyncio
    async def test_connection_error(self, respx_mock, transport, api_base_url):
        """Test connection failures."""
        respx_mock.get(f"{api_base_url}/whoami").mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(ConnectionError):
            await transport.get("/whoami")
        await transport.close()

    @pytest.mark.asyncio
    async def test_timeout(self, respx_mock, transport, api_base_url):
        """Test timeouts."""
        respx_mock.get(f"{api_base_url}/whoami").mock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(TimeoutError) as exc_info:
            await transport.get("/whoami")

        assert exc_info.value.timeout_seconds == 30.0
        await transport.close()

    @pytest.mark.asyncio
    async def test_other_transport_error(self, respx_mock, transport, api_base_url):
        """Test any other httpx failure."""
        respx_mock.get(f"{api_base_url}/whoami").mock(
            side_effect=httpx.RemoteProtocolError("broken")
        )

        with pytest.raises(TransportError, match="broken"):
            await transport.get("/whoami")
        await transport.close()


class TestDriverCall:
    """Tests for /drivers/call."""

    def test_payload_key_order(self):
        """Test the payload keys come out in a fixed order."""
        payload = Transport.driver_payload(
            "puter-chat-completion",
            "complete",
            {"messages": []},
            driver="openai-completion",
            test_mode=False,
        )

        assert list(payload) == ["interface", "driver", "test_mode", "method", "args"]

    def test_payload_omits_unset(self):
        """Test optional keys are left out."""
        payload = Transport.driver_payload("puter-kvstore", "flush")

        assert payload == {"interface": "puter-kvstore", "method": "flush"}

    @pytest.mark.asyncio
    async def test_call_returns_envelope(self, respx_mock, transport, api_base_url):
        """Test a successful driver call."""
        route = respx_mock.post(f"{api_base_url}/drivers/call").mock(
            return_value=Response(200, json=make_envelope("v"))
        )

        envelope = await transport.call("puter-kvstore", "get", {"key": "k"})

        assert envelope["result"] == "v"
        assert request_json(route.calls.last.request) == {
            "interface": "puter-kvstore",
            "method": "get",
            "args": {"key": "k"},
        }
        await transport.close()

    @pytest.mark.asyncio
    async def test_call_failure_envelope(self, respx_mock, transport, api_base_url):
        """Test success: false on a 2xx is raised."""
        respx_mock.post(f"{api_base_url}/drivers/call").mock(
            return_value=Response(200, json=make_error_envelope("No such key", "NOT_FOUND"))
        )

        with pytest.raises(BackendError) as exc_info:
            await transport.call("puter-kvstore", "get", {"key": "k"})

        assert exc_info.value.message == "No such key"
        assert exc_info.value.code == "NOT_FOUND"
        await transport.close()

    def test_expect_success(self):
        """Test a missing success flag fails only when success is required."""
        check_envelope({"result": 1})

        with pytest.raises(BackendError, match="Failed to set value"):
            check_envelope(
                {"result": 1}, expect_success=True, failure_message="Failed to set value"
            )

    def test_non_dict_envelope(self):
        """Test a non-object envelope."""
        check_envelope([1, 2])

        with pytest.raises(BackendError) as exc_info:
            check_envelope([1, 2], expect_success=True)

        assert exc_info.value.code == "INVALID_RESPONSE"


class TestStream:
    """Tests for streamed requests."""

    @pytest.mark.asyncio
    async def test_stream_chunks(self, respx_mock, transport, api_base_url):
        """Test the live body is handed back."""
        respx_mock.post(f"{api_base_url}/drivers/call").mock(
            return_value=Response(200, content=b'{"text":"Hel"}\n{"text":"lo"}\n')
        )

        stream = await transport.call_stream("puter-tts", "synthesize", {"text": "hi"})
        assert isinstance(stream, ByteStream)
        lines = [line async for line in stream.aiter_lines()]

        assert lines == ['{"text":"Hel"}', '{"text":"lo"}']
        assert stream.is_closed
        await transport.close()

    @pytest.mark.asyncio
    async def test_stream_error_status(self, respx_mock, transport, api_base_url):
        """Test an error status is raised before any stream is returned."""
        respx_mock.post(f"{api_base_url}/drivers/call").mock(
            return_value=Response(401, json={"error": {"message": "Unauthorized"}})
        )

        with pytest.raises(AuthenticationError, match="Unauthorized"):
            await transport.call_stream("puter-tts", "synthesize", {"text": "hi"})
        await transport.close()

    @pytest.mark.asyncio
    async def test_stream_error_body_unreadable(self, monkeypatch, transport):
        """Test a failure reading an error body is wrapped."""

        async def send(request, stream=False):
            return Response(500, stream=BrokenBody(), request=request)

        monkeypatch.setattr(transport, "_send", send)

        with pytest.raises(TransportError, match="connection reset") as exc_info:
            await transport.call_stream("puter-tts", "synthesize", {"text": "hi"})

        assert isinstance(exc_info.value.__cause__, httpx.ReadError)
        await transport.close()
