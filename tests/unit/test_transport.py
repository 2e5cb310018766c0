"""Tests for the transport layer."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from ivac_bot.core.exceptions import TransportError
from ivac_bot.services.transport.aiohttp_transport import AiohttpTransport
from ivac_bot.services.transport.base import TransportResponse


class TestTransportResponse:
    """Tests for TransportResponse helpers."""

    @pytest.mark.parametrize("status,ok", [(200, True), (204, True), (302, False), (401, False)])
    def test_ok(self, status, ok):
        assert TransportResponse(status=status, url="https://x").ok is ok

    def test_is_redirect(self):
        assert TransportResponse(status=302, url="https://x").is_redirect is True
        assert TransportResponse(status=200, url="https://x", redirected=True).is_redirect
        assert TransportResponse(status=200, url="https://x").is_redirect is False

    def test_location_from_header(self):
        """Test a 3xx Location header is resolved against the request URL."""
        response = TransportResponse(
            status=302,
            url="https://payment.ivacbd.com/login-auth-submit",
            headers={"Location": "/login-otp"},
        )
        assert response.location == "https://payment.ivacbd.com/login-otp"

    def test_location_after_followed_redirect(self):
        response = TransportResponse(
            status=200, url="https://payment.ivacbd.com/login-otp", redirected=True
        )
        assert response.location == "https://payment.ivacbd.com/login-otp"

    def test_json(self):
        response = TransportResponse(status=200, url="https://x", body='{"success": true}')
        assert response.json() == {"success": True}

    def test_json_invalid(self):
        with pytest.raises(ValueError):
            TransportResponse(status=200, url="https://x", body="<html>").json()


def mock_session(response=None, error=None):
    """ClientSession mock whose request() is an async context manager."""
    context = MagicMock()
    if error is not None:
        context.__aenter__ = AsyncMock(side_effect=error)
    else:
        context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)
    session = MagicMock()
    session.request = MagicMock(return_value=context)
    session.close = AsyncMock()
    return session


class TestAiohttpTransport:
    """Tests for AiohttpTransport."""

    @pytest.mark.asyncio
    async def test_request_success(self):
        """Test a response is converted to TransportResponse."""
        raw = MagicMock()
        raw.status = 200
        raw.url = "https://payment.ivacbd.com/"
        raw.history = (MagicMock(),)
        raw.headers = {"Content-Type": "text/html"}
        raw.text = AsyncMock(return_value="<html></html>")
        session = mock_session(response=raw)

        transport = AiohttpTransport(timeout=5)
        with patch.object(transport, "_session_for", return_value=session):
            result = await transport.request(
                "POST", "https://payment.ivacbd.com/x", data={"_token": "t"}
            )

        assert result.status == 200
        assert result.body == "<html></html>"
        assert result.redirected is True
        session.request.assert_called_once()
        assert session.request.call_args.kwargs["data"] == {"_token": "t"}
        assert session.request.call_args.kwargs["allow_redirects"] is True

    @pytest.mark.asyncio
    async def test_client_error_raises_transport_error(self):
        session = mock_session(error=aiohttp.ClientConnectionError("refused"))
        transport = AiohttpTransport()

        with patch.object(transport, "_session_for", return_value=session):
            with pytest.raises(TransportError) as exc_info:
                await transport.request("GET", "https://payment.ivacbd.com/")

        assert exc_info.value.recoverable is True
        assert exc_info.value.url == "https://payment.ivacbd.com/"

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error(self):
        session = mock_session(error=asyncio.TimeoutError())
        transport = AiohttpTransport(timeout=1)

        with patch.object(transport, "_session_for", return_value=session):
            with pytest.raises(TransportError, match="timed out"):
                await transport.request("GET", "https://payment.ivacbd.com/")

    @pytest.mark.asyncio
    async def test_one_session_per_cookie_jar(self):
        """Test each cookie jar gets its own session, released independently."""
        async with AiohttpTransport() as transport:
            jar_a = transport.create_cookie_jar()
            jar_b = transport.create_cookie_jar()

            session_a = transport._session_for(jar_a)
            assert transport._session_for(jar_a) is session_a
            session_b = transport._session_for(jar_b)
            assert session_b is not session_a

            await transport.release(jar_a)
            assert session_a.closed
            assert not session_b.closed

        assert session_b.closed
