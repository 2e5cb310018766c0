"""aiohttp-backed transport."""

import asyncio
from typing import Any, Dict, Mapping, Optional, Tuple

import aiohttp
from aiohttp.abc import AbstractCookieJar
from loguru import logger

from ...constants import Headers, Timeouts
from ...core.exceptions import TransportError
from ...utils.masking import truncate_url
from .base import Transport, TransportResponse


class AiohttpTransport(Transport):
    """
    Transport built on aiohttp.

    One ClientSession is kept per cookie jar, so concurrent runs that own
    separate jars never share cookies.
    """

    def __init__(
        self,
        timeout: float = Timeouts.HTTP_REQUEST,
        user_agent: str = Headers.USER_AGENT,
    ):
        """
        Initialize transport.

        Args:
            timeout: Total request timeout in seconds
            user_agent: User-Agent header sent with every request
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self._sessions: Dict[int, Tuple[AbstractCookieJar, aiohttp.ClientSession]] = {}
        self._fallback_jar: Optional[AbstractCookieJar] = None

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    def create_cookie_jar(self) -> aiohttp.CookieJar:
        """Create a cookie jar for one run (call from within the event loop)."""
        return aiohttp.CookieJar()

    def _session_for(
        self, cookie_jar: Optional[AbstractCookieJar]
    ) -> aiohttp.ClientSession:
        """Get or create the ClientSession bound to a cookie jar."""
        if cookie_jar is None:
            cookie_jar = self._default_jar()

        entry = self._sessions.get(id(cookie_jar))
        if entry is not None:
            return entry[1]

        connector = aiohttp.TCPConnector(
            limit=10,
            ttl_dns_cache=120,
            keepalive_timeout=30,
        )
        timeout = aiohttp.ClientTimeout(total=self.timeout, connect=Timeouts.HTTP_CONNECT)
        session = aiohttp.ClientSession(
            connector=connector,
            cookie_jar=cookie_jar,
            headers={"User-Agent": self.user_agent},
            timeout=timeout,
        )
        self._sessions[id(cookie_jar)] = (cookie_jar, session)
        logger.debug(f"HTTP session created ({len(self._sessions)} active)")
        return session

    def _default_jar(self) -> AbstractCookieJar:
        """Jar used for requests made without an explicit cookie store."""
        if self._fallback_jar is None:
            self._fallback_jar = aiohttp.CookieJar()
        return self._fallback_jar

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        data: Optional[Mapping[str, str]] = None,
        cookie_jar: Any = None,
    ) -> TransportResponse:
        """Perform a request, following redirects."""
        session = self._session_for(cookie_jar)
        logger.debug(f"request: {method} {truncate_url(url)}")

        try:
            async with session.request(
                method,
                url,
                headers=dict(headers or {}),
                data=dict(data) if data is not None else None,
                allow_redirects=True,
            ) as response:
                body = await response.text(errors="replace")
                result = TransportResponse(
                    status=response.status,
                    url=str(response.url),
                    body=body,
                    redirected=bool(response.history),
                    headers=dict(response.headers),
                )
        except asyncio.TimeoutError:
            raise TransportError(f"Request timed out after {self.timeout:g}s", url=url)
        except aiohttp.ClientError as e:
            raise TransportError(f"Request failed: {e}", url=url)

        logger.debug(f"response: {result.status} {truncate_url(result.url)}")
        return result

    async def release(self, cookie_jar: Any) -> None:
        """Close the HTTP session bound to a finished run's cookie jar."""
        entry = self._sessions.pop(id(cookie_jar), None)
        if entry is not None:
            await entry[1].close()

    async def close(self) -> None:
        """Close all HTTP sessions."""
        for _, session in self._sessions.values():
            await session.close()
        self._sessions.clear()
