"""Transport interface used by the workflow engine.

The engine never talks to an HTTP library directly: it hands a method, URL,
headers, form body and the run's cookie store to a Transport and gets back
a TransportResponse. Swapping the transport (plain HTTP client, headless
browser, scripted fake) does not touch the engine.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional
from urllib.parse import urljoin


@dataclass(frozen=True)
class TransportResponse:
    """Outcome of a single transport request."""

    status: int
    url: str
    body: str = ""
    redirected: bool = False
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True for 2xx responses."""
        return 200 <= self.status < 300

    @property
    def is_redirect(self) -> bool:
        """True for a 3xx response or a response reached through redirects."""
        return 300 <= self.status < 400 or self.redirected

    @property
    def location(self) -> str:
        """Redirect target: the Location header for 3xx, otherwise the final URL."""
        if 300 <= self.status < 400:
            target = self.headers.get("Location") or self.headers.get("location")
            if target:
                return urljoin(self.url, target)
        return self.url

    def json(self) -> Any:
        """
        Parse the body as JSON.

        Raises:
            ValueError: If the body is not valid JSON
        """
        return json.loads(self.body)


class Transport(ABC):
    """Performs HTTP requests on behalf of the workflow engine."""

    @abstractmethod
    def create_cookie_jar(self) -> Any:
        """Create a fresh cookie store for one workflow run."""

    @abstractmethod
    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        data: Optional[Mapping[str, str]] = None,
        cookie_jar: Any = None,
    ) -> TransportResponse:
        """
        Perform a request, following redirects.

        Args:
            method: HTTP method
            url: Absolute URL
            headers: Extra request headers
            data: Form fields, sent url-encoded
            cookie_jar: Cookie store of the current run

        Returns:
            TransportResponse

        Raises:
            TransportError: On network failure or timeout
        """

    async def release(self, cookie_jar: Any) -> None:
        """Release resources tied to one run's cookie store."""

    async def close(self) -> None:
        """Release any held connections."""
