"""HTTP transport - interface and aiohttp implementation."""

from .aiohttp_transport import AiohttpTransport
from .base import Transport, TransportResponse

__all__ = ["AiohttpTransport", "Transport", "TransportResponse"]
