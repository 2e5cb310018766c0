"""Unified constants for IVAC Bot.

All classes and constants can be imported directly from this package:
    from ivac_bot.constants import Endpoints, Timeouts, Retries, etc.
"""

from .endpoints import DEFAULT_BASE_URL, Endpoints, Headers, PageMarkers
from .logging import LogLimits
from .payment import OTP, PaymentMethods
from .timing import Retries, Timeouts

__all__ = [
    "DEFAULT_BASE_URL",
    "Endpoints",
    "Headers",
    "PageMarkers",
    "LogLimits",
    "OTP",
    "PaymentMethods",
    "Retries",
    "Timeouts",
]
