"""Logging-related constants."""

from typing import Final


class LogLimits:
    """Truncation limits for log lines."""

    URL_MAX_LENGTH: Final[int] = 1000
