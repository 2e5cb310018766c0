"""Timing-related constants (timeouts, retries) - all values in SECONDS."""

from typing import Final


class Timeouts:
    """Timeout values in seconds."""

    HTTP_REQUEST: Final[float] = 60.0
    HTTP_CONNECT: Final[float] = 10.0
    OTP_WAIT: Final[float] = 300.0
    CHALLENGE_WAIT: Final[float] = 300.0
    CHALLENGE_PROBE: Final[float] = 10.0


class Retries:
    """Retry configuration for portal requests."""

    MAX_ATTEMPTS: Final[int] = 3
    DELAY_SECONDS: Final[float] = 2.0
    # Payment submission is not idempotent and is sent exactly once
    PAYMENT_ATTEMPTS: Final[int] = 1
    MAX_OTP_ATTEMPTS: Final[int] = 3
