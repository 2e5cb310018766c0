"""One-shot signal for human-in-the-loop suspension points."""

import asyncio
from typing import Callable, Generic, Optional, TypeVar

from loguru import logger

from ...core.exceptions import (
    SignalAlreadyFulfilledError,
    SuspensionCancelledError,
    SuspensionTimeoutError,
)

T = TypeVar("T")


class OneShotSignal(Generic[T]):
    """
    A value supplied exactly once from outside and awaited by the workflow.

    The value may be supplied before anyone waits for it. Waiting is bounded
    by a timeout and can be cancelled. `reset()` re-arms the signal for a
    fresh value (used when an OTP is rejected and a new one is requested).
    """

    def __init__(
        self,
        name: str,
        validator: Optional[Callable[[T], T]] = None,
        timeout_error: Callable[[str, float], SuspensionTimeoutError] = SuspensionTimeoutError,
    ):
        """
        Initialize signal.

        Args:
            name: Human-readable name used in logs and errors
            validator: Called with the supplied value; returns the normalized
                value or raises ValidationError
            timeout_error: Factory for the error raised when the wait times out
        """
        self.name = name
        self._validator = validator
        self._timeout_error = timeout_error
        self._event = asyncio.Event()
        self._value: Optional[T] = None
        self._cancelled = False

    @property
    def is_set(self) -> bool:
        """True once a value was supplied (or the signal was cancelled)."""
        return self._event.is_set()

    def supply(self, value: T) -> None:
        """
        Fulfil the signal.

        Raises:
            ValidationError: If the value fails validation (signal stays armed)
            SignalAlreadyFulfilledError: If a value was already supplied
        """
        if self._event.is_set():
            raise SignalAlreadyFulfilledError(self.name)
        if self._validator is not None:
            value = self._validator(value)
        self._value = value
        self._event.set()
        logger.debug(f"{self.name} supplied")

    def cancel(self) -> None:
        """Cancel a pending or future wait."""
        self._cancelled = True
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def reset(self) -> None:
        """Re-arm the signal for a new value. A cancelled signal stays cancelled."""
        if self._cancelled:
            return
        self._event = asyncio.Event()
        self._value = None

    async def wait(self, timeout: Optional[float]) -> T:
        """
        Wait for the supplied value.

        Args:
            timeout: Maximum wait in seconds (None waits indefinitely)

        Returns:
            The supplied value

        Raises:
            SuspensionTimeoutError: If no value arrives in time
            SuspensionCancelledError: If the signal was cancelled
        """
        if not self._event.is_set():
            logger.info(f"Waiting for {self.name} (timeout: {timeout}s)")
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            raise self._timeout_error(self.name, timeout)

        if self._cancelled:
            raise SuspensionCancelledError(self.name)
        return self._value  # type: ignore[return-value]
