"""Fixed-delay retry controller for portal requests.

Every failure raised by the wrapped operation is treated as retryable. The
controller does not distinguish error kinds, so callers must not wrap
non-idempotent operations (the workflow sends payment with one attempt).
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from ..constants import Retries

T = TypeVar("T")

Operation = Callable[[], Union[Awaitable[T], T]]


def _log_before_sleep(retry_state: RetryCallState) -> None:
    """Log a failed attempt before the fixed delay."""
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    wait_for = retry_state.next_action.sleep if retry_state.next_action else 0.0
    logger.warning(
        f"Attempt {retry_state.attempt_number} failed: {exc}. Retrying in {wait_for:g}s"
    )


class RetryController:
    """Runs an operation with bounded attempts and a fixed inter-attempt delay."""

    def __init__(
        self,
        max_attempts: int = Retries.MAX_ATTEMPTS,
        delay: float = Retries.DELAY_SECONDS,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        """
        Initialize retry controller.

        Args:
            max_attempts: Default number of attempts (>= 1)
            delay: Default delay between attempts in seconds (>= 0)
            sleep: Coroutine used to wait between attempts (default: asyncio.sleep)
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if delay < 0:
            raise ValueError("delay must be non-negative")
        self.max_attempts = max_attempts
        self.delay = delay
        self._sleep = sleep or asyncio.sleep

    async def run(
        self,
        operation: Operation,
        max_attempts: Optional[int] = None,
        delay: Optional[float] = None,
    ) -> Any:
        """
        Run operation until it succeeds or the attempt budget is spent.

        Args:
            operation: Zero-argument callable; may return an awaitable
            max_attempts: Override the default attempt budget for this call
            delay: Override the default delay (seconds) for this call

        Returns:
            Result of the first successful attempt

        Raises:
            Exception: The final attempt's error, unchanged
        """
        attempts = self.max_attempts if max_attempts is None else max_attempts
        wait_seconds = self.delay if delay is None else delay
        if attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_fixed(wait_seconds),
            retry=retry_if_exception_type(Exception),
            before_sleep=_log_before_sleep,
            sleep=self._sleep,
            reraise=True,
        )

        async for attempt in retrying:
            with attempt:
                logger.debug(f"Attempt {attempt.retry_state.attempt_number}/{attempts}")
                result = operation()
                if inspect.isawaitable(result):
                    result = await result
        return result
