"""Tests for the one-shot suspension signal."""

import asyncio

import pytest

from ivac_bot.core.exceptions import (
    ChallengeRequiredTimeout,
    SignalAlreadyFulfilledError,
    SuspensionCancelledError,
    SuspensionTimeoutError,
    ValidationError,
)
from ivac_bot.services.session.suspension import OneShotSignal


def digits_only(value):
    if not str(value).isdigit():
        raise ValidationError("digits only", field="otp")
    return str(value)


class TestOneShotSignal:
    """Tests for OneShotSignal."""

    @pytest.mark.asyncio
    async def test_supply_before_wait(self):
        """Test a value supplied before the wait is returned immediately."""
        signal = OneShotSignal("OTP")
        signal.supply("123456")

        assert signal.is_set is True
        assert await signal.wait(timeout=1) == "123456"

    @pytest.mark.asyncio
    async def test_supply_during_wait(self):
        """Test a waiter is resumed when the value arrives."""
        signal = OneShotSignal("OTP")
        waiter = asyncio.create_task(signal.wait(timeout=1))
        await asyncio.sleep(0)
        assert not waiter.done()

        signal.supply("654321")

        assert await waiter == "654321"

    @pytest.mark.asyncio
    async def test_timeout(self):
        """Test the wait times out when nothing is supplied."""
        signal = OneShotSignal("OTP")

        with pytest.raises(SuspensionTimeoutError) as exc_info:
            await signal.wait(timeout=0.01)

        assert exc_info.value.signal_name == "OTP"
        assert exc_info.value.timeout == 0.01

    @pytest.mark.asyncio
    async def test_custom_timeout_error(self):
        """Test the timeout error factory is used."""
        signal = OneShotSignal(
            "challenge token", timeout_error=lambda _name, t: ChallengeRequiredTimeout(t)
        )

        with pytest.raises(ChallengeRequiredTimeout):
            await signal.wait(timeout=0.01)

    @pytest.mark.asyncio
    async def test_cancel_pending_wait(self):
        """Test cancel() aborts a pending wait."""
        signal = OneShotSignal("OTP")
        waiter = asyncio.create_task(signal.wait(timeout=1))
        await asyncio.sleep(0)

        signal.cancel()

        with pytest.raises(SuspensionCancelledError):
            await waiter

    @pytest.mark.asyncio
    async def test_cancel_before_wait(self):
        """Test a cancelled signal fails later waits."""
        signal = OneShotSignal("OTP")
        signal.cancel()

        with pytest.raises(SuspensionCancelledError):
            await signal.wait(timeout=1)

    def test_double_supply(self):
        """Test a second supply raises SignalAlreadyFulfilledError."""
        signal = OneShotSignal("OTP")
        signal.supply("1")

        with pytest.raises(SignalAlreadyFulfilledError):
            signal.supply("2")

    @pytest.mark.asyncio
    async def test_reset_rearms(self):
        """Test reset() allows a fresh value."""
        signal = OneShotSignal("OTP")
        signal.supply("1")
        signal.reset()

        assert signal.is_set is False
        signal.supply("2")
        assert await signal.wait(timeout=1) == "2"

    @pytest.mark.asyncio
    async def test_reset_keeps_cancellation(self):
        """Test a cancelled signal stays cancelled across reset()."""
        signal = OneShotSignal("OTP")
        signal.cancel()
        signal.reset()

        assert signal.cancelled is True
        with pytest.raises(SuspensionCancelledError):
            await signal.wait(timeout=0.01)

    def test_validation_failure_keeps_signal_armed(self):
        """Test an invalid value raises and does not fulfil the signal."""
        signal = OneShotSignal("OTP", validator=digits_only)

        with pytest.raises(ValidationError):
            signal.supply("12ab")

        assert signal.is_set is False
        signal.supply("1234")
        assert signal.is_set is True
