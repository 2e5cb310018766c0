"""Custom exception classes for IVAC Bot."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


class IvacBotError(Exception):
    """Base exception for IVAC Bot."""

    def __init__(
        self, message: str, recoverable: bool = False, details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize IVAC Bot error.

        Args:
            message: Error message
            recoverable: Whether the error is recoverable with retry
            details: Additional error details
        """
        self.message = message
        self.recoverable = recoverable
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        # Name of the workflow state the error was raised in (set by the engine)
        self.state: Optional[str] = None
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
            "state": self.state,
            "details": self.details,
            "timestamp": self.timestamp,
        }


# Transport Errors
class TransportError(IvacBotError):
    """Network failure or timeout while talking to the portal."""

    def __init__(
        self,
        message: str = "Transport error occurred",
        url: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.url = url
        details = dict(details or {})
        if url:
            details["url"] = url
        super().__init__(message, recoverable=True, details=details)


# Workflow Errors
class WorkflowError(IvacBotError):
    """Base class for workflow step failures."""

    def __init__(
        self,
        message: str = "Workflow step failed",
        recoverable: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable, details)


class TokenMissingError(WorkflowError):
    """Security token could not be located on the fetched page."""

    def __init__(self, message: str = "CSRF token not found on login page"):
        super().__init__(message)


class MobileVerificationError(WorkflowError):
    """Mobile number verification was rejected."""

    def __init__(self, message: str = "Mobile verification failed", status: Optional[int] = None):
        self.status = status
        super().__init__(message, details={"status": status} if status is not None else {})


class PasswordAuthError(WorkflowError):
    """Password submission was rejected."""

    def __init__(
        self, message: str = "Password authentication failed", status: Optional[int] = None
    ):
        self.status = status
        super().__init__(message, details={"status": status} if status is not None else {})


class OtpSendError(WorkflowError):
    """The portal refused to send (or resend) an OTP."""

    def __init__(self, message: str = "Failed to send OTP"):
        super().__init__(message)


class InvalidOtpError(WorkflowError):
    """OTP verification failed; recoverable only with a fresh OTP value."""

    def __init__(self, message: str = "Invalid OTP", attempts: Optional[int] = None):
        self.attempts = attempts
        super().__init__(
            message,
            recoverable=True,
            details={"attempts": attempts} if attempts is not None else {},
        )


class ApplicationSubmissionError(WorkflowError):
    """Application info submission failed."""

    def __init__(
        self, message: str = "Application info submission failed", status: Optional[int] = None
    ):
        self.status = status
        super().__init__(message, details={"status": status} if status is not None else {})


class PersonalSubmissionError(WorkflowError):
    """Personal info submission failed."""

    def __init__(
        self, message: str = "Personal info submission failed", status: Optional[int] = None
    ):
        self.status = status
        super().__init__(message, details={"status": status} if status is not None else {})


class NoSlotAvailableError(WorkflowError):
    """No usable appointment slot for the requested date."""

    def __init__(
        self, message: str = "No appointment slots available", date: Optional[str] = None
    ):
        self.date = date
        if date:
            message += f" for {date}"
        super().__init__(message, details={"date": date} if date else {})


class PaymentError(WorkflowError):
    """Payment initiation failed."""

    def __init__(self, message: str = "Payment failed"):
        super().__init__(message)


class InvalidTransitionError(WorkflowError):
    """A step was invoked from a state that does not lead to it."""

    def __init__(self, step: str, current: str, expected: str):
        super().__init__(
            f"Cannot run '{step}' from state {current} (expected {expected})",
            details={"step": step, "current": current, "expected": expected},
        )


# Suspension Errors
class SuspensionError(IvacBotError):
    """Base class for suspension point failures."""

    def __init__(
        self,
        message: str = "Suspension point failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable=False, details=details)


class SuspensionTimeoutError(SuspensionError):
    """External input did not arrive within the configured timeout."""

    def __init__(self, signal_name: str = "input", timeout: Optional[float] = None):
        self.signal_name = signal_name
        self.timeout = timeout
        message = f"Timed out waiting for {signal_name}"
        if timeout is not None:
            message += f" after {timeout:g}s"
        super().__init__(message, details={"signal": signal_name, "timeout": timeout})


class ChallengeRequiredTimeout(SuspensionTimeoutError):
    """A challenge widget was shown but no solved token arrived in time."""

    def __init__(self, timeout: Optional[float] = None):
        super().__init__("challenge token", timeout)


class SuspensionCancelledError(SuspensionError):
    """The wait for external input was cancelled."""

    def __init__(self, signal_name: str = "input", message: Optional[str] = None):
        self.signal_name = signal_name
        super().__init__(
            message or f"Wait for {signal_name} was cancelled", details={"signal": signal_name}
        )


class RunCancelledError(SuspensionCancelledError):
    """The run was cancelled; no further portal request is sent."""

    def __init__(self, step: str = "next step"):
        self.step = step
        super().__init__("workflow run", message=f"Run cancelled before {step}")
        self.details["step"] = step


class SignalAlreadyFulfilledError(SuspensionError):
    """A one-shot signal was supplied twice."""

    def __init__(self, signal_name: str = "input"):
        self.signal_name = signal_name
        super().__init__(f"{signal_name} was already supplied", details={"signal": signal_name})


# Validation / Configuration Errors
class ValidationError(IvacBotError):
    """Input validation error."""

    def __init__(self, message: str = "Validation error", field: Optional[str] = None):
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
        """
        self.field = field
        if field:
            message = f"Validation error for field '{field}': {message}"
        super().__init__(message, recoverable=False, details={"field": field} if field else {})


class ConfigurationError(IvacBotError):
    """Configuration error occurred."""

    def __init__(
        self,
        message: str = "Configuration error",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable=False, details=details)
