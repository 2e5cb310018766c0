"""Core infrastructure module."""

from .enums import WorkflowState
from .exceptions import (
    # Base exception
    IvacBotError,
    # Transport
    TransportError,
    # Workflow steps
    WorkflowError,
    TokenMissingError,
    MobileVerificationError,
    PasswordAuthError,
    OtpSendError,
    InvalidOtpError,
    ApplicationSubmissionError,
    PersonalSubmissionError,
    NoSlotAvailableError,
    PaymentError,
    InvalidTransitionError,
    # Suspension points
    SuspensionError,
    SuspensionTimeoutError,
    ChallengeRequiredTimeout,
    SuspensionCancelledError,
    RunCancelledError,
    SignalAlreadyFulfilledError,
    # Validation / configuration
    ValidationError,
    ConfigurationError,
)
from .logger import run_id_ctx, setup_structured_logging
from .retry import RetryController

__all__ = [
    "WorkflowState",
    "IvacBotError",
    "TransportError",
    "WorkflowError",
    "TokenMissingError",
    "MobileVerificationError",
    "PasswordAuthError",
    "OtpSendError",
    "InvalidOtpError",
    "ApplicationSubmissionError",
    "PersonalSubmissionError",
    "NoSlotAvailableError",
    "PaymentError",
    "InvalidTransitionError",
    "SuspensionError",
    "SuspensionTimeoutError",
    "ChallengeRequiredTimeout",
    "SuspensionCancelledError",
    "RunCancelledError",
    "SignalAlreadyFulfilledError",
    "ValidationError",
    "ConfigurationError",
    "run_id_ctx",
    "setup_structured_logging",
    "RetryController",
]
