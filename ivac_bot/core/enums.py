"""Centralized enum definitions for IVAC Bot."""

from enum import Enum


class WorkflowState(str, Enum):
    """States of the booking workflow, in the order they are visited."""

    INIT = "INIT"
    AUTH_STARTED = "AUTH_STARTED"
    MOBILE_VERIFIED = "MOBILE_VERIFIED"
    PASSWORD_SUBMITTED = "PASSWORD_SUBMITTED"
    AWAITING_OTP = "AWAITING_OTP"
    OTP_VERIFIED = "OTP_VERIFIED"
    APPLICATION_SUBMITTED = "APPLICATION_SUBMITTED"
    PERSONAL_SUBMITTED = "PERSONAL_SUBMITTED"
    SLOT_SELECTED = "SLOT_SELECTED"
    AWAITING_CHALLENGE = "AWAITING_CHALLENGE"
    CHALLENGE_SOLVED = "CHALLENGE_SOLVED"
    PAYMENT_INITIATED = "PAYMENT_INITIATED"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        """True for COMPLETE and FAILED."""
        return self in (WorkflowState.COMPLETE, WorkflowState.FAILED)

    @property
    def is_suspension_point(self) -> bool:
        """True for states that wait on external input."""
        return self in (WorkflowState.AWAITING_OTP, WorkflowState.AWAITING_CHALLENGE)

    @classmethod
    def values(cls) -> list:
        """Return list of all enum values."""
        return [e.value for e in cls]
