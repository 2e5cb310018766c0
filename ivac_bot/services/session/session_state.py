"""Per-run session state threaded through the workflow steps."""

import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from ..booking.slot_selector import Slot


@dataclass
class SessionState:
    """
    Mutable record of one workflow run.

    Attributes:
        run_id: Unique run identifier (used for log correlation)
        token: Current CSRF token, refreshed whenever a page is fetched
        cookie_jar: Opaque cookie store handed to every transport call
        otp_verified: Whether the OTP step succeeded
        hash_param: Opaque value returned by OTP verification
        recaptcha_token: Solved challenge token, if a challenge was shown
        selected_date: Appointment date slots were requested for
        selected_slot: Slot chosen by the slot selector
        payment_url: Redirect URL returned by the payment endpoint
        otp_attempts: Number of OTP values submitted for verification
    """

    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    token: Optional[str] = None
    cookie_jar: Any = None
    otp_verified: bool = False
    hash_param: Optional[str] = None
    recaptcha_token: Optional[str] = None
    selected_date: Optional[str] = None
    selected_slot: Optional[Slot] = None
    payment_url: Optional[str] = None
    otp_attempts: int = 0
