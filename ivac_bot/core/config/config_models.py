"""Pydantic configuration models - single source of truth for a run's inputs.

Every model is frozen: a RunConfig is built once (from YAML or code) and
handed to the workflow engine, which never mutates it.
"""

from datetime import datetime
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator

from ...constants import DEFAULT_BASE_URL, OTP, Headers, PaymentMethods, Retries, Timeouts

_FROZEN = ConfigDict(frozen=True, str_strip_whitespace=True, extra="forbid")


class LoginCredentials(BaseModel):
    """Portal login credentials."""

    model_config = _FROZEN

    mobile_number: str = Field(min_length=1)
    password: SecretStr

    @field_validator("mobile_number")
    @classmethod
    def validate_mobile(cls, v: str) -> str:
        """Mobile number must be digits, optionally prefixed with '+'."""
        digits = v[1:] if v.startswith("+") else v
        if not digits.isdigit():
            raise ValueError("mobile_number must contain only digits")
        return v


class ApplicationRequest(BaseModel):
    """Fixed identifiers for the visa application."""

    model_config = _FROZEN

    highcom: str = Field(default="1", min_length=1)
    web_file_id: str = Field(min_length=1)
    ivac_id: str = Field(min_length=1)
    visa_type: str = Field(min_length=1)
    family_count: int = Field(default=0, ge=0)
    visit_purpose: str = Field(min_length=1)
    appointment_date: str = Field(description="Date to query slots for (YYYY-MM-DD)")

    @field_validator("appointment_date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        """Ensure appointment_date is an ISO calendar date."""
        try:
            datetime.strptime(v, "%Y-%m-%d")
        except ValueError:
            raise ValueError("appointment_date must use YYYY-MM-DD format")
        return v


class FamilyMember(BaseModel):
    """A family member travelling with the primary applicant."""

    model_config = _FROZEN

    name: str = Field(min_length=1)
    web_file_no: str = Field(min_length=1)


class PersonalInfo(BaseModel):
    """Primary applicant contact details and accompanying family."""

    model_config = _FROZEN

    full_name: str = Field(min_length=1)
    email: str
    phone: str = Field(min_length=1)
    family_members: Tuple[FamilyMember, ...] = Field(default_factory=tuple)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Validate email format."""
        if "@" not in v:
            raise ValueError("Invalid email format")
        return v


class PaymentMethod(BaseModel):
    """Payment method descriptor submitted with the payment request."""

    model_config = _FROZEN

    name: str = Field(default=PaymentMethods.VISA_NAME)
    slug: str = Field(default=PaymentMethods.VISA_SLUG)
    link: str = Field(default=PaymentMethods.VISA_LINK)


class WorkflowSettings(BaseModel):
    """Tuning for retries, timeouts and suspension points."""

    model_config = _FROZEN

    retry_attempts: int = Field(default=Retries.MAX_ATTEMPTS, ge=1, le=10)
    retry_delay: float = Field(default=Retries.DELAY_SECONDS, ge=0)
    request_timeout: float = Field(default=Timeouts.HTTP_REQUEST, gt=0)
    otp_timeout: float = Field(default=Timeouts.OTP_WAIT, gt=0)
    challenge_timeout: float = Field(default=Timeouts.CHALLENGE_WAIT, gt=0)
    challenge_probe_timeout: float = Field(default=Timeouts.CHALLENGE_PROBE, gt=0)
    otp_length: int = Field(default=OTP.LENGTH, ge=4, le=8)
    max_otp_attempts: int = Field(default=Retries.MAX_OTP_ATTEMPTS, ge=1, le=10)
    user_agent: str = Field(default=Headers.USER_AGENT)


class RunConfig(BaseModel):
    """Immutable configuration for one workflow run."""

    model_config = _FROZEN

    base_url: str = Field(default=DEFAULT_BASE_URL)
    login: LoginCredentials
    application: ApplicationRequest
    personal: PersonalInfo
    payment: PaymentMethod = Field(default_factory=PaymentMethod)
    workflow: WorkflowSettings = Field(default_factory=WorkflowSettings)

    @field_validator("base_url")
    @classmethod
    def validate_https(cls, v: str) -> str:
        """Ensure URL is HTTPS and has a host."""
        if not v.startswith("https://"):
            raise ValueError("base_url must use HTTPS")
        if not urlparse(v).netloc:
            raise ValueError("base_url must have a valid domain")
        return v.rstrip("/")

    @model_validator(mode="after")
    def check_family_count(self) -> "RunConfig":
        """family_count must match the number of listed family members."""
        members = len(self.personal.family_members)
        if self.application.family_count != members:
            raise ValueError(
                f"application.family_count ({self.application.family_count}) does not match "
                f"the {members} family member(s) listed under personal.family_members"
            )
        return self

    @property
    def host(self) -> str:
        """Portal host name."""
        return urlparse(self.base_url).netloc

    def url(self, path: str) -> str:
        """Build an absolute portal URL from an endpoint path."""
        return f"{self.base_url}{path}"

    def with_appointment_date(self, appointment_date: str) -> "RunConfig":
        """Return a copy of this config targeting another appointment date."""
        application = ApplicationRequest.model_validate(
            {**self.application.model_dump(), "appointment_date": appointment_date}
        )
        return self.model_copy(update={"application": application})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunConfig":
        """Create from a plain dictionary (e.g. parsed YAML)."""
        return cls.model_validate(data)

    def masked_summary(self) -> Dict[str, Optional[str]]:
        """Small, log-safe description of the run."""
        from ...utils.masking import mask_email, mask_phone

        return {
            "host": self.host,
            "mobile": mask_phone(self.login.mobile_number),
            "email": mask_email(self.personal.email),
            "web_file_id": self.application.web_file_id,
            "family_members": str(len(self.personal.family_members)),
            "appointment_date": self.application.appointment_date,
        }
