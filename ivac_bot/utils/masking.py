"""Utility functions for masking sensitive data in logs and outputs."""

from typing import Any, Dict, Mapping, Optional, Set

from ..constants import LogLimits

# Form fields whose values are never logged
SECRET_FORM_FIELDS: frozenset = frozenset(
    {"_token", "password", "otp", "hash_param", "g-recaptcha-response"}
)

# Form fields holding phone numbers
PHONE_FORM_FIELDS: frozenset = frozenset({"mobile_no", "pho_ne", "phone", "mobile_number"})

# Form fields holding email addresses
EMAIL_FORM_FIELDS: frozenset = frozenset({"email", "email_name"})


def mask_email(email: str) -> str:
    """
    Mask email address for logging purposes.

    Example: user@example.com -> u***@e***.com

    Args:
        email: Email address to mask

    Returns:
        Masked email address
    """
    if not email or "@" not in email:
        return "***"

    parts = email.split("@")
    if len(parts) != 2:
        return "***"

    local, domain = parts

    # Mask local part: keep first character
    masked_local = local[0] + "***" if local else "***"

    # Mask domain: keep first character before dot
    domain_parts = domain.split(".")
    if len(domain_parts) >= 2 and domain_parts[0]:
        masked_domain = domain_parts[0][0] + "***." + ".".join(domain_parts[1:])
    else:
        masked_domain = "***"

    return f"{masked_local}@{masked_domain}"


def mask_phone(phone: str) -> str:
    """
    Mask phone number for logging purposes.

    Example: 01712345678 -> ***5678

    Args:
        phone: Phone number to mask

    Returns:
        Masked phone number
    """
    if not phone or len(phone) < 4:
        return "***"

    if phone.startswith("+"):
        return "+" + "***" + phone[-4:]
    return "***" + phone[-4:]


def mask_password(_password: str) -> str:
    """Completely mask password."""
    return "********"


def mask_otp(otp: str) -> str:
    """
    Mask OTP code completely.

    Args:
        otp: OTP code to mask

    Returns:
        Completely masked OTP (all asterisks)
    """
    if not otp:
        return "****"
    return "*" * len(otp)


def mask_token(token: Optional[str]) -> str:
    """
    Mask a security token, keeping the first four characters.

    Example: abcdef123456 -> abcd***
    """
    if not token:
        return "<none>"
    if len(token) <= 8:
        return "***"
    return token[:4] + "***"


def truncate_url(url: str, limit: int = LogLimits.URL_MAX_LENGTH) -> str:
    """Truncate a URL for request/response log lines."""
    if len(url) <= limit:
        return url
    return url[:limit] + "..."


def mask_form(
    fields: Mapping[str, Any], secret_fields: Optional[Set[str]] = None
) -> Dict[str, Any]:
    """
    Mask sensitive values in a form-field mapping for logging.

    Args:
        fields: Field name to value mapping
        secret_fields: Fields to mask completely (defaults to SECRET_FORM_FIELDS)

    Returns:
        New dictionary with masked values
    """
    secrets = SECRET_FORM_FIELDS if secret_fields is None else secret_fields
    masked: Dict[str, Any] = {}

    for key, value in fields.items():
        if key in secrets:
            masked[key] = "********"
        elif key in PHONE_FORM_FIELDS and isinstance(value, str):
            masked[key] = mask_phone(value)
        elif key in EMAIL_FORM_FIELDS and isinstance(value, str):
            masked[key] = mask_email(value)
        else:
            masked[key] = value

    return masked
