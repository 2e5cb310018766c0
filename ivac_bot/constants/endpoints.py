"""IVAC portal endpoint paths and request headers."""

from typing import Final

DEFAULT_BASE_URL: Final[str] = "https://payment.ivacbd.com"


class Endpoints:
    """Endpoint paths, relative to the portal base URL."""

    HOME: Final[str] = "/"
    LOGIN_PAGE: Final[str] = "/login-auth"
    MOBILE_VERIFY: Final[str] = "/mobile-verify"
    LOGIN_SUBMIT: Final[str] = "/login-auth-submit"
    OTP_SEND: Final[str] = "/pay-otp-sent"
    OTP_VERIFY: Final[str] = "/pay-otp-verify"
    APPLICATION_INFO: Final[str] = "/application-info-submit"
    PERSONAL_INFO: Final[str] = "/personal-info-submit"
    SLOT_TIME: Final[str] = "/pay-slot-time"
    PAY_NOW: Final[str] = "/paynow"


class PageMarkers:
    """URL fragments identifying portal pages after a redirect."""

    LOGIN: Final[str] = "login"
    OTP: Final[str] = "login-otp"


class Headers:
    """Default headers sent with every portal request."""

    USER_AGENT: Final[str] = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    FORM_POST: Final[dict] = {
        "Content-Type": "application/x-www-form-urlencoded",
        "X-Requested-With": "XMLHttpRequest",
    }
