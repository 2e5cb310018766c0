"""Payment method defaults."""

from typing import Final


class PaymentMethods:
    """Payment method descriptors accepted by the portal."""

    VISA_NAME: Final[str] = "VISA"
    VISA_SLUG: Final[str] = "visacard"
    VISA_LINK: Final[str] = "https://securepay.sslcommerz.com/gwprocess/v4/image/gw1/visa.png"


class OTP:
    """OTP format."""

    LENGTH: Final[int] = 6
