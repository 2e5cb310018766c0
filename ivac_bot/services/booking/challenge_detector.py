"""Detection of a human-verification widget on a fetched page."""

from html.parser import HTMLParser
from typing import Optional

CHALLENGE_WIDGET_CLASS = "g-recaptcha"
CHALLENGE_SITEKEY_ATTR = "data-sitekey"


class _ChallengeParser(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.found = False
        self.site_key: Optional[str] = None

    def handle_starttag(self, tag, attrs):
        if self.found:
            return
        attributes = dict(attrs)
        classes = (attributes.get("class") or "").split()
        if CHALLENGE_WIDGET_CLASS in classes or CHALLENGE_SITEKEY_ATTR in attributes:
            self.found = True
            self.site_key = attributes.get(CHALLENGE_SITEKEY_ATTR)


def find_challenge_widget(body: Optional[str]) -> Optional[str]:
    """
    Look for a reCAPTCHA-style widget.

    Args:
        body: HTML document

    Returns:
        The widget's site key ("" when the widget has none), or None when absent
    """
    if not body:
        return None
    parser = _ChallengeParser()
    parser.feed(body)
    parser.close()
    if not parser.found:
        return None
    return parser.site_key or ""


def has_challenge_widget(body: Optional[str]) -> bool:
    """True when the page carries a challenge widget."""
    return find_challenge_widget(body) is not None
