"""CSRF token extraction from portal pages.

Lookup order: <meta name="csrf-token">, <input name="_token">, then an inline
script assignment `var csrf_token = "..."`. The first non-empty value wins.
"""

import re
from html.parser import HTMLParser
from typing import List, Optional

CSRF_META_NAME = "csrf-token"
CSRF_INPUT_NAME = "_token"
CSRF_SCRIPT_PATTERN = re.compile(r"""var\s+csrf_token\s*=\s*["'](.*?)["']""")


class _TokenParser(HTMLParser):
    """Collect token candidates from meta tags, inputs and inline scripts."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.meta_token: Optional[str] = None
        self.input_token: Optional[str] = None
        self.scripts: List[str] = []
        self._in_script = False
        self._script_parts: List[str] = []

    def handle_starttag(self, tag, attrs):
        attributes = dict(attrs)
        if tag == "meta" and self.meta_token is None:
            if attributes.get("name") == CSRF_META_NAME:
                self.meta_token = (attributes.get("content") or "").strip() or None
        elif tag == "input" and self.input_token is None:
            if attributes.get("name") == CSRF_INPUT_NAME:
                self.input_token = (attributes.get("value") or "").strip() or None
        elif tag == "script":
            self._in_script = True
            self._script_parts = []

    def handle_endtag(self, tag):
        if tag == "script" and self._in_script:
            self.scripts.append("".join(self._script_parts))
            self._in_script = False

    def handle_data(self, data):
        if self._in_script:
            self._script_parts.append(data)


def _script_token(scripts: List[str]) -> Optional[str]:
    for script in scripts:
        match = CSRF_SCRIPT_PATTERN.search(script)
        if match and match.group(1).strip():
            return match.group(1).strip()
    return None


def extract_token(body: Optional[str]) -> Optional[str]:
    """
    Locate the CSRF token in a page body.

    Args:
        body: HTML document

    Returns:
        Token value, or None if the page carries none
    """
    if not body:
        return None

    parser = _TokenParser()
    parser.feed(body)
    parser.close()

    return parser.meta_token or parser.input_token or _script_token(parser.scripts)
