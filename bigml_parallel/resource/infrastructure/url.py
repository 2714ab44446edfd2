"""Credential redaction for URLs and for any text that might embed one."""

import re
from urllib.parse import urlsplit, urlunsplit

_REDACTED = "*****"
_API_KEY_IN_TEXT = re.compile(r"(?<![A-Za-z0-9_])(api_key=)[^&\s'\"#]*")


def url_without_api_key(url: str) -> str:
    """Return ``url`` with the value of any ``api_key`` query parameter replaced.

    Every other character of the URL, including the order and encoding of the
    remaining query parameters, is left untouched.
    """
    parts = urlsplit(url)
    if not parts.query:
        return url
    pairs = [
        f"api_key={_REDACTED}" if pair.partition("=")[0] == "api_key" else pair
        for pair in parts.query.split("&")
    ]
    return urlunsplit(parts._replace(query="&".join(pairs)))


def redact_api_key(text: str) -> str:
    """Replace every ``api_key=...`` value found anywhere in ``text``."""
    return _API_KEY_IN_TEXT.sub(rf"\g<1>{_REDACTED}", text)
