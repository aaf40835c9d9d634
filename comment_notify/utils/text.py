"""Small text helpers for links and message bodies."""

import re

TAG_PATTERN = re.compile(r"<[^>]*>")


def append_hash_to_url(url: str, fragment) -> str:
    """Point ``url`` at ``fragment``, replacing any fragment already present.

    Example:
        >>> append_hash_to_url("https://x/y#old", "abc")
        'https://x/y#abc'
    """
    base = url.split("#", 1)[0]
    return f"{base}#{fragment if fragment is not None else ''}"


def strip_html(html_text) -> str:
    """Remove HTML tags and surrounding whitespace for plain-text channels."""
    if not html_text:
        return ""
    return TAG_PATTERN.sub("", html_text).strip()
