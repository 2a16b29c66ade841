"""
Input Sanitization Utilities

Normalizes caller-supplied identifiers before they are used as lookup keys.
"""

import html
import re
from typing import Any

import bleach

# <script> and <style> blocks are dropped together with their contents
SCRIPT_STYLE_RE = re.compile(r"<(script|style)[^>]*?>.*?</\1>", re.IGNORECASE | re.DOTALL)

# Percent-encoded octets such as %0A or %3C
OCTET_RE = re.compile(r"%[a-fA-F0-9]{2}")

# C0/C1 control characters, DEL included
CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f-\x9f]")

WHITESPACE_RE = re.compile(r"\s+")

# Upper bound on sanitize passes; each pass removes at least one layer of encoding
MAX_PASSES = 20


def _sanitize_once(text: str) -> str:
    text = html.unescape(text)
    text = SCRIPT_STYLE_RE.sub("", text)

    # Newlines and tabs become spaces before the control-character pass
    text = WHITESPACE_RE.sub(" ", text)
    text = CONTROL_CHARS_RE.sub("", text)

    # bleach escapes bare "&" and "<"; a tag revived by decoding goes in the next pass
    text = html.unescape(bleach.clean(text, tags=[], strip=True))
    text = OCTET_RE.sub("", text)

    return WHITESPACE_RE.sub(" ", text).strip()


def sanitize_text_field(value: Any) -> str:
    """
    Sanitize a single-line text field used as a storage key.

    Decodes HTML entities, then drops markup (script/style blocks with their
    content), percent-encoded octets and control characters, collapses
    whitespace and trims. The passes repeat until the text stops changing, so
    entity-encoded or percent-wrapped markup cannot come back as tags and
    sanitizing an already sanitized key returns it unchanged.

    Args:
        value: Any value; non-strings are converted with str()

    Returns:
        The sanitized string ("" for None)
    """
    if value is None:
        return ""

    text = value if isinstance(value, str) else str(value)

    for _ in range(MAX_PASSES):
        cleaned = _sanitize_once(text)
        if cleaned == text:
            break
        text = cleaned

    return text
