"""Sanitization for untrusted provider and model text."""

import re

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")
# Same set minus \n and \t, for multi-line commentary
_CONTROL_CHARS_KEEP_LINES = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")


def sanitize_text(
    text: str | None,
    max_length: int = 200,
    keep_newlines: bool = False,
) -> str | None:
    """
    Remove control characters and truncate.

    Apply to display names from the provider and to narrative text
    returned by the language model (with keep_newlines=True).

    Args:
        text: Text to sanitize (may be None)
        max_length: Maximum length before truncation
        keep_newlines: Preserve line breaks and tabs

    Returns:
        Sanitized text or None if input was None
    """
    if text is None:
        return None

    pattern = _CONTROL_CHARS_KEEP_LINES if keep_newlines else _CONTROL_CHARS
    text = pattern.sub("", text)

    if len(text) > max_length:
        text = text[:max_length] + "..."

    return text.strip()
