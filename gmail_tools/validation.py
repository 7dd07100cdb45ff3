"""
Input validation and sanitization helpers.

``sanitize_input`` is defense in depth against header and HTML injection in
outgoing mail. It only removes angle brackets; it is not an encoder.
"""

import re

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
ANGLE_BRACKETS = re.compile(r"[<>]")


def validate_email(email: str) -> bool:
    """Return True if ``email`` looks like ``local@domain.tail``."""
    if not isinstance(email, str):
        return False
    return EMAIL_PATTERN.fullmatch(email) is not None


def sanitize_input(text: str) -> str:
    """Strip angle brackets and surrounding whitespace."""
    return ANGLE_BRACKETS.sub("", text).strip()


def is_safe_filename(filename: str) -> bool:
    """
    Check that a caller-supplied download name is a bare file name.

    Rejects anything that could resolve outside the downloads directory:
    path separators, NUL bytes, and the ``.``/``..`` entries.
    """
    if not filename or filename in (".", ".."):
        return False
    return not any(ch in filename for ch in ("/", "\\", "\x00"))
