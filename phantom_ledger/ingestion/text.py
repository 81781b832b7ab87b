"""Small string helpers shared by the ingestion stages."""

import re

_WHITESPACE = re.compile(r"\s+")
_NON_LETTERS = re.compile(r"[^a-z]")


def normalize_spaces(value) -> str:
    """Collapse runs of whitespace and trim."""
    if value is None:
        return ""
    return _WHITESPACE.sub(" ", str(value)).strip()


def compact_letters(value) -> str:
    """Lowercase letters only; tolerates headers printed as 'D e s c r i p t i o n'."""
    if value is None:
        return ""
    return _NON_LETTERS.sub("", str(value).lower())
