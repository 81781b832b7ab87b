"""
Description sanitization: strip layout leftovers from a raw statement memo.
"""

import re
from typing import Optional

from .amounts import almost_zero, parse_amount_token
from .text import normalize_spaces

_SUMMARY_TRAILERS = [
    re.compile(r"\s+CHECKING ACCOUNT MONTHLY SUMMARY.*$", re.I),
    re.compile(r"\s+SAVINGS ACCOUNT MONTHLY SUMMARY.*$", re.I),
]
# "ACCTVERIFY 1A2B ACCTVERIFY 1A2B" -> "ACCTVERIFY 1A2B"
_DUPLICATED_PAIR = re.compile(r"\b([A-Za-z]+\s+[A-Za-z0-9]*\d[A-Za-z0-9]*)\s+\1\b", re.I)
_TRAILING_DOT = re.compile(r"\s+\.\s*$")
_STRAY_R_BEFORE_ON = re.compile(r"\bR\s+on\b")
_TRAILING_STRAY_R = re.compile(r"\s+R$")

_TRAILING_MONEY = re.compile(r"(\$?\d{1,3}(?:,\d{3})*(?:\.\d{2}))\s*$")
_TRAILING_MONEY_WITH_ARTIFACT = re.compile(r"(\$?\d{1,3}(?:,\d{3})*(?:\.\d{2}))\s+\d{12,}\s*$")
AMOUNT_MATCH_EPSILON = 0.005

NON_TRANSACTION_DESCRIPTION_PATTERNS = [
    re.compile(r"prfd?\s+rwds\s+for\s+bus-?wire\s+fee\s+waiver", re.I),
]


def sanitize_description(description: str, amount: Optional[float]) -> str:
    """Return the cleaned memo, or "" when nothing usable is left."""
    cleaned = normalize_spaces(description)
    if not cleaned:
        return ""

    for trailer in _SUMMARY_TRAILERS:
        cleaned = trailer.sub("", cleaned)
    cleaned = _DUPLICATED_PAIR.sub(r"\1", cleaned)
    cleaned = _TRAILING_DOT.sub("", cleaned)
    cleaned = _STRAY_R_BEFORE_ON.sub(" on", cleaned)
    cleaned = _TRAILING_STRAY_R.sub("", cleaned)
    cleaned = cleaned.strip()

    cleaned = remove_trailing_repeated_amount(cleaned, amount)
    return normalize_spaces(cleaned)


def remove_trailing_repeated_amount(description: str, amount: Optional[float]) -> str:
    """Drop a trailing amount that repeats the row's own amount."""
    if amount is None:
        return description

    target = abs(amount)
    for pattern in (_TRAILING_MONEY, _TRAILING_MONEY_WITH_ARTIFACT):
        match = pattern.search(description)
        if not match:
            continue
        value = parse_amount_token(match.group(1))
        if value is not None and abs(abs(value) - target) <= AMOUNT_MATCH_EPSILON:
            return description[:match.start()].strip()

    return description


def is_non_transaction_description(description: str, amount: Optional[float]) -> bool:
    """Known zero-amount artifacts (e.g. fee-waiver notices) are not transactions."""
    if not almost_zero(amount):
        return False
    normalized = normalize_spaces(description)
    return any(p.search(normalized) for p in NON_TRANSACTION_DESCRIPTION_PATTERNS)
