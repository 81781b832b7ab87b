"""
Line classification: column headers, footers, section banners and noise.
"""

import re
from typing import Optional

from ..models import HeaderHints, TextLine
from .dates import extract_leading_date
from .text import compact_letters, normalize_spaces

MAX_HEADER_LENGTH = 150

_DATE_WORD = re.compile(r"\bdate\b")
_DESCRIPTION_WORDS = re.compile(r"(description|memo|transaction|details|narrative|activity)")
_AMOUNT_WORDS = re.compile(r"(amount|debit|credit|withdrawal|deposit|balance)")
_DEBIT_WORDS = re.compile(r"(debit|withdrawal)")
_CREDIT_WORDS = re.compile(r"(credit|deposit)")
_AMOUNT_WORD = re.compile(r"\bamount\b")
_BALANCE_WORD = re.compile(r"\bbalance\b")

FOOTER_PATTERNS = [
    re.compile(r"ending balance", re.I),
    re.compile(r"beginning balance", re.I),
    re.compile(r"account summary", re.I),
    re.compile(r"daily balance", re.I),
    re.compile(r"total (?:debits|credits|fees|withdrawals|deposits|payments)", re.I),
    re.compile(r"page\s+\d+(?:\s+of\s+\d+)?", re.I),
    re.compile(r"continued on (?:the )?next page", re.I),
    re.compile(r"member fdic", re.I),
    re.compile(r"^§?\s*page\s+\d+\s+of\s+\d+", re.I),
    re.compile(r"account security you can see", re.I),
    re.compile(r"security meter level", re.I),
    re.compile(r"to learn more, visit", re.I),
    re.compile(r"message and data rates may apply", re.I),
    re.compile(r"monthly service fee summary", re.I),
]

_SUMMARY_LINE = re.compile(
    r"(daily balance|ending daily|balance summary|beginning balance|new balance|account summary)",
    re.I,
)
_NOISE_MARKER = re.compile(r"^(\*start\*|\*end\*)")
_CONTINUED_MARKER = re.compile(r"^(?:c\s*o\s*n\s*t\s*i\s*n\s*u\s*e\s*d|continued)$", re.I)
_NOISE_BANNER = re.compile(
    r"(account security you can see|security meter level|message and data rates may apply)",
    re.I,
)
_NON_CONTINUATION_PREFIX = re.compile(r"^(?:total|subtotal|balance|page\s+\d+)", re.I)

# Section banners
_DEPOSIT_KEYWORDS = re.compile(r"(deposit|credit|addition|interest payment|interest earned)", re.I)
_DEBIT_KEYWORDS = re.compile(r"(withdrawal|debit|fee|service charge|payment to|wire out)", re.I)
_WITHDRAWAL_SECTIONS = re.compile(
    r"(atm\s*&\s*debit\s*card\s*withdrawals|electronic withdrawals"
    r"|other withdrawals, debits and service charges|fees(?: section)?|service charges)",
    re.I,
)
_DEPOSIT_SECTIONS = re.compile(
    r"(deposits and additions|deposits, credits and interest|deposits and credits)",
    re.I,
)


def is_header_line(lower_text: str) -> bool:
    """True when a line names a date, a description and an amount column."""
    if not lower_text or len(lower_text) > MAX_HEADER_LENGTH:
        return False

    compact = compact_letters(lower_text)
    has_date = bool(_DATE_WORD.search(lower_text)) or "date" in compact
    has_description = (
        bool(_DESCRIPTION_WORDS.search(lower_text))
        or "description" in compact
        or "transactionhistory" in compact
    )
    has_amount = (
        bool(_AMOUNT_WORDS.search(lower_text))
        or any(word in compact for word in ("amount", "debit", "credit", "balance"))
    )
    return has_date and has_description and has_amount


def is_footer_line(lower_text: str) -> bool:
    return any(pattern.search(lower_text) for pattern in FOOTER_PATTERNS)


def is_likely_summary_line(text: str) -> bool:
    return bool(_SUMMARY_LINE.search(text))


def is_likely_noise_line(text: str) -> bool:
    """Layout leftovers that must never extend a transaction description."""
    normalized = normalize_spaces(text).lower()
    if not normalized:
        return True
    if _NOISE_MARKER.match(normalized):
        return True
    if _CONTINUED_MARKER.match(normalized):
        return True
    return bool(_NOISE_BANNER.search(normalized))


def starts_with_non_continuation(text: str) -> bool:
    return bool(_NON_CONTINUATION_PREFIX.match(text))


def infer_header_hints(line: TextLine) -> HeaderHints:
    """Column flags from the whole line, x-positions from each fragment."""
    lower = normalize_spaces(line.text.lower())
    compact = compact_letters(lower)

    has_debit_credit = bool(_DEBIT_WORDS.search(lower)) and bool(_CREDIT_WORDS.search(lower))
    if not has_debit_credit and "creditsdebits" in compact:
        has_debit_credit = True
    has_balance = bool(_BALANCE_WORD.search(lower)) or "balance" in compact

    positions = {
        "date_x": None,
        "description_x": None,
        "debit_x": None,
        "credit_x": None,
        "amount_x": None,
        "balance_x": None,
    }

    for fragment in line.fragments:
        text = normalize_spaces(fragment.text.lower())
        text_compact = compact_letters(text)

        matches = {
            "date_x": bool(_DATE_WORD.search(text)) or "date" in text_compact,
            "description_x": (
                bool(_DESCRIPTION_WORDS.search(text)) or "description" in text_compact
            ),
            "debit_x": bool(_DEBIT_WORDS.search(text)) or "debit" in text_compact,
            "credit_x": bool(_CREDIT_WORDS.search(text)) or "credit" in text_compact,
            "amount_x": bool(_AMOUNT_WORD.search(text)) or "amount" in text_compact,
            "balance_x": bool(_BALANCE_WORD.search(text)) or "balance" in text_compact,
        }
        for key, matched in matches.items():
            if matched and positions[key] is None:
                positions[key] = fragment.x

    return HeaderHints(
        has_debit_credit=has_debit_credit,
        has_balance=has_balance,
        **positions,
    )


def infer_section_sign(text: str) -> Optional[int]:
    """
    Sign implied by a section banner.

    None: the line says nothing about the section
    0: both deposit and withdrawal wording (reset to neutral)
    -1 / +1: withdrawal / deposit section
    """
    normalized = normalize_spaces(text).lower()
    if not normalized or extract_leading_date(normalized):
        return None

    has_deposit = bool(_DEPOSIT_KEYWORDS.search(normalized))
    has_debit = bool(_DEBIT_KEYWORDS.search(normalized))

    if has_deposit and has_debit:
        return 0
    if _WITHDRAWAL_SECTIONS.search(normalized):
        return -1
    if _DEPOSIT_SECTIONS.search(normalized):
        return 1
    if not has_deposit and not has_debit:
        return None
    return -1 if has_debit else 1
