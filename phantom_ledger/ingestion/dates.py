"""
Date parsing and the statement-wide date context.

Statements often print transaction dates as M/D only; the year comes from
the latest fully-qualified date found anywhere in the document.
"""

import re
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional

import structlog

from ..models import DateContext, NormalizedDate, TextLine
from .text import normalize_spaces

logger = structlog.get_logger()

# Patterns recognised at the start of a transaction line
LEADING_DATE_PATTERNS = [
    re.compile(r"^\d{1,2}[/-]\d{1,2}[/-]\d{2,4}"),           # 01/15/2024, 1-15-24
    re.compile(r"^\d{1,2}[/-]\d{1,2}(?![/-]\d)"),            # 01/15
    re.compile(r"^[A-Za-z]{3,9}\s+\d{1,2},\s+\d{4}"),        # Jan 15, 2024
    re.compile(r"^\d{8}"),                                   # 20240115
]
INLINE_DATE_PATTERN = re.compile(r"\b\d{1,2}[/-]\d{1,2}(?:[/-]\d{2,4})?\b")
PARTIAL_DATE_PATTERN = re.compile(r"^(\d{1,2})[/-](\d{1,2})$")

FULL_NUMERIC_DATE_PATTERN = re.compile(r"\b\d{1,2}[/-]\d{1,2}[/-]\d{2,4}\b")
LONG_DATE_PATTERN = re.compile(
    r"\b(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[A-Za-z]*\s+\d{1,2},\s+\d{4}\b"
)

FULL_DATE_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%y",
    "%m-%d-%Y",
    "%m-%d-%y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%Y%m%d",
)

CANONICAL_FORMAT = "%m/%d/%Y"


def to_sort_value(value: date) -> int:
    """Milliseconds since the epoch at UTC midnight of `value`."""
    moment = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def _normalized(value: date) -> NormalizedDate:
    return NormalizedDate(
        normalized=value.strftime(CANONICAL_FORMAT),
        value=to_sort_value(value),
    )


def parse_full_date(raw: str) -> Optional[date]:
    """Parse a fully-qualified date against the accepted formats."""
    for fmt in FULL_DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    return None


def resolve_partial_date(raw: str, context: Optional[DateContext]) -> Optional[date]:
    """
    Resolve an M/D date using the anchor year and month.

    A month more than six months away from the anchor belongs to the
    neighbouring year (a December statement listing January activity).
    """
    match = PARTIAL_DATE_PATTERN.match(str(raw or "").strip())
    if not match:
        return None

    month = int(match.group(1))
    day = int(match.group(2))

    today = date.today()
    year = context.anchor_year if context else today.year
    if context and context.anchor_month:
        if month - context.anchor_month > 6:
            year -= 1
        elif context.anchor_month - month > 6:
            year += 1

    try:
        return date(year, month, day)
    except ValueError:
        return None


def normalize_date(
    raw: str,
    context: Optional[DateContext] = None,
) -> Optional[NormalizedDate]:
    """Normalize a date token to MM/DD/YYYY; None when it cannot be parsed."""
    text = str(raw or "").strip()
    if not text:
        return None

    if PARTIAL_DATE_PATTERN.match(text):
        resolved = resolve_partial_date(text, context)
        return _normalized(resolved) if resolved else None

    parsed = parse_full_date(text)
    if parsed is None:
        return None
    return _normalized(parsed)


def infer_date_context(
    lines: Iterable[TextLine],
    today: Optional[date] = None,
) -> DateContext:
    """Anchor on the latest fully-qualified date in the document."""
    found: List[date] = []

    for line in lines:
        text = normalize_spaces(line.text)
        candidates = FULL_NUMERIC_DATE_PATTERN.findall(text) + LONG_DATE_PATTERN.findall(text)
        for candidate in candidates:
            parsed = parse_full_date(candidate)
            if parsed:
                found.append(parsed)

    if not found:
        today = today or date.today()
        logger.info("No full dates found, anchoring on today", year=today.year, month=today.month)
        return DateContext(anchor_year=today.year, anchor_month=today.month)

    anchor = max(found)
    logger.debug("Inferred date context", anchor=anchor.isoformat(), candidates=len(found))
    return DateContext(anchor_year=anchor.year, anchor_month=anchor.month)


def extract_leading_date(text: str) -> Optional[str]:
    """Return the raw date token a line starts with, if any."""
    trimmed = str(text or "").lstrip()
    for pattern in LEADING_DATE_PATTERNS:
        match = pattern.match(trimmed)
        if match:
            return match.group(0)
    return None


def count_date_tokens(text: str) -> int:
    return len(INLINE_DATE_PATTERN.findall(str(text or "")))


def strip_repeated_leading_date(
    text: str,
    normalized_date: str,
    context: Optional[DateContext],
) -> str:
    """Drop a second date column (e.g. posting date) equal to the transaction date."""
    remainder = normalize_spaces(text)
    leading = extract_leading_date(remainder)
    if not leading:
        return remainder

    parsed = normalize_date(leading, context)
    if parsed is None or parsed.normalized != normalized_date:
        return remainder

    return normalize_spaces(remainder[len(leading):])
