"""
Document-level identifiers: account numbers, business identity and the
statement period.
"""

import re
from collections import Counter
from typing import Iterable, List, Optional

from ..models import DocumentMetadata, StatementPeriod, StatementRow, TextLine
from .dates import normalize_date
from .text import normalize_spaces

_ACCOUNT_TOKEN = r"([Xx*\d\-]{4,})"
EXPLICIT_ACCOUNT_PATTERN = re.compile(
    r"(?:account|acct)\s*(?:number|no\.?|#)?\s*[:\-]?\s*" + _ACCOUNT_TOKEN, re.I
)
TYPED_ACCOUNT_PATTERN = re.compile(
    r"\b(?:checking|savings|business\s+checking|money\s*market)\b.*?" + _ACCOUNT_TOKEN, re.I
)

BUSINESS_NUMBER_PATTERNS = [
    re.compile(
        r"\b(?:business|company|client|customer)\s*(?:number|no\.?|#|id)\s*[:\-]?\s*([A-Za-z0-9\-*]{4,})",
        re.I,
    ),
    re.compile(r"\b(?:tax\s*id|ein|federal\s*id)\s*[:\-]?\s*([A-Za-z0-9\-]{4,})", re.I),
]
BUSINESS_NAME_PATTERNS = [
    re.compile(r"\b(?:business|company)\s*name\s*[:\-]?\s*([A-Za-z0-9&.,'/\-\s]{3,80})", re.I),
    re.compile(r"\bstatement\s+for\s+([A-Za-z0-9&.,'/\-\s]{3,80})", re.I),
]

_PERIOD_DATE = r"(\d{1,2}[/-]\d{1,2}[/-]\d{2,4})"
PERIOD_PATTERNS = [
    re.compile(
        r"\bstatement\s+period\s*[:\-]?\s*" + _PERIOD_DATE
        + r"\s*(?:to|-|through|thru)\s*" + _PERIOD_DATE,
        re.I,
    ),
    re.compile(
        r"\bfrom\s+" + _PERIOD_DATE + r"\s*(?:to|-|through|thru)\s*" + _PERIOD_DATE,
        re.I,
    ),
]

_IDENTIFIER_NOISE = re.compile(r"[^A-Za-z0-9*]")
_REJECTED_BUSINESS_NAME = re.compile(
    r"^(?:page\s+\d+|member fdic|account summary|ending balance)$", re.I
)


def normalize_account_token(raw: Optional[str]) -> Optional[str]:
    """Compact an account token; None unless it has 4+ chars with a digit or mask."""
    compact = _IDENTIFIER_NOISE.sub("", str(raw or ""))
    if len(compact) < 4:
        return None
    if not any(ch.isdigit() for ch in compact) and "*" not in compact:
        return None
    return compact


def detect_account_label(text: str) -> Optional[str]:
    """Account label printed on a line, if any."""
    for pattern in (EXPLICIT_ACCOUNT_PATTERN, TYPED_ACCOUNT_PATTERN):
        match = pattern.search(text)
        if match:
            normalized = normalize_account_token(match.group(1))
            if normalized:
                return normalized
    return None


def assign_account_labels(lines: Iterable[TextLine]) -> None:
    """Carry the most recent account label forward onto every line."""
    current = None
    for line in lines:
        label = detect_account_label(line.text)
        if label:
            current = label
        line.account = current


def normalize_business_number(value: Optional[str]) -> Optional[str]:
    normalized = normalize_account_token(value)
    return normalized.upper() if normalized else None


def normalize_business_name(value: Optional[str]) -> Optional[str]:
    cleaned = normalize_spaces(value).replace("|", "").strip()
    if len(cleaned) < 3:
        return None
    if _REJECTED_BUSINESS_NAME.match(cleaned):
        return None
    return cleaned.upper()


def rank_candidates(counts: Counter) -> List[str]:
    """Most frequent first, ties alphabetical."""
    return [value for value, _ in sorted(counts.items(), key=lambda item: (-item[1], item[0]))]


def _collect(texts: List[str], patterns, normalize) -> List[str]:
    counts: Counter = Counter()
    for text in texts:
        for pattern in patterns:
            for match in pattern.finditer(text):
                candidate = normalize(match.group(1))
                if candidate:
                    counts[candidate] += 1
    return rank_candidates(counts)


def collect_account_candidates(texts: List[str], rows: Iterable[StatementRow]) -> List[str]:
    counts: Counter = Counter()
    for text in texts:
        for match in EXPLICIT_ACCOUNT_PATTERN.finditer(text):
            candidate = normalize_account_token(match.group(1))
            if candidate:
                counts[candidate] += 1
    for row in rows:
        candidate = normalize_account_token(row.account)
        if candidate:
            counts[candidate] += 1
    return rank_candidates(counts)


def detect_statement_period(texts: List[str]) -> Optional[StatementPeriod]:
    for text in texts:
        for pattern in PERIOD_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            start = normalize_date(match.group(1))
            end = normalize_date(match.group(2))
            if start and end:
                return StatementPeriod(start=start.normalized, end=end.normalized)
    return None


def collect_document_metadata(
    lines: Iterable[TextLine],
    rows: Iterable[StatementRow],
) -> DocumentMetadata:
    texts = [normalize_spaces(line.text) for line in lines]
    return DocumentMetadata(
        account_candidates=collect_account_candidates(texts, list(rows)),
        business_number_candidates=_collect(
            texts, BUSINESS_NUMBER_PATTERNS, normalize_business_number
        ),
        business_name_candidates=_collect(
            texts, BUSINESS_NAME_PATTERNS, normalize_business_name
        ),
        statement_period=detect_statement_period(texts),
    )
