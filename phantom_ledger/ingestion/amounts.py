"""
Amount extraction and sign resolution for candidate rows.

Amounts come either from the fragment sitting under a known debit/credit/amount
column, or from the amount-shaped tokens left after the leading date.
"""

import math
import re
from typing import List, Optional

import structlog

from ..config import get_settings
from ..models import AmountResult, HeaderHints, TextFragment, TextLine
from .text import normalize_spaces

logger = structlog.get_logger()

# (1,234.56) | -$12.00 | 500.00 CR ; never starts inside another number
AMOUNT_TOKEN_SOURCE = (
    r"(?<![\d.,])\(?-?(?:\$\s*)?(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2}(?!\d)\)?"
    r"(?:\s*(?:CR|DR)\b)?"
)
AMOUNT_TOKEN_PATTERN = re.compile(AMOUNT_TOKEN_SOURCE, re.I)
TRAILING_AMOUNTS_PATTERN = re.compile(rf"(?:\s*{AMOUNT_TOKEN_SOURCE})+$", re.I)

# CR/DR may sit directly against the digits, as in 12.00CR
_SIGN_MARKER = re.compile(r"(?<![A-Za-z])(?:CR|DR)\b", re.I)
_DR_MARKER = re.compile(r"(?<![A-Za-z])DR\b", re.I)
_MARKER_STRIP = _SIGN_MARKER
_NUMERIC_NOISE = re.compile(r"[\s$,()]")
_LEADING_MINUS = re.compile(r"^\s*-")

STRONG_POSITIVE = re.compile(
    r"(return|reverse|reversal|deposit|credit|payment from|transfer from"
    r"|online transfer from|zelle from|wire in|interest)",
    re.I,
)
STRONG_NEGATIVE = re.compile(
    r"(payment to|transfer to|online transfer to|zelle to|withdrawal|debit|fee|purchase"
    r"|wire out|service charge|overdraft|irs usataxpymt|taxpymt|harland clarke"
    r"|^\d{3,6}\s+check\b|\bcheck\b)",
    re.I,
)

DEBIT = "debit"
CREDIT = "credit"

# Two column hits closer than this to each other are treated as ambiguous
AMBIGUOUS_COLUMN_DELTA = 8.0


def almost_zero(value: Optional[float]) -> bool:
    return value is not None and abs(value) < 0.00001


def get_amount_tokens(text: str) -> List[str]:
    return [m.group(0) for m in AMOUNT_TOKEN_PATTERN.finditer(str(text or ""))]


def has_amount_token(text: str) -> bool:
    return AMOUNT_TOKEN_PATTERN.search(str(text or "")) is not None


def is_amount_fragment(fragment: TextFragment) -> bool:
    return AMOUNT_TOKEN_PATTERN.fullmatch(fragment.text.strip()) is not None


def token_has_explicit_sign(raw_token: Optional[str]) -> bool:
    token = str(raw_token or "")
    return (
        bool(_SIGN_MARKER.search(token))
        or "(" in token
        or ")" in token
        or bool(_LEADING_MINUS.match(token))
    )


def parse_amount_token(raw_token: Optional[str], force_sign: Optional[str] = None) -> Optional[float]:
    """
    Parse an amount token to a signed float.

    DR, parentheses or a leading minus make the natural value negative.
    `force_sign` ("debit" / "credit") overrides the natural sign.
    """
    token = str(raw_token or "").strip()
    if not token:
        return None

    is_negative = (
        bool(_DR_MARKER.search(token))
        or ("(" in token and ")" in token)
        or bool(_LEADING_MINUS.match(token))
    )

    cleaned = _NUMERIC_NOISE.sub("", _MARKER_STRIP.sub("", token))
    try:
        absolute = abs(float(cleaned))
    except ValueError:
        return None
    if not math.isfinite(absolute):
        return None

    absolute = round(absolute, 2)
    if force_sign == DEBIT:
        return -absolute
    if force_sign == CREDIT:
        return absolute
    return -absolute if is_negative else absolute


def nearest_fragment(fragments: List[TextFragment], target_x: float) -> Optional[TextFragment]:
    best = None
    best_distance = math.inf
    for fragment in fragments:
        distance = abs(fragment.x - target_x)
        if distance < best_distance:
            best = fragment
            best_distance = distance
    return best


def apply_section_sign(amount: Optional[float], description: str, section_sign: int) -> Optional[float]:
    """Keyword evidence first, then the active section banner, else unchanged."""
    if amount is None:
        return amount

    normalized = normalize_spaces(description).lower()
    if STRONG_POSITIVE.search(normalized):
        return abs(amount)
    if STRONG_NEGATIVE.search(normalized):
        return -abs(amount)
    if not section_sign:
        return amount
    return -abs(amount) if section_sign < 0 else abs(amount)


class AmountExtractor:
    """
    Picks the amount of a transaction line.

    Column placement is tried first (only when the header has no running
    balance column); otherwise amount tokens in the remainder text decide.
    """

    def __init__(
        self,
        column_threshold: Optional[float] = None,
        amount_column_threshold: Optional[float] = None,
    ):
        settings = get_settings()
        self.column_threshold = (
            settings.debit_credit_column_threshold
            if column_threshold is None else column_threshold
        )
        self.amount_column_threshold = (
            settings.amount_column_threshold
            if amount_column_threshold is None else amount_column_threshold
        )

    def extract(self, line: TextLine, remainder: str, hints: HeaderHints) -> AmountResult:
        by_columns = None if hints.has_balance else self.from_columns(line, hints)
        if by_columns is not None:
            return by_columns
        return self.from_tokens(remainder, hints)

    def from_columns(self, line: TextLine, hints: HeaderHints) -> Optional[AmountResult]:
        """Amount from the fragment under the debit/credit/amount column."""
        candidates = [f for f in line.fragments if is_amount_fragment(f)]
        if not candidates:
            return None

        if hints.debit_x is not None or hints.credit_x is not None:
            result = self._from_debit_credit_columns(candidates, hints)
            if result is not None:
                return result
            # Ambiguous placement: let the token method decide
            if self._debit_credit_ambiguous(candidates, hints):
                return None

        if hints.amount_x is not None:
            match = nearest_fragment(candidates, hints.amount_x)
            if match and abs(match.x - hints.amount_x) <= self.amount_column_threshold:
                return AmountResult(
                    amount=parse_amount_token(match.text),
                    raw_token=match.text,
                    explicit_sign=token_has_explicit_sign(match.text),
                )

        return None

    def _column_matches(self, candidates: List[TextFragment], hints: HeaderHints):
        debit = nearest_fragment(candidates, hints.debit_x) if hints.debit_x is not None else None
        credit = nearest_fragment(candidates, hints.credit_x) if hints.credit_x is not None else None
        debit_within = debit is not None and abs(debit.x - hints.debit_x) <= self.column_threshold
        credit_within = credit is not None and abs(credit.x - hints.credit_x) <= self.column_threshold
        return debit, credit, debit_within, credit_within

    def _debit_credit_ambiguous(self, candidates: List[TextFragment], hints: HeaderHints) -> bool:
        debit, credit, debit_within, credit_within = self._column_matches(candidates, hints)
        if not (debit_within and credit_within):
            return False
        debit_distance = abs(debit.x - hints.debit_x)
        credit_distance = abs(credit.x - hints.credit_x)
        return debit is credit and abs(debit_distance - credit_distance) < AMBIGUOUS_COLUMN_DELTA

    def _from_debit_credit_columns(
        self,
        candidates: List[TextFragment],
        hints: HeaderHints,
    ) -> Optional[AmountResult]:
        debit, credit, debit_within, credit_within = self._column_matches(candidates, hints)

        if debit_within and not credit_within:
            return self._forced(debit, DEBIT)
        if credit_within and not debit_within:
            return self._forced(credit, CREDIT)
        if not (debit_within and credit_within):
            return None

        debit_distance = abs(debit.x - hints.debit_x)
        credit_distance = abs(credit.x - hints.credit_x)

        if debit is credit and abs(debit_distance - credit_distance) < AMBIGUOUS_COLUMN_DELTA:
            return None
        if debit_distance < credit_distance:
            return self._forced(debit, DEBIT)
        if credit_distance < debit_distance:
            return self._forced(credit, CREDIT)

        debit_value = parse_amount_token(debit.text, DEBIT)
        credit_value = parse_amount_token(credit.text, CREDIT)
        if almost_zero(debit_value) and not almost_zero(credit_value):
            return AmountResult(amount=credit_value, raw_token=credit.text, explicit_sign=True)
        return AmountResult(amount=debit_value, raw_token=debit.text, explicit_sign=True)

    @staticmethod
    def _forced(fragment: TextFragment, side: str) -> AmountResult:
        return AmountResult(
            amount=parse_amount_token(fragment.text, side),
            raw_token=fragment.text,
            explicit_sign=True,
        )

    def from_tokens(self, remainder: str, hints: HeaderHints) -> AmountResult:
        """Amount from the amount-shaped tokens of the line remainder."""
        tokens = get_amount_tokens(remainder)
        if not tokens:
            return AmountResult(amount=None)

        if hints.has_debit_credit:
            working = tokens
            if hints.has_balance and len(working) > 1:
                working = working[:-1]

            if len(working) >= 2:
                debit_token, credit_token = working[0], working[1]
                debit_value = parse_amount_token(debit_token, DEBIT)
                credit_value = parse_amount_token(credit_token, CREDIT)

                if almost_zero(debit_value) and not almost_zero(credit_value):
                    return AmountResult(amount=credit_value, raw_token=credit_token, explicit_sign=True)
                return AmountResult(amount=debit_value, raw_token=debit_token, explicit_sign=True)

        if hints.has_balance and len(tokens) >= 2:
            candidate = tokens[-2]
        else:
            candidate = tokens[-1]

        return AmountResult(
            amount=parse_amount_token(candidate),
            raw_token=candidate,
            explicit_sign=token_has_explicit_sign(candidate),
        )
