"""
Transaction scanner: walks the lines of a page and emits candidate rows.

The scanner is a small state machine. Header lines switch capture on, footer
lines switch it off, date-led lines open a pending row and plain text lines
that follow it are treated as wrapped memo text.
"""

import math
import re
from typing import List, Optional

import structlog

from ..config import get_settings
from ..models import DateContext, PendingRow, ScannerState, TextLine
from .amounts import AmountExtractor, TRAILING_AMOUNTS_PATTERN, apply_section_sign, has_amount_token
from .dates import count_date_tokens, extract_leading_date, normalize_date, strip_repeated_leading_date
from .headers import (
    infer_header_hints,
    infer_section_sign,
    is_footer_line,
    is_header_line,
    is_likely_noise_line,
    is_likely_summary_line,
    starts_with_non_continuation,
)
from .sanitizer import is_non_transaction_description, sanitize_description
from .text import normalize_spaces

logger = structlog.get_logger()

_SECONDARY_PARTIAL_DATE = re.compile(r"^\d{1,2}[/-]\d{1,2}\s+")


class TransactionScanner:
    """
    Per-page state machine producing finalized candidate rows.

    All carried state (capture flag, header hints, section sign, pending row)
    lives in a ScannerState created per page and passed to every step.
    """

    def __init__(
        self,
        amount_extractor: Optional[AmountExtractor] = None,
        description_margin: Optional[float] = None,
    ):
        settings = get_settings()
        self.amount_extractor = amount_extractor or AmountExtractor()
        self.description_margin = (
            settings.description_column_margin
            if description_margin is None else description_margin
        )

    def scan_page(
        self,
        lines: List[TextLine],
        date_context: Optional[DateContext],
    ) -> List[PendingRow]:
        """Scan one page and return its valid rows in page order."""
        state = ScannerState()
        for line in lines:
            self.step(state, line, date_context)
        self.flush(state)

        return [row for row in state.rows if self.is_valid_row(row)]

    def step(
        self,
        state: ScannerState,
        line: TextLine,
        date_context: Optional[DateContext],
    ) -> None:
        """Apply one line to the scanner state."""
        text = normalize_spaces(line.text)
        lower = text.lower()

        section_sign = infer_section_sign(text)
        if section_sign is not None:
            state.section_sign = section_sign

        if is_header_line(lower):
            state.capture = True
            state.hints = state.hints.merge(infer_header_hints(line))
            self.flush(state)
            return

        if is_footer_line(lower):
            state.capture = False
            self.flush(state)
            return

        date_token = extract_leading_date(text)
        if date_token and (state.capture or self._fallback_allowed(state, line, text)):
            self.flush(state)
            state.pending = self.parse_transaction_line(
                line, date_token, state, date_context
            )
            return

        if state.pending is not None and self.should_append_description(state, line):
            state.pending.append_description(text)

    def _fallback_allowed(self, state: ScannerState, line: TextLine, text: str) -> bool:
        # Known source of false positives on irregular layouts; kept for
        # statements that never print a recognisable column header.
        allowed = (
            not state.capture
            and has_amount_token(line.text)
            and count_date_tokens(text) == 1
            and not is_likely_summary_line(text)
        )
        if allowed:
            logger.debug("Opening row without header", page=line.page_number, text=text)
        return allowed

    def flush(self, state: ScannerState) -> None:
        """Finalize the pending row, if any."""
        row = state.pending
        state.pending = None
        if row is None:
            return

        description = sanitize_description(row.description, row.amount)
        if not description:
            return
        if is_non_transaction_description(description, row.amount):
            return

        state.rows.append(row.with_description(description))

    def parse_transaction_line(
        self,
        line: TextLine,
        date_token: str,
        state: ScannerState,
        date_context: Optional[DateContext],
    ) -> Optional[PendingRow]:
        """Build a pending row from a date-led line; None when it is unusable."""
        normalized = normalize_date(date_token, date_context)
        if normalized is None:
            return None

        start = line.text.find(date_token)
        remainder = line.text[start + len(date_token):].strip()
        remainder = strip_repeated_leading_date(remainder, normalized.normalized, date_context)
        if not remainder:
            return None

        amount = self.amount_extractor.extract(line, remainder, state.hints)
        if not amount.is_finite:
            return None

        description = TRAILING_AMOUNTS_PATTERN.sub("", remainder).strip()
        if not description:
            description = remainder.replace(amount.raw_token or "", "", 1).strip()
        description = normalize_spaces(_SECONDARY_PARTIAL_DATE.sub("", description))
        if not description:
            return None

        final_amount = amount.amount
        if not amount.explicit_sign:
            final_amount = apply_section_sign(final_amount, description, state.section_sign)

        description = sanitize_description(description, final_amount)
        if not description:
            return None
        if is_non_transaction_description(description, final_amount):
            return None

        return PendingRow(
            date=normalized.normalized,
            date_value=normalized.value,
            description=description,
            amount=final_amount,
            account=line.account,
        )

    def should_append_description(self, state: ScannerState, line: TextLine) -> bool:
        """True when a line reads as wrapped memo text of the pending row."""
        if not state.capture:
            return False

        text = normalize_spaces(line.text)
        if not text:
            return False
        if extract_leading_date(text):
            return False

        lower = text.lower()
        if is_header_line(lower) or is_footer_line(lower):
            return False
        if has_amount_token(line.text):
            return False
        if is_likely_noise_line(text):
            return False

        if state.hints.description_x is not None:
            if line.first_x < state.hints.description_x - self.description_margin:
                return False

        if starts_with_non_continuation(text):
            return False

        return True

    @staticmethod
    def is_valid_row(row: PendingRow) -> bool:
        return bool(
            row
            and row.date
            and row.description
            and row.amount is not None
            and math.isfinite(row.amount)
        )
