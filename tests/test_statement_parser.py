"""
Tests for the per-file statement parser and the PDF decoder.
"""

import pytest

from phantom_ledger.ingestion import StatementParseError, StatementParser
from phantom_ledger.ingestion.pdf_text import _DECODE_LOCK, PdfTextDecoder
from phantom_ledger.ingestion.statement_parser import NO_TRANSACTIONS_WARNING
from phantom_ledger.models import FailureReason, TextFragment


@pytest.fixture
def parser():
    return StatementParser()


class TestPdfTextDecoder:
    """Test suite for the text-layer decoder."""

    def test_fragments_use_bottom_left_origin(self, statement_pdf):
        pages = PdfTextDecoder().decode(statement_pdf, "statement.pdf")

        assert len(pages) == 1
        fragments = pages[0].fragments
        assert fragments[0].text.startswith("First Coastal Bank")
        # First line sits near the top, so its baseline is high in user space
        assert fragments[0].y > fragments[-1].y
        assert fragments[0].y == pytest.approx(pages[0].height - 60, abs=1)

    def test_empty_file(self):
        with pytest.raises(StatementParseError) as exc_info:
            PdfTextDecoder().decode(b"", "empty.pdf")
        assert exc_info.value.code == FailureReason.EMPTY_FILE
        assert exc_info.value.message == "File is empty."

    def test_password_protected(self, encrypted_pdf):
        with pytest.raises(StatementParseError) as exc_info:
            PdfTextDecoder().decode(encrypted_pdf, "locked.pdf")
        assert exc_info.value.code == FailureReason.PASSWORD_PROTECTED

    def test_unreadable_bytes(self):
        with pytest.raises(StatementParseError) as exc_info:
            PdfTextDecoder().decode(b"this is not a pdf", "broken.pdf")
        assert exc_info.value.code == FailureReason.OPEN_FAILED

    def test_decode_lock_is_released_after_failure(self, statement_pdf):
        decoder = PdfTextDecoder()
        with pytest.raises(StatementParseError):
            decoder.decode(b"this is not a pdf", "broken.pdf")

        assert not _DECODE_LOCK.locked()
        assert len(decoder.decode(statement_pdf, "statement.pdf")) == 1
        assert not _DECODE_LOCK.locked()


class TestStatementParser:
    """Test suite for the statement parser."""

    def test_parses_statement(self, parser, statement_pdf):
        parsed = parser.parse_bytes(statement_pdf, "statement.pdf")

        assert [(r.date, r.amount, r.description) for r in parsed.rows] == [
            ("01/05/2024", 250.0, "Zelle payment from JANE DOE Conf# 12345"),
            ("01/12/2024", -45.10, "PURCHASE 0112 HOME DEPOT 4521"),
            ("01/20/2024", -12.0, "Service Charge"),
        ]
        assert parsed.warnings == []
        assert parsed.page_count == 1
        assert parsed.metadata.primary_account == "000123456789"
        assert parsed.metadata.statement_period.to_dict() == {
            "start": "01/01/2024",
            "end": "01/31/2024",
        }
        assert all(row.account == "000123456789" for row in parsed.rows)

    def test_rows_sort_values_follow_dates(self, parser, statement_pdf):
        parsed = parser.parse_bytes(statement_pdf, "statement.pdf")

        values = [row.date_value for row in parsed.rows]
        assert values == sorted(values)

    def test_image_based_pdf(self, parser, blank_pdf):
        with pytest.raises(StatementParseError) as exc_info:
            parser.parse_bytes(blank_pdf, "scan.pdf")
        assert exc_info.value.code == FailureReason.IMAGE_BASED

    def test_page_without_transactions_warns(self, parser):
        fragments = [
            TextFragment(text="Welcome to your statement from First Coastal Bank", x=40, y=700),
            TextFragment(text="Please review your account activity carefully", x=40, y=680),
        ]

        parsed = parser.parse_pages([fragments], "notice.pdf")

        assert parsed.rows == []
        assert parsed.warnings == [
            "Page 1: no transactions recognized.",
            NO_TRANSACTIONS_WARNING,
        ]

    def test_blank_page_in_multi_page_file_is_skipped(self, parser):
        fragments = [
            TextFragment(text="Date", x=40, y=720),
            TextFragment(text="Description", x=80, y=720),
            TextFragment(text="Amount", x=400, y=720),
            TextFragment(text="03/02/2024", x=40, y=700),
            TextFragment(text="COFFEE SHOP", x=80, y=700),
            TextFragment(text="4.50", x=400, y=700),
        ]

        parsed = parser.parse_pages([[], fragments], "two-pages.pdf")

        assert parsed.page_count == 2
        assert parsed.warnings == []
        assert [(r.date, r.amount) for r in parsed.rows] == [("03/02/2024", 4.50)]
