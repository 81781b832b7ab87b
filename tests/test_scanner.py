"""
Tests for the per-page transaction scanner.
"""

import pytest

from phantom_ledger.ingestion.scanner import TransactionScanner
from phantom_ledger.models import DateContext, ScannerState

JANUARY_2024 = DateContext(anchor_year=2024, anchor_month=1)


@pytest.fixture
def scanner():
    return TransactionScanner()


@pytest.fixture
def amount_header(line_factory):
    return line_factory([("Date", 40), ("Description", 80), ("Amount", 400)], y=740)


class TestTransactionScanner:
    """Test suite for the scanner state machine."""

    def test_debit_column_row_is_negative(self, scanner, line_factory):
        lines = [
            line_factory(
                [("Header", 0), ("Date", 40), ("Description", 80), ("Debit", 300), ("Credit", 400)],
                y=740,
            ),
            line_factory([("01/15/2024", 40), ("WIRE TO JOHN SMITH", 80), ("500.00", 305)], y=720),
        ]

        rows = scanner.scan_page(lines, JANUARY_2024)

        assert len(rows) == 1
        assert rows[0].date == "01/15/2024"
        assert rows[0].description == "WIRE TO JOHN SMITH"
        assert rows[0].amount == -500.0

    def test_continuation_lines_extend_description(self, scanner, amount_header, line_factory):
        lines = [
            amount_header,
            line_factory([("01/15/2024", 40), ("ONLINE TRANSFER TO SAVINGS", 80), ("100.00", 400)], y=720),
            line_factory([("REF 99812 CONF", 80)], y=710),
            line_factory([("Note", 20)], y=700),
            line_factory([("01/16/2024", 40), ("COFFEE SHOP", 80), ("4.50", 400)], y=690),
        ]

        rows = scanner.scan_page(lines, JANUARY_2024)

        assert [row.description for row in rows] == [
            "ONLINE TRANSFER TO SAVINGS REF 99812 CONF",
            "COFFEE SHOP",
        ]
        assert rows[0].amount == -100.0
        assert rows[1].amount == 4.50

    def test_footer_stops_continuation(self, scanner, amount_header, line_factory):
        lines = [
            amount_header,
            line_factory([("01/15/2024", 40), ("COFFEE SHOP", 80), ("4.50", 400)], y=720),
            line_factory([("Ending Balance", 40), ("1,392.90", 400)], y=710),
            line_factory([("Thank you for banking with us", 80)], y=700),
        ]

        rows = scanner.scan_page(lines, JANUARY_2024)

        assert len(rows) == 1
        assert rows[0].description == "COFFEE SHOP"

    def test_section_banner_sets_sign(self, scanner, amount_header, line_factory):
        lines = [
            amount_header,
            line_factory([("Electronic Withdrawals", 40)], y=730),
            line_factory([("01/10", 40), ("COFFEE SHOP", 80), ("4.50", 400)], y=720),
        ]

        rows = scanner.scan_page(lines, JANUARY_2024)

        assert rows[0].amount == -4.50
        assert rows[0].date == "01/10/2024"

    def test_unusable_rows_are_dropped(self, scanner, amount_header, line_factory):
        lines = [
            amount_header,
            line_factory([("01/15/2024 PENDING AUTHORIZATION", 40)], y=720),
            line_factory([("13/45/2024 BAD DATE 5.00", 40)], y=710),
            line_factory([("01/15/2024 PRFD RWDS FOR BUS-WIRE FEE WAIVER 0.00", 40)], y=700),
        ]

        assert scanner.scan_page(lines, JANUARY_2024) == []

    def test_secondary_partial_date_is_removed(self, scanner, amount_header, line_factory):
        lines = [amount_header, line_factory([("1/20 1/21 Service Charge 12.00", 40)], y=720)]

        rows = scanner.scan_page(lines, JANUARY_2024)

        assert rows[0].description == "Service Charge"
        assert rows[0].amount == -12.0

    def test_rows_without_header_use_fallback(self, scanner, line_factory):
        lines = [
            line_factory([("01/05/2024 Coffee Shop 4.50", 40)], y=720),
            line_factory([("01/06/2024 no amount here", 40)], y=710),
        ]

        rows = scanner.scan_page(lines, JANUARY_2024)

        assert len(rows) == 1
        assert rows[0].description == "Coffee Shop"

    def test_row_carries_line_account(self, scanner, amount_header, line_factory):
        row_line = line_factory([("01/15/2024", 40), ("COFFEE SHOP", 80), ("4.50", 400)], y=720)
        row_line.account = "000123456789"

        rows = scanner.scan_page([amount_header, row_line], JANUARY_2024)

        assert rows[0].account == "000123456789"

    def test_header_starts_capture_and_footer_ends_it(self, scanner, amount_header, line_factory):
        state = ScannerState()

        scanner.step(state, amount_header, JANUARY_2024)
        assert state.capture
        assert state.hints.amount_x == 400

        scanner.step(state, line_factory([("Ending Balance 10.00", 40)]), JANUARY_2024)
        assert not state.capture

    @pytest.mark.parametrize("banner, memo, expected", [
        ("Deposits and Additions", "REVERSAL ADJ (12.00)", -12.0),
        ("Deposits and Additions", "ADJUSTMENT 12.00 DR", -12.0),
        ("Deposits and Additions", "ADJUSTMENT -12.00", -12.0),
        ("Electronic Withdrawals", "ADJUSTMENT 12.00 CR", 12.0),
        ("Electronic Withdrawals", "ADJUSTMENT 12.00CR", 12.0),
        ("Deposits and Additions", "ADJUSTMENT 12.00DR", -12.0),
    ])
    def test_explicit_sign_ignores_section(self, scanner, amount_header, line_factory, banner, memo, expected):
        lines = [
            amount_header,
            line_factory([(banner, 40)], y=730),
            line_factory([(f"01/10/2024 {memo}", 40)], y=720),
        ]

        rows = scanner.scan_page(lines, JANUARY_2024)

        assert rows[0].amount == expected
