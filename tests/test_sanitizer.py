"""
Tests for memo sanitization.
"""

import pytest

from phantom_ledger.ingestion.sanitizer import (
    is_non_transaction_description,
    remove_trailing_repeated_amount,
    sanitize_description,
)


class TestSanitizeDescription:
    """Test suite for description sanitization."""

    @pytest.mark.parametrize("raw, expected", [
        ("  COFFEE   SHOP  ", "COFFEE SHOP"),
        ("ACCTVERIFY 1A2B ACCTVERIFY 1A2B", "ACCTVERIFY 1A2B"),
        ("DEPOSIT CHECKING ACCOUNT MONTHLY SUMMARY Beginning Balance", "DEPOSIT"),
        ("PAYROLL ACME .", "PAYROLL ACME"),
        ("Card Purchase R on 01/02", "Card Purchase on 01/02"),
        ("Card Purchase Whole Foods R", "Card Purchase Whole Foods"),
    ])
    def test_layout_leftovers_removed(self, raw, expected):
        assert sanitize_description(raw, 10.0) == expected

    def test_empty_input(self):
        assert sanitize_description("", 1.0) == ""
        assert sanitize_description(None, 1.0) == ""

    def test_trailing_repeat_of_own_amount_is_dropped(self):
        assert sanitize_description("COFFEE SHOP 4.50", -4.50) == "COFFEE SHOP"
        assert remove_trailing_repeated_amount("COFFEE SHOP $4.50 123456789012", 4.50) == "COFFEE SHOP"

    def test_other_trailing_amounts_are_kept(self):
        assert sanitize_description("COFFEE SHOP 4.50", 5.00) == "COFFEE SHOP 4.50"
        assert remove_trailing_repeated_amount("COFFEE SHOP 4.50", None) == "COFFEE SHOP 4.50"


class TestNonTransactionDescription:
    """Test suite for zero-amount artifacts."""

    def test_fee_waiver_notice(self):
        assert is_non_transaction_description("Prfd Rwds for Bus-Wire Fee Waiver", 0.0)

    def test_requires_zero_amount(self):
        assert not is_non_transaction_description("Prfd Rwds for Bus-Wire Fee Waiver", 15.0)

    def test_other_zero_amount_rows_are_kept(self):
        assert not is_non_transaction_description("Interest Paid", 0.0)
