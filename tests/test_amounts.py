"""
Tests for amount tokens, sign resolution and column placement.
"""

import pytest

from phantom_ledger.ingestion.amounts import (
    AmountExtractor,
    apply_section_sign,
    get_amount_tokens,
    parse_amount_token,
    token_has_explicit_sign,
)
from phantom_ledger.models import HeaderHints


@pytest.fixture
def extractor():
    return AmountExtractor(column_threshold=64.0, amount_column_threshold=90.0)


@pytest.fixture
def debit_credit_hints():
    return HeaderHints(
        has_debit_credit=True,
        date_x=40.0,
        description_x=80.0,
        debit_x=300.0,
        credit_x=400.0,
    )


class TestParseAmountToken:
    """Test suite for amount token parsing."""

    @pytest.mark.parametrize("token, expected", [
        ("500.00", 500.0),
        ("1,234.56", 1234.56),
        ("(1,234.56)", -1234.56),
        ("-$12.00", -12.0),
        ("$ 12.00", 12.0),
        ("500.00 DR", -500.0),
        ("500.00 CR", 500.0),
        ("500.00DR", -500.0),
        ("500.00CR", 500.0),
    ])
    def test_natural_sign(self, token, expected):
        assert parse_amount_token(token) == expected

    def test_forced_sign_overrides_natural_sign(self):
        assert parse_amount_token("500.00", "debit") == -500.0
        assert parse_amount_token("(500.00)", "credit") == 500.0

    def test_unparseable_tokens(self):
        assert parse_amount_token("") is None
        assert parse_amount_token(None) is None
        assert parse_amount_token("abc") is None

    def test_explicit_sign_markers(self):
        assert token_has_explicit_sign("12.00 CR")
        assert token_has_explicit_sign("12.00CR")
        assert token_has_explicit_sign("12.00DR")
        assert token_has_explicit_sign("(12.00)")
        assert token_has_explicit_sign("-12.00")
        assert not token_has_explicit_sign("12.00")

    def test_tokens_need_two_decimals(self):
        assert get_amount_tokens("CHECK 1234 50.00 1,200.00") == ["50.00", "1,200.00"]
        assert get_amount_tokens("REF 99812") == []

    def test_tokens_carry_no_leading_whitespace(self):
        assert get_amount_tokens("DEPOSIT ADJ 12.00DR") == ["12.00DR"]
        assert get_amount_tokens("FEE $ 3.00") == ["$ 3.00"]


class TestSectionSign:
    """Test suite for keyword and section based signs."""

    def test_strong_positive_keyword_wins_over_section(self):
        assert apply_section_sign(-250.0, "Zelle payment from JANE DOE", -1) == 250.0

    def test_strong_negative_keyword_wins_over_section(self):
        assert apply_section_sign(45.10, "PURCHASE HOME DEPOT", 1) == -45.10

    def test_section_sign_applies_without_keywords(self):
        assert apply_section_sign(4.50, "COFFEE SHOP", -1) == -4.50
        assert apply_section_sign(-4.50, "COFFEE SHOP", 1) == 4.50

    def test_neutral_section_leaves_amount(self):
        assert apply_section_sign(10.0, "MISC", 0) == 10.0
        assert apply_section_sign(None, "MISC", -1) is None


class TestAmountExtractor:
    """Test suite for the amount extractor."""

    def test_debit_column_forces_negative(self, extractor, debit_credit_hints, line_factory):
        line = line_factory([("01/15/2024", 40), ("WIRE TO JOHN SMITH", 80), ("500.00", 305)])

        result = extractor.extract(line, "WIRE TO JOHN SMITH 500.00", debit_credit_hints)

        assert result.amount == -500.0
        assert result.explicit_sign

    def test_credit_column_forces_positive(self, extractor, debit_credit_hints, line_factory):
        line = line_factory([("01/15/2024", 40), ("WIRE FROM ACME", 80), ("500.00", 402)])

        result = extractor.extract(line, "WIRE FROM ACME 500.00", debit_credit_hints)

        assert result.amount == 500.0

    def test_amount_column_keeps_natural_sign(self, extractor, line_factory):
        hints = HeaderHints(amount_x=400.0)
        line = line_factory([("01/12/2024", 40), ("HOME DEPOT", 80), ("-45.10", 450)])

        result = extractor.extract(line, "HOME DEPOT -45.10", hints)

        assert result.amount == -45.10
        assert result.explicit_sign

    def test_ambiguous_column_falls_back_to_tokens(self, extractor, line_factory):
        hints = HeaderHints(debit_x=300.0, credit_x=310.0)
        line = line_factory([("01/15/2024", 40), ("TRANSFER", 80), ("75.00", 305)])

        assert extractor.from_columns(line, hints) is None
        result = extractor.extract(line, "TRANSFER 75.00", hints)
        assert result.amount == 75.0
        assert not result.explicit_sign

    def test_balance_column_skips_column_placement(self, extractor, line_factory):
        hints = HeaderHints(has_balance=True, amount_x=300.0, balance_x=400.0)
        line = line_factory([("01/15/2024", 40), ("COFFEE", 80), ("4.50", 300), ("995.50", 400)])

        result = extractor.extract(line, "COFFEE 4.50 995.50", hints)

        assert result.amount == 4.50
        assert result.raw_token == "4.50"

    def test_debit_credit_tokens_with_balance(self, extractor):
        hints = HeaderHints(has_debit_credit=True, has_balance=True)

        debit = extractor.from_tokens("WIRE 500.00 0.00 1,000.00", hints)
        credit = extractor.from_tokens("DEPOSIT 0.00 250.00 1,250.00", hints)

        assert debit.amount == -500.0
        assert credit.amount == 250.0

    def test_cr_marker_is_positive(self, extractor):
        result = extractor.from_tokens("REFUND 12.00 CR", HeaderHints())

        assert result.amount == 12.0
        assert result.explicit_sign

    def test_attached_dr_marker_is_explicit(self, extractor):
        result = extractor.from_tokens("DEPOSIT ADJ 12.00DR", HeaderHints())

        assert result.amount == -12.0
        assert result.raw_token == "12.00DR"
        assert result.explicit_sign

    def test_no_tokens(self, extractor):
        assert not extractor.from_tokens("NO AMOUNT HERE", HeaderHints()).is_finite
