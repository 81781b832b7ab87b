"""
Tests for line reconstruction from positioned fragments.
"""

import pytest

from phantom_ledger.ingestion.layout import LayoutReconstructor
from phantom_ledger.models import TextFragment


@pytest.fixture
def layout():
    return LayoutReconstructor(line_tolerance=2.4, space_gap_threshold=2.5)


class TestLayoutReconstructor:
    """Test suite for layout reconstruction."""

    def test_orders_lines_top_to_bottom(self, layout):
        fragments = [
            TextFragment(text="second", x=10, y=680),
            TextFragment(text="first", x=10, y=700),
            TextFragment(text="third", x=10, y=660),
        ]

        lines = layout.build_lines(fragments, page_number=1)

        assert [line.text for line in lines] == ["first", "second", "third"]
        assert all(line.page_number == 1 for line in lines)

    def test_groups_fragments_within_tolerance(self, layout):
        fragments = [
            TextFragment(text="500.00", x=300, y=699.5),
            TextFragment(text="01/15/2024", x=10, y=700.0),
            TextFragment(text="WIRE TO JOHN SMITH", x=80, y=701.0),
        ]

        lines = layout.build_lines(fragments, page_number=1)

        assert len(lines) == 1
        assert lines[0].text == "01/15/2024 WIRE TO JOHN SMITH 500.00"
        assert [f.x for f in lines[0].fragments] == [10, 80, 300]

    def test_separates_lines_beyond_tolerance(self, layout):
        fragments = [
            TextFragment(text="a", x=10, y=700.0),
            TextFragment(text="b", x=10, y=696.0),
        ]

        lines = layout.build_lines(fragments, page_number=1)

        assert len(lines) == 2

    def test_adjacent_fragments_keep_a_single_space(self, layout):
        # "Desc" ends at 10 + 4 * 2.4 = 19.6, "ription" starts right after
        fragments = [
            TextFragment(text="Desc", x=10, y=700, width=9.6),
            TextFragment(text="ription", x=19.6, y=700, width=16.8),
        ]

        lines = layout.build_lines(fragments, page_number=1)

        assert lines[0].text == "Desc ription"

    def test_drops_blank_fragments_and_empty_pages(self, layout):
        assert layout.build_lines([TextFragment(text="   ", x=0, y=0)], page_number=1) == []
        assert layout.build_lines([], page_number=1) == []

    def test_first_x_is_leftmost_fragment(self, layout):
        fragments = [
            TextFragment(text="memo", x=85, y=700),
            TextFragment(text="text", x=120, y=700),
        ]

        line = layout.build_lines(fragments, page_number=2)[0]

        assert line.first_x == 85
        assert line.page_number == 2
