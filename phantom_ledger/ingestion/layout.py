"""
Layout reconstruction: positioned fragments -> ordered text lines.
"""

from functools import cmp_to_key
from typing import Iterable, List, Optional

import structlog

from ..config import get_settings
from ..models import TextFragment, TextLine
from .text import normalize_spaces

logger = structlog.get_logger()

# Minimum advance per character when a fragment reports no width
CHAR_WIDTH_ESTIMATE = 2.4


def _reading_order(a: TextFragment, b: TextFragment) -> int:
    # Top to bottom, then left to right for near-identical baselines
    if abs(b.y - a.y) > 1:
        return -1 if b.y < a.y else 1
    if a.x == b.x:
        return 0
    return -1 if a.x < b.x else 1


class LayoutReconstructor:
    """
    Groups fragments into lines by baseline.

    Greedy clustering: each fragment joins the first existing line whose
    anchor baseline is within `line_tolerance`, so ties go to the earliest line.
    """

    def __init__(
        self,
        line_tolerance: Optional[float] = None,
        space_gap_threshold: Optional[float] = None,
    ):
        settings = get_settings()
        self.line_tolerance = (
            settings.line_tolerance if line_tolerance is None else line_tolerance
        )
        self.space_gap_threshold = (
            settings.space_gap_threshold if space_gap_threshold is None else space_gap_threshold
        )

    def build_lines(
        self,
        fragments: Iterable[TextFragment],
        page_number: int,
    ) -> List[TextLine]:
        """Reconstruct the ordered lines of one page."""
        items = [
            TextFragment(text=f.text.strip(), x=f.x, y=f.y, width=f.width)
            for f in fragments
            if f.text and f.text.strip()
        ]
        if not items:
            return []

        items.sort(key=cmp_to_key(_reading_order))

        groups: List[dict] = []
        for item in items:
            target = next(
                (g for g in groups if abs(g["y"] - item.y) <= self.line_tolerance),
                None,
            )
            if target is None:
                target = {"y": item.y, "fragments": []}
                groups.append(target)
            target["fragments"].append(item)

        groups.sort(key=lambda g: g["y"], reverse=True)

        lines = []
        for group in groups:
            ordered = sorted(group["fragments"], key=lambda f: f.x)
            text = self.join_fragments(ordered)
            if not text:
                continue
            lines.append(TextLine(
                page_number=page_number,
                y=group["y"],
                fragments=ordered,
                text=text,
            ))

        logger.debug("Reconstructed page lines", page=page_number, lines=len(lines))
        return lines

    def join_fragments(self, fragments: List[TextFragment]) -> str:
        """Join left-to-right fragments, spacing them by the gap between them."""
        output = ""
        previous_right_edge = None

        for fragment in fragments:
            if not fragment.text:
                continue

            if (
                previous_right_edge is not None
                and fragment.x - previous_right_edge > self.space_gap_threshold
            ):
                output += " "

            if output and not output.endswith(" "):
                output += " "

            output += fragment.text
            previous_right_edge = fragment.x + max(
                fragment.width, len(fragment.text) * CHAR_WIDTH_ESTIMATE
            )

        return normalize_spaces(output)
