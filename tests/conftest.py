"""
Shared fixtures: positioned fragments, lines and in-memory statement PDFs.
"""

from typing import List, Sequence, Tuple

import fitz  # PyMuPDF
import pytest

from phantom_ledger.ingestion.layout import LayoutReconstructor
from phantom_ledger.models import TextFragment, TextLine

PAGE_WIDTH = 612
PAGE_HEIGHT = 792


def make_line(
    parts: Sequence[Tuple[str, float]],
    y: float = 700.0,
    page_number: int = 1,
) -> TextLine:
    """Build a TextLine from (text, x) pairs through the real layout stage."""
    fragments = [TextFragment(text=text, x=x, y=y) for text, x in parts]
    lines = LayoutReconstructor().build_lines(fragments, page_number)
    assert len(lines) == 1
    return lines[0]


def build_pdf(pages: List[List[str]], **save_options) -> bytes:
    """One text line per entry, top to bottom, 14pt apart."""
    doc = fitz.open()
    try:
        for page_lines in pages:
            page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
            for index, text in enumerate(page_lines):
                page.insert_text((40, 60 + index * 14), text, fontsize=9, fontname="helv")
        return doc.tobytes(**save_options)
    finally:
        doc.close()


STATEMENT_LINES = [
    "First Coastal Bank",
    "Account Number: 000123456789",
    "Statement Period 01/01/2024 to 01/31/2024",
    "Date   Description   Amount",
    "01/05/2024   Zelle payment from JANE DOE Conf# 12345   250.00",
    "01/12/2024   PURCHASE 0112 HOME DEPOT 4521   -45.10",
    "1/20   Service Charge   12.00",
    "Ending Balance   1,392.90",
]


@pytest.fixture
def line_factory():
    return make_line


@pytest.fixture
def statement_pdf() -> bytes:
    return build_pdf([STATEMENT_LINES])


@pytest.fixture
def other_account_pdf() -> bytes:
    lines = list(STATEMENT_LINES)
    lines[1] = "Account Number: 000987655678"
    return build_pdf([lines])


@pytest.fixture
def blank_pdf() -> bytes:
    return build_pdf([[]])


@pytest.fixture
def encrypted_pdf() -> bytes:
    return build_pdf(
        [STATEMENT_LINES],
        encryption=fitz.PDF_ENCRYPT_AES_256,
        user_pw="secret",
        owner_pw="owner-secret",
    )


@pytest.fixture
def pdf_factory():
    return build_pdf


@pytest.fixture
def copy_account_pdf() -> bytes:
    """Same account as `statement_pdf`, different bytes."""
    lines = list(STATEMENT_LINES)
    lines[0] = "First Coastal Bank - Copy"
    return build_pdf([lines])
