"""
PDF text-layer decoder built on PyMuPDF.

Produces positioned text fragments per page in PDF user space (origin at the
bottom-left, `y` growing upwards) so the layout stage can rebuild lines.
"""

import threading
from dataclasses import dataclass
from typing import List

import structlog
import fitz  # PyMuPDF

from ..models import FailureReason, TextFragment
from .errors import StatementParseError

logger = structlog.get_logger()

# PyMuPDF documents must not be used from several threads at once
_DECODE_LOCK = threading.Lock()


@dataclass
class DecodedPage:
    """Fragments of one page, in decoder order."""
    page_number: int
    fragments: List[TextFragment]
    width: float
    height: float


class PdfTextDecoder:
    """
    Reads the embedded text layer of a PDF.

    No OCR is attempted: image-only documents come back with empty pages and
    are rejected further down the pipeline.
    """

    def decode(self, data: bytes, file_name: str) -> List[DecodedPage]:
        if not data:
            raise StatementParseError(FailureReason.EMPTY_FILE, "File is empty.")

        with _DECODE_LOCK:
            return self._decode_locked(data, file_name)

    def _decode_locked(self, data: bytes, file_name: str) -> List[DecodedPage]:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except (RuntimeError, ValueError) as e:
            logger.warning("Could not open PDF", file=file_name, error=str(e))
            raise StatementParseError(
                FailureReason.OPEN_FAILED, f"Could not read PDF ({file_name})."
            ) from e

        try:
            if doc.needs_pass:
                raise StatementParseError(
                    FailureReason.PASSWORD_PROTECTED,
                    "Password-protected PDF cannot be processed.",
                )
            if doc.page_count == 0:
                raise StatementParseError(
                    FailureReason.OPEN_FAILED, f"Could not read PDF ({file_name})."
                )

            pages = []
            for index, page in enumerate(doc):
                pages.append(self._decode_page(page, index + 1))

            logger.debug("Decoded PDF text layer", file=file_name, pages=len(pages))
            return pages
        finally:
            doc.close()

    def _decode_page(self, page: "fitz.Page", page_number: int) -> DecodedPage:
        height = page.rect.height
        fragments = []

        content = page.get_text("dict")
        for block in content.get("blocks", []):
            # Image blocks carry no text
            if block.get("type") != 0:
                continue
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    text = span.get("text", "")
                    if not text.strip():
                        continue
                    x0, _, x1, _ = span["bbox"]
                    origin_x, origin_y = span["origin"]
                    fragments.append(TextFragment(
                        text=text,
                        x=float(origin_x),
                        y=float(height - origin_y),
                        width=float(max(x1 - x0, 0.0)),
                    ))

        return DecodedPage(
            page_number=page_number,
            fragments=fragments,
            width=page.rect.width,
            height=height,
        )
