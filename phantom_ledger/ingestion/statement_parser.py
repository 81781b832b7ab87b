"""
Per-file statement parser.

Runs the extraction pipeline for one PDF: text layer -> lines -> date
context -> account labels -> per-page scan -> document metadata.
"""

from typing import List, Optional, Sequence

import structlog

from ..config import get_settings
from ..models import FailureReason, ParsedStatement, StatementRow, TextFragment, TextLine
from .dates import infer_date_context
from .errors import StatementParseError
from .layout import LayoutReconstructor
from .metadata import assign_account_labels, collect_document_metadata
from .pdf_text import PdfTextDecoder
from .scanner import TransactionScanner

logger = structlog.get_logger()

IMAGE_BASED_MESSAGE = "No extractable text found. The PDF appears image-based and requires OCR."
NO_TRANSACTIONS_WARNING = "No transactions were detected in this statement."


class StatementParser:
    """
    Parser for text-based bank statement PDFs.

    Template-free: column semantics come from the header lines printed on
    each page, dates without a year are resolved against the document.
    """

    def __init__(
        self,
        decoder: Optional[PdfTextDecoder] = None,
        layout: Optional[LayoutReconstructor] = None,
        scanner: Optional[TransactionScanner] = None,
    ):
        self.settings = get_settings()
        self.decoder = decoder or PdfTextDecoder()
        self.layout = layout or LayoutReconstructor()
        self.scanner = scanner or TransactionScanner()

    def parse_bytes(self, data: bytes, file_name: str) -> ParsedStatement:
        """
        Parse a PDF held in memory.

        Raises:
            StatementParseError: the file is empty, encrypted, unreadable or
                has no usable text layer.
        """
        logger.info("Parsing statement", file=file_name, size=len(data or b""))
        pages = self.decoder.decode(data, file_name)
        return self.parse_pages([page.fragments for page in pages], file_name)

    def parse_pages(
        self,
        pages: Sequence[Sequence[TextFragment]],
        file_name: str,
    ) -> ParsedStatement:
        """Run the pipeline on already-decoded fragments, one list per page."""
        page_lines: List[List[TextLine]] = [
            self.layout.build_lines(fragments, index + 1)
            for index, fragments in enumerate(pages)
        ]
        all_lines = [line for lines in page_lines for line in lines]

        text_characters = sum(len(line.text) for line in all_lines)
        if text_characters < self.settings.min_text_chars:
            logger.warning(
                "Statement has no usable text layer",
                file=file_name,
                characters=text_characters,
            )
            raise StatementParseError(FailureReason.IMAGE_BASED, IMAGE_BASED_MESSAGE)

        date_context = infer_date_context(all_lines)
        assign_account_labels(all_lines)

        rows: List[StatementRow] = []
        warnings: List[str] = []

        for index, lines in enumerate(page_lines):
            if not lines:
                continue
            page_number = index + 1
            page_rows = self.scanner.scan_page(lines, date_context)
            if not page_rows:
                warnings.append(f"Page {page_number}: no transactions recognized.")
            rows.extend(
                StatementRow(
                    date=row.date,
                    date_value=row.date_value,
                    description=row.description,
                    amount=row.amount,
                    account=row.account,
                )
                for row in page_rows
            )

        if not rows:
            warnings.append(NO_TRANSACTIONS_WARNING)

        metadata = collect_document_metadata(all_lines, rows)

        logger.info(
            "Statement parsed",
            file=file_name,
            pages=len(page_lines),
            rows=len(rows),
            warnings=len(warnings),
            account=metadata.primary_account,
        )

        return ParsedStatement(
            file_name=file_name,
            rows=rows,
            warnings=warnings,
            metadata=metadata,
            page_count=len(page_lines),
            text_characters=text_characters,
        )
