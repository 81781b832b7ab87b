"""
Batch processor - coordinates a multi-file extraction run.

1. Parse every file (concurrently, one worker thread per file)
2. Merge and sort rows by date
3. Clean descriptions
4. Cross-file account check
5. Summary
"""

import asyncio
import math
import time
from typing import List, Optional, Tuple, Union

import structlog

from ..cleaning import DescriptionCleaner, build_cleaner
from ..config import get_settings
from ..ingestion import StatementParseError, StatementParser
from ..models import (
    BatchResult,
    BatchSummary,
    FailureReason,
    FileFailure,
    ParsedStatement,
    StatementRow,
    Transaction,
    UploadedStatement,
)
from .account_mismatch import find_account_mismatch_warnings

logger = structlog.get_logger()

GENERIC_PARSE_FAILURE = "Failed to parse PDF."

ParseOutcome = Union[ParsedStatement, FileFailure]


def is_valid_row(row: StatementRow) -> bool:
    return bool(
        row.date
        and row.description
        and row.amount is not None
        and math.isfinite(row.amount)
    )


class StatementBatchProcessor:
    """
    Turns a batch of uploaded statements into sorted, cleaned transactions.

    A file that fails to parse is recorded and skipped; it never fails the
    batch. The cleaner is the only stage that may reach the network.
    """

    def __init__(
        self,
        parser: Optional[StatementParser] = None,
        cleaner: Optional[DescriptionCleaner] = None,
    ):
        self.settings = get_settings()
        self.parser = parser or StatementParser()
        self.cleaner = cleaner

    async def process(self, files: List[UploadedStatement]) -> BatchResult:
        start_time = time.time()
        logger.info("Processing statement batch", files=len(files))

        outcomes = await asyncio.gather(*(self._parse_file(f) for f in files))

        statements = [o for o in outcomes if isinstance(o, ParsedStatement)]
        failures = [o for o in outcomes if isinstance(o, FileFailure)]

        warnings: List[str] = []
        for statement in statements:
            warnings.extend(f"{statement.file_name}: {w}" for w in statement.warnings)
        warnings.extend(f"Skipped {f.file_name}: {f.message}" for f in failures)

        rows = self._merge_rows(statements)
        transactions = await self._clean(rows)

        warnings.extend(find_account_mismatch_warnings(statements))

        summary = BatchSummary.from_transactions(
            transactions,
            total_files=len(files),
            processed_files=len(statements),
            failed_files=len(failures),
        )

        logger.info(
            "Batch processed",
            files=len(files),
            processed=len(statements),
            failed=len(failures),
            transactions=len(transactions),
            duration_seconds=round(time.time() - start_time, 3),
        )

        return BatchResult(
            transactions=transactions,
            summary=summary,
            warnings=warnings,
            failures=failures,
        )

    async def _parse_file(self, upload: UploadedStatement) -> ParseOutcome:
        try:
            return await asyncio.to_thread(
                self.parser.parse_bytes, upload.data, upload.file_name
            )
        except StatementParseError as e:
            logger.warning(
                "Statement skipped",
                file=upload.file_name,
                reason=e.code.value,
            )
            return FileFailure(file_name=upload.file_name, reason=e.code, message=e.message)
        except Exception as e:
            logger.exception("Unexpected parser failure", file=upload.file_name, error=str(e))
            return FileFailure(
                file_name=upload.file_name,
                reason=FailureReason.OPEN_FAILED,
                message=GENERIC_PARSE_FAILURE,
            )

    @staticmethod
    def _merge_rows(statements: List[ParsedStatement]) -> List[Tuple[str, StatementRow]]:
        """All valid rows tagged with their file, stable-sorted by date."""
        tagged = [
            (statement.file_name, row)
            for statement in statements
            for row in statement.rows
            if is_valid_row(row)
        ]
        tagged.sort(key=lambda item: item[1].date_value)
        return tagged

    async def _clean(self, rows: List[Tuple[str, StatementRow]]) -> List[Transaction]:
        if not rows:
            return []

        cleaner = self.cleaner or build_cleaner(self.settings)
        try:
            cleaned = await cleaner.clean_many([row.description for _, row in rows])
        finally:
            if self.cleaner is None:
                await cleaner.close()

        return [
            Transaction(
                date=row.date,
                date_value=row.date_value,
                amount=row.amount,
                description=clean or row.description,
                original=row.description,
                source_file=file_name,
                account=row.account,
            )
            for (file_name, row), clean in zip(rows, cleaned)
        ]
