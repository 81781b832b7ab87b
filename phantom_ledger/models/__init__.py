"""Data models for the statement extraction pipeline."""

from .enums import (
    FailureReason,
    CleanerKind,
)
from .statement import (
    TextFragment,
    TextLine,
    HeaderHints,
    DateContext,
    NormalizedDate,
    AmountResult,
    PendingRow,
    ScannerState,
)
from .transaction import (
    Transaction,
    StatementPeriod,
    DocumentMetadata,
    StatementRow,
    ParsedStatement,
)
from .batch import (
    UploadedStatement,
    FileFailure,
    AccountMatchContext,
    BatchSummary,
    BatchResult,
)

__all__ = [
    # Enums
    "FailureReason",
    "CleanerKind",
    # Layout / scanner
    "TextFragment",
    "TextLine",
    "HeaderHints",
    "DateContext",
    "NormalizedDate",
    "AmountResult",
    "PendingRow",
    "ScannerState",
    # Transactions
    "Transaction",
    "StatementPeriod",
    "DocumentMetadata",
    "StatementRow",
    "ParsedStatement",
    # Batch
    "UploadedStatement",
    "FileFailure",
    "AccountMatchContext",
    "BatchSummary",
    "BatchResult",
]
