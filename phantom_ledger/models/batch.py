"""Batch-level result models."""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

from .enums import FailureReason
from .transaction import Transaction


@dataclass(frozen=True)
class UploadedStatement:
    """One file handed to the batch processor."""
    file_name: str
    data: bytes


@dataclass(frozen=True)
class FileFailure:
    """A file that could not be parsed; `message` is user-facing."""
    file_name: str
    reason: FailureReason
    message: str


@dataclass
class AccountMatchContext:
    """Account keys seen in one file and the best label observed per key."""
    file_name: str
    account_keys: List[str] = field(default_factory=list)
    label_by_key: Dict[str, str] = field(default_factory=dict)


@dataclass
class BatchSummary:
    """Totals reported back to the caller."""
    total_files: int = 0
    processed_files: int = 0
    failed_files: int = 0
    total_transactions: int = 0
    date_range: Optional[Dict[str, str]] = None
    total_credits: float = 0.0
    total_debits: float = 0.0
    net: float = 0.0
    credit_count: int = 0
    debit_count: int = 0

    @classmethod
    def from_transactions(
        cls,
        transactions: List[Transaction],
        total_files: int,
        processed_files: int,
        failed_files: int,
    ) -> "BatchSummary":
        """Build the summary from rows already sorted by date."""
        credits = [t.amount for t in transactions if t.is_credit]
        debits = [t.amount for t in transactions if t.is_debit]

        date_range = None
        if transactions:
            date_range = {
                "start": transactions[0].date,
                "end": transactions[-1].date,
            }

        return cls(
            total_files=total_files,
            processed_files=processed_files,
            failed_files=failed_files,
            total_transactions=len(transactions),
            date_range=date_range,
            total_credits=round(sum(credits), 2),
            total_debits=round(sum(debits), 2),
            net=round(sum(t.amount for t in transactions), 2),
            credit_count=len(credits),
            debit_count=len(debits),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the camelCase keys of the API contract."""
        return {
            "totalFiles": self.total_files,
            "processedFiles": self.processed_files,
            "failedFiles": self.failed_files,
            "totalTransactions": self.total_transactions,
            "dateRange": self.date_range,
            "totalCredits": self.total_credits,
            "totalDebits": self.total_debits,
            "net": self.net,
            "creditCount": self.credit_count,
            "debitCount": self.debit_count,
        }


@dataclass
class BatchResult:
    """Output of processing a batch of statements."""
    transactions: List[Transaction] = field(default_factory=list)
    summary: BatchSummary = field(default_factory=BatchSummary)
    warnings: List[str] = field(default_factory=list)
    failures: List[FileFailure] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.transactions

    def export_rows(self) -> List[Dict[str, Any]]:
        return [t.to_export_row() for t in self.transactions]

    def preview(self, limit: int = 30) -> List[Dict[str, Any]]:
        if limit <= 0:
            limit = 30
        return [t.to_preview() for t in self.transactions[:limit]]
