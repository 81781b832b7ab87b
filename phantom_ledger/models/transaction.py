"""Transaction and per-file result models."""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any


@dataclass(frozen=True)
class Transaction:
    """
    A finalized transaction ready for export.

    `date` is canonical MM/DD/YYYY and `date_value` is its sort key in
    milliseconds since the epoch. `amount` is signed: negative is money out.
    """
    date: str
    date_value: int
    amount: float
    description: str  # Cleaned payee / purpose
    original: str     # Sanitized statement memo
    source_file: str = ""
    account: Optional[str] = None

    @property
    def is_credit(self) -> bool:
        return self.amount > 0

    @property
    def is_debit(self) -> bool:
        return self.amount < 0

    def to_export_row(self) -> Dict[str, Any]:
        """Row consumed by the workbook exporter."""
        return {
            "date": self.date,
            "clean": self.description,
            "amount": self.amount,
            "original": self.original,
        }

    def to_preview(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "amount": self.amount,
            "description": self.original or self.description,
            "sourceFile": self.source_file,
        }


@dataclass(frozen=True)
class StatementPeriod:
    """Statement period as printed on the document."""
    start: str
    end: str

    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start, "end": self.end}


@dataclass
class DocumentMetadata:
    """
    Identifiers collected from one statement file.
    Candidate lists are ranked: most frequent first, then alphabetical.
    """
    account_candidates: List[str] = field(default_factory=list)
    business_number_candidates: List[str] = field(default_factory=list)
    business_name_candidates: List[str] = field(default_factory=list)
    statement_period: Optional[StatementPeriod] = None

    @property
    def primary_account(self) -> Optional[str]:
        return self.account_candidates[0] if self.account_candidates else None

    @property
    def primary_business_number(self) -> Optional[str]:
        return self.business_number_candidates[0] if self.business_number_candidates else None

    @property
    def primary_business_name(self) -> Optional[str]:
        return self.business_name_candidates[0] if self.business_name_candidates else None


@dataclass(frozen=True)
class StatementRow:
    """A parsed row before description cleaning."""
    date: str
    date_value: int
    description: str
    amount: float
    account: Optional[str] = None


@dataclass
class ParsedStatement:
    """Result of parsing one statement file."""
    file_name: str
    rows: List[StatementRow] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    page_count: int = 0
    text_characters: int = 0
