"""Layout and scanner models for a single statement file."""

from dataclasses import dataclass, field, replace
from typing import List, Optional


@dataclass(frozen=True)
class TextFragment:
    """
    A positioned piece of text from the document decoder.

    Coordinates are PDF user space: `y` is the baseline and grows upwards,
    so the top of the page has the largest `y`.
    """
    text: str
    x: float
    y: float
    width: float = 0.0


@dataclass
class TextLine:
    """Fragments sharing a baseline, joined into one normalized string."""
    page_number: int
    y: float
    fragments: List[TextFragment]
    text: str
    # Assigned once the account label pass has run
    account: Optional[str] = None

    @property
    def first_x(self) -> float:
        if not self.fragments:
            return 0.0
        return self.fragments[0].x


@dataclass(frozen=True)
class HeaderHints:
    """
    Column semantics derived from header lines on a page.

    Unset positions stay None. Merging never overwrites a field that is
    already set, so the first header line to resolve a column wins.
    """
    has_debit_credit: bool = False
    has_balance: bool = False
    date_x: Optional[float] = None
    description_x: Optional[float] = None
    debit_x: Optional[float] = None
    credit_x: Optional[float] = None
    amount_x: Optional[float] = None
    balance_x: Optional[float] = None

    def merge(self, incoming: "HeaderHints") -> "HeaderHints":
        return HeaderHints(
            has_debit_credit=self.has_debit_credit or incoming.has_debit_credit,
            has_balance=self.has_balance or incoming.has_balance,
            date_x=_first_set(self.date_x, incoming.date_x),
            description_x=_first_set(self.description_x, incoming.description_x),
            debit_x=_first_set(self.debit_x, incoming.debit_x),
            credit_x=_first_set(self.credit_x, incoming.credit_x),
            amount_x=_first_set(self.amount_x, incoming.amount_x),
            balance_x=_first_set(self.balance_x, incoming.balance_x),
        )

    @property
    def has_column_positions(self) -> bool:
        return any(
            pos is not None for pos in (self.debit_x, self.credit_x, self.amount_x)
        )


def _first_set(current: Optional[float], incoming: Optional[float]) -> Optional[float]:
    return current if current is not None else incoming


@dataclass(frozen=True)
class DateContext:
    """Statement-wide anchor used to resolve dates printed without a year."""
    anchor_year: int
    anchor_month: int


@dataclass(frozen=True)
class NormalizedDate:
    """Canonical MM/DD/YYYY date plus its millisecond sort key."""
    normalized: str
    value: int


@dataclass(frozen=True)
class AmountResult:
    """Amount picked for a candidate row and how its sign was decided."""
    amount: Optional[float]
    raw_token: Optional[str] = None
    explicit_sign: bool = False

    @property
    def is_finite(self) -> bool:
        return self.amount is not None


@dataclass
class PendingRow:
    """A transaction under construction; continuation lines extend it."""
    date: str
    date_value: int
    description: str
    amount: float
    account: Optional[str] = None

    def append_description(self, text: str) -> None:
        self.description = " ".join(f"{self.description} {text}".split())

    def with_description(self, description: str) -> "PendingRow":
        return replace(self, description=description)


@dataclass
class ScannerState:
    """
    Per-page scanner context, threaded explicitly through every transition.

    capture: True between a header line and the next footer line
    section_sign: sign implied by the active section banner (0 = neutral)
    """
    capture: bool = False
    pending: Optional[PendingRow] = None
    section_sign: int = 0
    hints: HeaderHints = field(default_factory=HeaderHints)
    rows: List[PendingRow] = field(default_factory=list)
