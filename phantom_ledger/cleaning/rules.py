"""
Rule catalog for turning raw statement memos into short payee names.

Rules are evaluated in order. A rule applies when its pattern matches the
trimmed memo; its extractor returns the cleaned name, or None to let the
next rule try. The first non-None result wins and a memo no rule claims is
returned trimmed. Prefix rules written with a fixed case only match that
case.
"""

import re
from dataclasses import dataclass
from re import Match, Pattern
from typing import Callable, Dict, Optional, Tuple

Extractor = Callable[[str, Match], Optional[str]]


@dataclass(frozen=True)
class CleaningRule:
    """One memo shape and how to pull the payee out of it."""
    name: str
    pattern: Pattern
    extract: Extractor

    def apply(self, memo: str) -> Optional[str]:
        match = self.pattern.search(memo)
        if not match:
            return None
        return self.extract(memo, match)


# Exact-match merchant aliases applied after the catalog
MERCHANT_ALIASES: Dict[str, str] = {
    "Motorcycle Spare Parts Max Import": "Motorcycle Spare Parts Max Import LLC",
    "Motorcycle Spare Parts Max Import L": "Motorcycle Spare Parts Max Import LLC",
    "CHARCO UTILITIES": "Charlotte County Utilities",
    "CHARLOTTE UTILTY": "Charlotte County Utilities",
    "LEE COUNTY": "LEE COUNTY TAX COLLECTOR",
    "ATT* BILL": "AT&T",
    "ATT* BILL PAYMENT": "AT&T",
    "APPLE.COM/BILL": "APPLE.COM",
    "AMAZON MKTPL": "Amazon",
    "NST THE HOME D": "THE HOME DEPOT",
    "FPL DIRECT DEBIT": "FPL DIRECT",
}

WIRE_FEE_NAMES: Dict[str, str] = {
    "Wire Transfer Fee": "Wire Transfer Fee",
    "Domestic Incoming Wire Fee": "Domestic Wire Fee",
    "Online Fx International Wire Fee": "Online Fx International Wire Fee",
    "Online US Dollar Intl Wire Fee": "Intl Wire Fee",
}

# Bank routing codes that trail the counterparty name in Zelle memos
_ZELLE_BANK_CODE = r"\s+(?:Bac|Wfct|Cof|Cti|Mac|Hna|H50|Bbt|0Ou)\S+.*"


def _rx(pattern: str, flags: int = 0) -> Pattern:
    return re.compile(pattern, flags)


def _first_group(memo: str, match: Match) -> Optional[str]:
    return match.group(1).strip()


def _constant(value: str) -> Extractor:
    return lambda memo, match: value


def _unchanged(memo: str, match: Match) -> Optional[str]:
    return memo


def _swap_last_first(name_part: str) -> str:
    """'DOE, JANE' -> 'JANE DOE'; identical halves collapse to one."""
    if "," not in name_part:
        return name_part
    last, first = (part.strip() for part in name_part.split(",", 1))
    if last == first:
        return last
    return f"{first} {last}"


# Extractors, in catalog order

def _wire_from(memo: str, match: Match) -> Optional[str]:
    name = match.group(1).strip()
    if re.match(r"^\d/", name) and "," not in name:
        return re.sub(r"^\d/", "", name).strip()
    return name


def _wire_to(memo: str, match: Match) -> Optional[str]:
    return re.sub(r"\s+SA$", "", match.group(1), flags=re.I).strip()


def _debit_card_purchase(memo: str, match: Match) -> Optional[str]:
    rest = re.sub(
        r"^DEBIT CARD PURCH Card Ending in \d+\s+\S+\s+\d+\s+[A-Za-z]{3}\s+\d{1,2}\s+",
        "", memo, count=1, flags=re.I,
    )
    rest = re.sub(r"\s+[A-Za-z]{3}\s+\d{4}\b.*$", "", rest, count=1, flags=re.I)
    rest = re.sub(r"\s+\d{7,}.*$", "", rest, count=1)
    rest = re.sub(r"\s+[A-Z]{2}\s+\d+\s*$", "", rest, count=1, flags=re.I)
    return rest.strip() or None


def _wire_in(memo: str, match: Match) -> Optional[str]:
    origin = re.search(r"ORIG:(.+?)\s+ID:", memo)
    return origin.group(1).strip() if origin else "Wire In"


def _wire_out(memo: str, match: Match) -> Optional[str]:
    beneficiary = re.search(r"BNF:(.+?)\s+ID:", memo)
    return beneficiary.group(1).strip() if beneficiary else "Wire Out"


def _named_transfer(memo: str, match: Match) -> Optional[str]:
    parts = re.match(r"^TRANSFER (.+?):(.+?)\s+Confirmation#", memo, re.I)
    if not parts:
        return None
    return f"{parts.group(1).strip()} to {parts.group(2).strip()}"


def _wire_fee(memo: str, match: Match) -> Optional[str]:
    return WIRE_FEE_NAMES[match.group(0)]


def _zelle_with_memo(direction: str) -> Extractor:
    def extract(memo: str, match: Match) -> Optional[str]:
        named = re.match(rf"^Zelle payment {direction} (.+?)\s+for\s+\"", memo, re.I)
        return named.group(1).strip() if named else None
    return extract


def _zelle_without_memo(direction: str) -> Extractor:
    def extract(memo: str, match: Match) -> Optional[str]:
        confirmed = re.match(rf"^Zelle payment {direction} (.+?)\s+Conf#", memo, re.I)
        if confirmed:
            return confirmed.group(1).strip()
        name = re.sub(rf"^Zelle payment {direction} ", "", memo, count=1, flags=re.I).strip()
        name = re.sub(_ZELLE_BANK_CODE, "", name, count=1, flags=re.I)
        name = re.sub(r"\s+\d{8,}.*", "", name, count=1)
        return name.strip()
    return extract


def _legacy_zelle_to(memo: str, match: Match) -> Optional[str]:
    dated = re.match(r"^Zelle to (.+?)\s+on\s+\d+/\d+\s+Ref\s+#", memo, re.I)
    if dated:
        return dated.group(1).strip()
    rest = re.sub(r"^Zelle to ", "", memo, count=1, flags=re.I)
    return re.sub(r"\s+Ref\s+#\S+.*", "", rest, count=1, flags=re.I).strip()


def _transfer_from_chk(channel: str, fallback: str) -> Extractor:
    def extract(memo: str, match: Match) -> Optional[str]:
        named = re.match(
            rf"^{channel} transfer from CHK \d+ Confirmation#\s*\S+;\s*(.+)$", memo, re.I
        )
        if named:
            return _swap_last_first(named.group(1).strip())
        return fallback
    return extract


def _online_transfer_to_chk(memo: str, match: Match) -> Optional[str]:
    account = re.match(r"^Online transfer to CHK\s+\.{0,3}(\d+)", memo, re.I)
    return f"Transfer to CHK {account.group(1)}" if account else "Online Transfer"


def _mobile_transfer_to_chk(memo: str, match: Match) -> Optional[str]:
    account = re.search(r"CHK\s+(\S+)", memo, re.I)
    if account:
        return "transfer to CHK " + re.sub(r";$", "", account.group(1))
    return "Mobile Transfer"


def _online_transfer_named(memo: str, match: Match) -> Optional[str]:
    rest = memo[match.end():]
    rest = re.sub(
        r"\s+(?:Everyday|Business|Savings|Personal)\s+(?:Checking|Savings).*",
        "", rest, count=1, flags=re.I,
    )
    rest = re.sub(r"\s+xxxxxx\d+.*", "", rest, count=1, flags=re.I)
    rest = re.sub(r"\s+Ref\s+#.*", "", rest, count=1, flags=re.I)
    return "Transfer to " + rest.strip()


def _card_payment(memo: str, match: Match) -> Optional[str]:
    card = re.search(r"CRD\s+(\S+)", memo, re.I)
    return f"Online Banking payment to CRD {card.group(1)}" if card else "Online Banking payment"


def _wt_wire(memo: str, match: Match) -> Optional[str]:
    beneficiary = re.search(r"/Bnf=(.+?)\s+Srf#", memo)
    if not beneficiary:
        return memo
    name = beneficiary.group(1).strip()
    name = re.sub(r"^G\s+", "", name, count=1)
    name = re.sub(r"\s+CO,.*", "", name, count=1)
    name = re.sub(r"\s+CA,.*", "", name, count=1)
    return name.strip()


def _fedwire_credit(memo: str, match: Match) -> Optional[str]:
    by_order = re.search(r"B/O:\s*\d+/(.+?)\s*\d/US/", memo)
    if by_order:
        return by_order.group(1).strip()
    beneficiary = re.search(r"Bnf=([^/]+)", memo)
    if beneficiary:
        return re.sub(r"\s+Miramar\s+FL.*", "", beneficiary.group(1), count=1).strip()
    return "Fedwire Credit"


def _book_transfer_credit(memo: str, match: Match) -> Optional[str]:
    for pattern in (
        r"Org:/\d+\s+(.+?)\s+Ref:",
        r"B/O:\s*(.+?)(?:\s+(?:Ocala|Columbus|Miramar)\s)",
        r"B/O:\s*(.+?)(?:\s+\w+\s+\w{2}\s+\d{5})",
    ):
        found = re.search(pattern, memo)
        if found:
            return found.group(1).strip()
    return "Book Transfer Credit"


def _international_wire(memo: str, match: Match) -> Optional[str]:
    beneficiary = re.search(r"Ben:/\d+\s+(.+?)\s+Ref:", memo)
    if beneficiary:
        return beneficiary.group(1).strip()
    account = re.search(r"A/C:\s*(.+?)\s+Medellin", memo, re.I)
    if account:
        return account.group(1).strip()
    return "Online International Wire Transfer"


def _ach_originator(memo: str, match: Match) -> Optional[str]:
    entry = re.search(r"CO Entry Descr:(\w+)", memo)
    if entry and entry.group(1).upper() not in ("ACH", "PMT", "ACHPMT"):
        return entry.group(1)
    company = re.search(r"Orig CO Name:(.+?)\s+Orig\s+ID:", memo)
    return company.group(1).strip() if company else memo


def _authorized_purchase(memo: str, match: Match) -> Optional[str]:
    rest = memo[match.end():]
    rest = re.sub(r"^\d{2}/\d{2}\s+", "", rest, count=1)
    rest = re.sub(r"\s+S\d{10,}\s+Card\s+\d+.*", "", rest, count=1)
    rest = re.sub(r"\s+[A-Z][a-z]{2}$", "", rest, count=1)
    rest = re.sub(r"\s+[A-Z]{2}$", "", rest, count=1)
    rest = re.sub(r"\s+\S+@\S+", "", rest, count=1)
    rest = re.sub(r"\s+Https?://\S+", "", rest, count=1, flags=re.I)
    return rest.strip()


def _purchase(memo: str, match: Match) -> Optional[str]:
    rest = re.sub(r"^PURCHASE\s+\d{4}\s+", "", memo, count=1)
    rest = re.sub(r"\s+\d{10,}.*", "", rest, count=1)
    rest = re.sub(r"\s+[A-Z]{2}$", "", rest, count=1)
    rest = re.sub(r"\*\S+", "", rest)
    return rest.strip()


def _checkcard(memo: str, match: Match) -> Optional[str]:
    rest = re.sub(r"^CHECKCARD\s+\d{4}\s+", "", memo, count=1)
    for trailer in (
        r"\s+\d{15,}.*",
        r"\s+RECURRING\s+.*",
        r"\s+CKCD\s+.*",
        r"\s+\d{10}\s*.*",
        r"\s+[A-Z]{2}$",
    ):
        rest = re.sub(trailer, "", rest, count=1)
    return rest.strip()


def _debit_card(memo: str, match: Match) -> Optional[str]:
    rest = re.sub(r"^DEBIT CARD Card Ending in \d+\s+", "", memo, count=1)
    rest = re.sub(r"\s+[A-Z]{2,}(?:US)?\d{4}$", "", rest, count=1)
    rest = re.sub(r"\s+\d{4,}$", "", rest, count=1)
    rest = re.sub(r"\s+\d+\s+[A-Z]+\s+[A-Z]{2}$", "", rest, count=1)
    return rest.strip()


def _business_ach(memo: str, match: Match) -> Optional[str]:
    payee = re.search(
        r"Business to Business ACH Debit\s*-\s*(.+?)(?:\s+ACH\s+|\s+Retry|\s+\d)", memo
    )
    if payee:
        return f"{payee.group(1).strip()} ACH"
    tail = re.search(r"-\s*(.+)", memo)
    if tail:
        return tail.group(1).strip()
    return "Business to Business ACH Debit"


def _named_adjustment(memo: str, match: Match) -> Optional[str]:
    named = re.search(r"NAME:\s*(.+?)(?:\s+(?:ID:|MEMO:|$))", memo, re.I)
    return named.group(1).strip() if named else None


def _check_number(memo: str, match: Match) -> Optional[str]:
    return f"Check {memo}"


def _des_prefix(memo: str, match: Match) -> Optional[str]:
    before = re.match(r"^(.+?)\s+DES:", memo)
    return before.group(1).strip() if before else None


def _store_code(memo: str, match: Match) -> Optional[str]:
    rest = memo[:match.start()]
    rest = re.sub(r"\s+\d{10}\s*$", "", rest, count=1)
    rest = re.sub(r"\*+", " ", rest).strip()
    return re.sub(r"\s{2,}", " ", rest).strip()


CLEANING_RULES: Tuple[CleaningRule, ...] = (
    # Deposits / adjustments carrying a NAME field
    CleaningRule("misc_deposit_name", _rx(r"^MISC DEPOSIT PAY ID \S+ ORG ID \S+ NAME (.+)$", re.I), _first_group),
    CleaningRule("adjustment_name", _rx(r"^OTHER/WITHDRAWAL/ADJ PAY ID \S+ ORG ID \S+ NAME (.+)$", re.I), _first_group),
    # Wires
    CleaningRule("wire_from", _rx(r"^FUNDS TRANSFER WIRE FROM (.+?) [A-Za-z]{3} \d{1,2}$", re.I), _wire_from),
    CleaningRule(
        "wire_to",
        _rx(r"^(?:FUNDS TRN OUT CBOL|INT'L WIRE OUT CBOL) WIRE TO (.+?)(?:\s+#\S+)?$", re.I),
        _wire_to,
    ),
    CleaningRule("incoming_wire_fee", _rx(r"^SERVICE CHARGES INCOMING WIRE FEE\b", re.I), _constant("INCOMING WIRE FEE")),
    CleaningRule(
        "funds_transfer_fee",
        _rx(r"^SERVICE FEE CHARGES FOR (?:DOMESTIC|INTERNATIONAL) FUNDS TRANSFER$", re.I),
        _constant("SERVICE FEE"),
    ),
    CleaningRule("instant_payment_debit", _rx(r"^INSTANT PAYMENT DEBIT\s+\d{12,}\S*\s+(.+)$", re.I), _first_group),
    CleaningRule("debit_card_purchase", _rx(r"^DEBIT CARD PURCH Card Ending in ", re.I), _debit_card_purchase),
    CleaningRule("wire_in", _rx(r"^WIRE TYPE:WIRE IN"), _wire_in),
    CleaningRule("wire_out", _rx(r"^WIRE TYPE:WIRE OUT"), _wire_out),
    CleaningRule("named_transfer", _rx(r"^TRANSFER .+Confirmation#", re.I), _named_transfer),
    CleaningRule("external_transfer_fee", _rx(r"^External transfer fee", re.I), _constant("External Transfer Fee")),
    CleaningRule("wire_service_charge", _rx(r"^Wire Trans Svc Charge"), _constant("Wire Trans Svc Charge")),
    CleaningRule(
        "wire_fee",
        _rx("^(?:" + "|".join(re.escape(name) for name in WIRE_FEE_NAMES) + ")$"),
        _wire_fee,
    ),
    # Zelle
    CleaningRule("zelle_from_with_memo", _rx(r"^Zelle payment from .+ for \"", re.I), _zelle_with_memo("from")),
    CleaningRule("zelle_from", _rx(r"^Zelle payment from ", re.I), _zelle_without_memo("from")),
    CleaningRule("zelle_to_with_memo", _rx(r"^Zelle payment to .+ for \"", re.I), _zelle_with_memo("to")),
    CleaningRule("zelle_to", _rx(r"^Zelle payment to ", re.I), _zelle_without_memo("to")),
    CleaningRule("legacy_zelle_to", _rx(r"^Zelle to ", re.I), _legacy_zelle_to),
    # Internal transfers
    CleaningRule("mobile_transfer_from_chk", _rx(r"^Mobile transfer from CHK", re.I), _transfer_from_chk("Mobile", "Mobile Transfer")),
    CleaningRule("online_transfer_from_chk", _rx(r"^Online transfer from CHK", re.I), _transfer_from_chk("Online", "Online Transfer")),
    CleaningRule("online_transfer_to_chk", _rx(r"^Online transfer to CHK", re.I), _online_transfer_to_chk),
    CleaningRule("mobile_transfer_to_chk", _rx(r"^Mobile transfer to chk", re.I), _mobile_transfer_to_chk),
    CleaningRule("online_transfer_named", _rx(r"^Online Transfer to "), _online_transfer_named),
    CleaningRule("card_payment", _rx(r"^Online Banking payment to CRD", re.I), _card_payment),
    # Wire formats with structured fields
    CleaningRule("wt_wire", _rx(r"^WT\s+\d"), _wt_wire),
    CleaningRule("fedwire_credit", _rx(r"^Fedwire Credit"), _fedwire_credit),
    CleaningRule("book_transfer_credit", _rx(r"^Book Transfer Credit"), _book_transfer_credit),
    CleaningRule("international_wire", _rx(r"^Online International Wire Transfer"), _international_wire),
    CleaningRule("ach_originator", _rx(r"^Orig CO Name:"), _ach_originator),
    # Card purchases
    CleaningRule(
        "authorized_purchase",
        _rx(r"^(?:Purchase authorized on |Recurring Payment authorized on |Purchase Intl authorized on )"),
        _authorized_purchase,
    ),
    CleaningRule("purchase", _rx(r"^PURCHASE "), _purchase),
    CleaningRule("checkcard", _rx(r"^CHECKCARD "), _checkcard),
    CleaningRule("debit_card", _rx(r"^DEBIT CARD Card Ending in "), _debit_card),
    CleaningRule("business_ach_debit", _rx(r"Business to Business ACH Debit"), _business_ach),
    # Fees
    CleaningRule("overdraft_fee", _rx(r"^OVERDRAFT ITEM FEE"), _constant("Overdraft Fee")),
    CleaningRule("finance_charge", _rx(r"FINANCE CHARGE"), _constant("FINANCE CHARGE")),
    CleaningRule("monthly_fee", _rx(r"^Monthly Fee Business"), _constant("Monthly Fee Business")),
    CleaningRule("return_chargeback", _rx(r"^RETURN ITEM CHARGEBACK$"), _constant("RETURN ITEM CHARGEBACK")),
    CleaningRule("late_payment_fee", _rx(r"^LATE PAYMENT FEE"), _constant("LATE PAYMENT FEE")),
    # Fallbacks
    CleaningRule("named_adjustment", _rx(r"^(?:OTHER|WITHDRAWAL|ADJ)", re.I), _named_adjustment),
    CleaningRule("service_charge_account", _rx(r"^SERVICE CHARGE ACCT"), _unchanged),
    CleaningRule("check_number", _rx(r"^\d{4}$"), _check_number),
    CleaningRule("des_prefix", _rx(r" DES:"), _des_prefix),
    CleaningRule("store_code", _rx(r"\s[A-Z]{2}\s\d{15,}$"), _store_code),
)


def apply_rules(memo: str) -> str:
    """First rule with a result wins; unclaimed memos come back trimmed."""
    trimmed = memo.strip()
    for rule in CLEANING_RULES:
        result = rule.apply(trimmed)
        if result is not None:
            return result
    return trimmed


def apply_aliases(name: str) -> str:
    return MERCHANT_ALIASES.get(name, name)


def clean_description(memo: Optional[str]) -> Optional[str]:
    """Rule catalog, then the merchant alias table."""
    if not memo or not isinstance(memo, str):
        return memo
    return apply_aliases(apply_rules(memo))
