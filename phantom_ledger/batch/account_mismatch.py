"""
Cross-file account consistency check.

Every file in a batch should belong to the same account. Each file is
reduced to a set of account match keys; the key seen in the most files is
taken as the expected account and files without it are reported.
"""

import re
from collections import Counter
from typing import Iterable, List, Optional

import structlog

from ..models import AccountMatchContext, ParsedStatement

logger = structlog.get_logger()

LAST4_PREFIX = "LAST4:"

_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")
_NON_DIGIT = re.compile(r"\D")
_MASK_CHARS = re.compile(r"[xX*]")
# Letters other than the X mask
_LETTERS = re.compile(r"[A-WYZa-wyz]")


def derive_account_match_key(account: Optional[str]) -> Optional[str]:
    """LAST4:dddd when four or more digits are present, else the uppercased compaction."""
    compact = _NON_ALPHANUMERIC.sub("", str(account or ""))
    if not compact:
        return None

    digits = _NON_DIGIT.sub("", compact)
    if len(digits) >= 4:
        return f"{LAST4_PREFIX}{digits[-4:]}"
    return compact.upper()


def score_account_identifier(value: Optional[str]) -> int:
    """Information score: digits help, masks and letters hurt, pure digits win."""
    normalized = str(value or "").strip()
    if not normalized:
        return -9999

    digits = sum(ch.isdigit() for ch in normalized)
    masks = len(_MASK_CHARS.findall(normalized))
    letters = len(_LETTERS.findall(normalized))

    score = digits * 4 - masks * 3 - letters * 2 + min(len(normalized), 20)
    if normalized.isdigit():
        score += 20
    return score


def pick_best_account_label(values: Iterable[Optional[str]]) -> Optional[str]:
    """Highest score first, alphabetical on ties."""
    options = sorted(
        {v.strip() for v in values if v and v.strip()},
        key=lambda v: (-score_account_identifier(v), v),
    )
    return options[0] if options else None


def mask_account_number(value: Optional[str]) -> str:
    """Never surface more than the last four characters of an identifier."""
    raw = str(value or "").strip()
    digits = _NON_DIGIT.sub("", raw)
    if len(digits) >= 4:
        return digits[-4:]
    return raw[-4:]


def _label_for_key(key: str) -> str:
    return key[len(LAST4_PREFIX):] if key.startswith(LAST4_PREFIX) else key


def gather_account_values(statement: ParsedStatement) -> List[str]:
    """Distinct identifiers from metadata candidates and row labels, first-seen order."""
    values = list(statement.metadata.account_candidates)
    values.extend(row.account for row in statement.rows)

    seen = {}
    for value in values:
        normalized = str(value or "").strip()
        if normalized:
            seen.setdefault(normalized, None)
    return list(seen)


def build_account_match_context(statement: ParsedStatement) -> AccountMatchContext:
    context = AccountMatchContext(file_name=statement.file_name)

    for value in gather_account_values(statement):
        key = derive_account_match_key(value)
        if not key:
            continue
        existing = context.label_by_key.get(key)
        if existing is None or score_account_identifier(value) > score_account_identifier(existing):
            context.label_by_key[key] = value

    context.account_keys = list(context.label_by_key)
    return context


def pick_majority_key(contexts: List[AccountMatchContext]) -> Optional[str]:
    """
    Key present in the most files.

    Ties go to the key seen first (file order, then key order within a
    file). Callers should not depend on which tied key wins.
    """
    presence: Counter = Counter()
    for context in contexts:
        presence.update(context.account_keys)
    if not presence:
        return None
    return presence.most_common(1)[0][0]


def find_account_mismatch_warnings(statements: List[ParsedStatement]) -> List[str]:
    """At most one warning naming every file whose account differs from the majority."""
    contexts = [build_account_match_context(s) for s in statements]
    with_account = [c for c in contexts if c.account_keys]

    if len(with_account) <= 1:
        return []

    expected_key = pick_majority_key(with_account)
    if not expected_key:
        return []

    mismatched = [c for c in with_account if expected_key not in c.account_keys]
    if not mismatched:
        return []

    expected_label = pick_best_account_label(
        c.label_by_key.get(expected_key) for c in with_account if expected_key in c.account_keys
    ) or _label_for_key(expected_key)

    details = []
    for context in mismatched:
        labels = "/".join(
            mask_account_number(context.label_by_key.get(key) or _label_for_key(key))
            for key in context.account_keys
        )
        details.append(f"{labels} → {context.file_name}")

    logger.warning(
        "Account mismatch across batch",
        expected=mask_account_number(expected_label),
        mismatched_files=[c.file_name for c in mismatched],
    )

    return [
        "Account mismatch detected across uploaded statements. "
        f"Expected ****{mask_account_number(expected_label)}; found {' | '.join(details)}."
    ]
