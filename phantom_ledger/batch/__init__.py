"""Batch processing across uploaded statements."""

from .account_mismatch import find_account_mismatch_warnings
from .processor import StatementBatchProcessor

__all__ = ["find_account_mismatch_warnings", "StatementBatchProcessor"]
