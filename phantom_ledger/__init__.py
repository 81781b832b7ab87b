"""Phantom Ledger: bank statement PDF extraction and normalization."""

__version__ = "1.0.0"
