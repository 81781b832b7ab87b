"""Ingestion module for extracting transactions from statement PDFs."""

from .errors import StatementParseError
from .layout import LayoutReconstructor
from .amounts import AmountExtractor
from .scanner import TransactionScanner
from .statement_parser import StatementParser

__all__ = [
    "StatementParseError",
    "LayoutReconstructor",
    "AmountExtractor",
    "TransactionScanner",
    "StatementParser",
]
