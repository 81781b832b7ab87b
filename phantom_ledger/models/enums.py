"""Enumerations for the statement extraction pipeline."""

from enum import Enum


class FailureReason(str, Enum):
    """
    Why a statement file was excluded from a batch.

    EMPTY_FILE: Upload had no bytes
    PASSWORD_PROTECTED: PDF requires a user password
    OPEN_FAILED: Bytes could not be opened as a PDF
    IMAGE_BASED: Text layer too small to extract from (needs OCR)
    """
    EMPTY_FILE = "empty_file"
    PASSWORD_PROTECTED = "password_protected"
    OPEN_FAILED = "open_failed"
    IMAGE_BASED = "image_based"


class CleanerKind(str, Enum):
    """Description cleaner selected at construction time."""
    RULES = "rules"
    AI_ASSISTED = "ai_assisted"
