"""Workbook export."""

from .workbook import XLSX_MEDIA_TYPE, build_workbook_bytes

__all__ = ["XLSX_MEDIA_TYPE", "build_workbook_bytes"]
