"""
Tests for the command line entry point.
"""

import json

import pytest
from openpyxl import load_workbook

from phantom_ledger.cli import build_parser, main
from phantom_ledger.config import get_settings


@pytest.fixture(autouse=True)
def rules_only(monkeypatch):
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestCli:
    """Test suite for `phantom-ledger`."""

    def test_export_writes_workbook(self, tmp_path, statement_pdf, capsys):
        pdf_path = tmp_path / "jan.pdf"
        pdf_path.write_bytes(statement_pdf)
        output = tmp_path / "ledger.xlsx"

        exit_code = main(["--log-level", "ERROR", "export", str(pdf_path), "-o", str(output)])

        assert exit_code == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary["totalTransactions"] == 3
        sheet = load_workbook(output)["Transactions"]
        assert sheet["B2"].value == "JANE DOE"

    def test_missing_file(self, tmp_path):
        assert main(["export", str(tmp_path / "missing.pdf")]) == 2

    def test_no_transactions(self, tmp_path, blank_pdf, capsys):
        pdf_path = tmp_path / "scan.pdf"
        pdf_path.write_bytes(blank_pdf)

        assert main(["export", str(pdf_path), "-o", str(tmp_path / "out.xlsx")]) == 1
        assert "Skipped scan.pdf" in capsys.readouterr().err

    def test_serve_defaults(self):
        args = build_parser().parse_args(["serve"])

        assert args.port == 8787
        assert args.host == "0.0.0.0"
