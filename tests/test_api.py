"""
Tests for the HTTP API.
"""

import base64
import io
import json

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from phantom_ledger.batch import StatementBatchProcessor
from phantom_ledger.cleaning import RuleBasedCleaner
from phantom_ledger.main import (
    MAX_ENCODED_HEADER_LENGTH,
    app,
    encode_header,
    encoded_header_value,
    get_processor,
)


def decode_header(value: str):
    return json.loads(base64.b64decode(value).decode("utf-8"))


def pdf_part(name: str, data: bytes):
    return ("pdfs", (name, data, "application/pdf"))


class FailingProcessor(StatementBatchProcessor):
    async def process(self, files):
        raise RuntimeError("boom")


@pytest.fixture
def client():
    app.dependency_overrides[get_processor] = lambda: StatementBatchProcessor(cleaner=RuleBasedCleaner())
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestHeaderEncoding:
    """Test suite for base64 JSON response headers."""

    def test_round_trip_keeps_unicode(self):
        assert decode_header(encode_header({"file": "café.pdf"})) == {"file": "café.pdf"}

    def test_oversized_value_becomes_empty_list(self):
        value = ["x" * 100] * 100

        encoded = encoded_header_value(value)

        assert len(encode_header(value)) > MAX_ENCODED_HEADER_LENGTH
        assert decode_header(encoded) == []


class TestProcessEndpoint:
    """Test suite for the upload endpoint."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_requires_pdf_uploads(self, client):
        response = client.post("/process", files=[("pdfs", ("notes.txt", b"hello", "text/plain"))])

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == 'Upload at least one PDF file using field name "pdfs".'
        assert body["summary"]["totalFiles"] == 0
        assert body["warnings"] == []

    def test_no_transactions_is_unprocessable(self, client, blank_pdf):
        response = client.post("/process", files=[pdf_part("scan.pdf", blank_pdf)])

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "No transactions were extracted from the uploaded PDFs."
        assert body["summary"]["failedFiles"] == 1
        assert body["warnings"][0].startswith("Skipped scan.pdf:")

    def test_returns_workbook_with_summary_headers(self, client, statement_pdf):
        response = client.post("/process", files=[pdf_part("jan.pdf", statement_pdf)])

        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert "PhantomLedgerExport.xlsx" in response.headers["content-disposition"]

        summary = decode_header(response.headers["x-phantom-summary"])
        assert summary["totalTransactions"] == 3
        assert summary["net"] == 192.9
        assert decode_header(response.headers["x-phantom-warnings"]) == []

        preview = decode_header(response.headers["x-phantom-preview"])
        assert preview[0] == {
            "date": "01/05/2024",
            "amount": 250.0,
            "description": "Zelle payment from JANE DOE Conf# 12345",
            "sourceFile": "jan.pdf",
        }

        sheet = load_workbook(io.BytesIO(response.content))["Transactions"]
        assert sheet.max_row == 4
        assert sheet["B2"].value == "JANE DOE"

    def test_unexpected_error_returns_500(self, client, statement_pdf):
        app.dependency_overrides[get_processor] = lambda: FailingProcessor(cleaner=RuleBasedCleaner())

        response = client.post("/process", files=[pdf_part("jan.pdf", statement_pdf)])

        assert response.status_code == 500
        assert response.json()["error"] == "Unexpected server error."
