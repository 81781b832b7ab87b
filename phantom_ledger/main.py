"""
FastAPI application: upload statement PDFs, download the cleaned workbook.
"""

import asyncio
import base64
import json
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import structlog
from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from .batch import StatementBatchProcessor
from .config import get_settings
from .export import XLSX_MEDIA_TYPE, build_workbook_bytes
from .logging_config import setup_logging
from .models import BatchSummary, UploadedStatement

logger = structlog.get_logger()
settings = get_settings()

MAX_ENCODED_HEADER_LENGTH = 7000
NO_TRANSACTIONS_ERROR = "No transactions were extracted from the uploaded PDFs."

SUMMARY_HEADER = "X-Phantom-Summary"
WARNINGS_HEADER = "X-Phantom-Warnings"
PREVIEW_HEADER = "X-Phantom-Preview"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging()
    logger.info("Starting Phantom Ledger API", env=settings.app_env)
    yield
    logger.info("Shutting down Phantom Ledger API")


app = FastAPI(
    title="Phantom Ledger",
    description="Bank statement PDF extraction and normalization",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[
        "Content-Disposition",
        SUMMARY_HEADER,
        WARNINGS_HEADER,
        PREVIEW_HEADER,
    ],
)


# Response models
class HealthResponse(BaseModel):
    status: str


class ErrorResponse(BaseModel):
    error: str
    summary: Dict[str, Any]
    warnings: List[str]


def get_processor() -> StatementBatchProcessor:
    return StatementBatchProcessor()


def encode_header(value: Any) -> str:
    """Base64 of the compact JSON encoding."""
    payload = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def encoded_header_value(value: Any) -> str:
    """Encoded value, or an encoded empty list when it would not fit in a header."""
    encoded = encode_header(value)
    if len(encoded) <= MAX_ENCODED_HEADER_LENGTH:
        return encoded
    return encode_header([])


def error_response(
    status_code: int,
    message: str,
    summary: Optional[BatchSummary] = None,
    warnings: Optional[List[str]] = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=message,
        summary=(summary or BatchSummary()).to_dict(),
        warnings=warnings or [],
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


def is_pdf_name(file_name: Optional[str]) -> bool:
    return bool(file_name) and file_name.lower().endswith(".pdf")


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error", path=request.url.path, error=str(exc))
    return error_response(500, "Unexpected server error.")


# API Endpoints
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="ok")


@app.post("/process")
async def process_statements(
    pdfs: Optional[List[UploadFile]] = File(default=None),
    processor: StatementBatchProcessor = Depends(get_processor),
):
    """Extract transactions from the uploaded PDFs and return the workbook."""
    uploads = [f for f in (pdfs or []) if is_pdf_name(f.filename)]

    if not uploads:
        return error_response(400, 'Upload at least one PDF file using field name "pdfs".')

    if len(uploads) > settings.max_files:
        return error_response(400, f"At most {settings.max_files} files can be uploaded at once.")

    statements = []
    for upload in uploads:
        data = await upload.read()
        if len(data) > settings.max_file_bytes:
            logger.warning("Upload over size limit", file=upload.filename, size=len(data))
            return error_response(400, f"A file exceeds the {settings.max_file_mb}MB upload limit.")
        statements.append(UploadedStatement(file_name=upload.filename, data=data))

    result = await processor.process(statements)
    if result.is_empty:
        return error_response(422, NO_TRANSACTIONS_ERROR, result.summary, result.warnings)

    workbook = await asyncio.to_thread(build_workbook_bytes, result.export_rows())

    return Response(
        content=workbook,
        media_type=XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{settings.export_file_name}"',
            SUMMARY_HEADER: encoded_header_value(result.summary.to_dict()),
            WARNINGS_HEADER: encoded_header_value(result.warnings),
            PREVIEW_HEADER: encoded_header_value(result.preview(settings.preview_rows)),
        },
    )
