"""
Command line entry point.

    phantom-ledger serve --port 8787
    phantom-ledger export january.pdf february.pdf -o ledger.xlsx
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from .config import get_settings
from .logging_config import setup_logging

logger = structlog.get_logger()


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "phantom_ledger.main:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
    )
    return 0


def _export(args: argparse.Namespace) -> int:
    from .batch import StatementBatchProcessor
    from .export import build_workbook_bytes
    from .models import UploadedStatement

    statements = []
    for path in args.pdfs:
        if not path.is_file():
            print(f"File not found: {path}", file=sys.stderr)
            return 2
        statements.append(UploadedStatement(file_name=path.name, data=path.read_bytes()))

    result = asyncio.run(StatementBatchProcessor().process(statements))

    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)

    if result.is_empty:
        print("No transactions were extracted from the uploaded PDFs.", file=sys.stderr)
        return 1

    args.output.write_bytes(build_workbook_bytes(result.export_rows()))
    print(json.dumps(result.summary.to_dict(), indent=2))
    logger.info("Export written", path=str(args.output), rows=len(result.transactions))
    return 0


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="phantom-ledger",
        description="Extract and clean transactions from bank statement PDFs.",
    )
    parser.add_argument("--log-level", default=settings.app_log_level, help="Logging level")
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=settings.host, help="Interface to bind")
    serve.add_argument("--port", type=int, default=settings.port, help="Port to run the server on")
    serve.set_defaults(handler=_serve)

    export = commands.add_parser("export", help="Write a workbook from local PDFs")
    export.add_argument("pdfs", nargs="+", type=Path, help="Statement PDFs")
    export.add_argument(
        "-o", "--output",
        type=Path,
        default=Path(settings.export_file_name),
        help="Workbook path",
    )
    export.set_defaults(handler=_export)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
