"""
Command-line entry point: build the catalog JSON from the spreadsheet.

Usage:
    SHEET_ID=... build-catalog --output data.json

Exit status is 0 on success (mismatch warnings included) and 1 on any
fatal error: missing config, failed fetch, empty tab or missing columns.
"""

import argparse
import asyncio
import sys

from .config import Settings, load_settings
from .emitter import format_summary
from .errors import ConfigError, SheetCatalogError
from .fetcher import SheetFetcher
from .logging import configure_logging, get_logger
from .pipeline import CatalogPipeline, PipelineResult

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='build-catalog',
        description='Build the companies/solutions catalog JSON from a published spreadsheet.',
    )
    parser.add_argument('--sheet-id', help='Spreadsheet ID (overrides SHEET_ID)')
    parser.add_argument('-o', '--output', help='Output JSON path (overrides OUTPUT_PATH)')
    parser.add_argument(
        '--allow-empty-tables',
        action='store_true',
        default=None,
        help='Treat an empty tab as having no rows instead of failing',
    )
    parser.add_argument(
        '--case-sensitive-headers',
        action='store_true',
        default=None,
        help='Match column headers exactly',
    )
    parser.add_argument(
        '--allow-missing-company-id',
        dest='require_company_id',
        action='store_false',
        default=None,
        help='Accept a Companies tab without a Company ID column (ids generated from names)',
    )
    parser.add_argument('--json-logs', action='store_true', default=None, help='Emit JSON logs')
    parser.add_argument('--log-level', help='Log level (overrides LOG_LEVEL)')
    return parser


async def run(settings: Settings) -> PipelineResult:
    async with SheetFetcher.from_settings(settings) as fetcher:
        pipeline = CatalogPipeline.from_settings(settings, fetcher=fetcher)
        return await pipeline.run()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(
            SHEET_ID=args.sheet_id,
            OUTPUT_PATH=args.output,
            ALLOW_EMPTY_TABLES=args.allow_empty_tables,
            CASE_SENSITIVE_HEADERS=args.case_sensitive_headers,
            REQUIRE_COMPANY_ID=args.require_company_id,
            LOG_JSON=args.json_logs,
            LOG_LEVEL=args.log_level,
        )
    except ConfigError as e:
        configure_logging()
        logger.error('config.invalid', error=e.message, **e.context)
        print(f'error: {e.message}', file=sys.stderr)
        return 1

    configure_logging(json_output=settings.LOG_JSON, log_level=settings.LOG_LEVEL)

    try:
        result = asyncio.run(run(settings))
    except SheetCatalogError as e:
        logger.error('pipeline.failed', error_type=type(e).__name__, **e.context)
        print(f'error: {e.message}', file=sys.stderr)
        return 1

    print(format_summary(result))
    return 0


if __name__ == '__main__':
    sys.exit(main())
