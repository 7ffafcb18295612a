"""
Pipeline orchestrator for building the catalog from the spreadsheet.

Provides end-to-end processing:
1. Fetch the Companies, Problems and Company Solutions tabs (concurrently)
2. Validate each tab's required columns before any cross-referencing
3. Reconcile link rows against the Company and Problem indices
4. Write the JSON document (wholesale overwrite)
5. Report counts and non-fatal mismatch warnings
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from .config import Settings
from .emitter import build_document, write_document
from .errors import ReconciliationReport
from .fetcher import SheetFetcher
from .logging import PipelineTimer, get_logger, logging_context
from .reconciler import reconcile
from .schema import COMPANIES_TABLE, LINKS_TABLE, PROBLEMS_TABLE, require_columns, required_columns

logger = get_logger(__name__)

TABLES = (COMPANIES_TABLE, PROBLEMS_TABLE, LINKS_TABLE)


@dataclass
class PipelineResult:
    """Result of one catalog build."""

    run_id: str
    output_path: Path

    # Table sizes
    rows_loaded: dict[str, int] = field(default_factory=dict)

    # Reconciliation statistics
    companies_written: int = 0
    problems_indexed: int = 0
    skipped_companies: int = 0
    duplicate_companies: int = 0
    report: ReconciliationReport = field(default_factory=ReconciliationReport)

    # Timing
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: datetime | None = None
    stage_timings: dict[str, float] = field(default_factory=dict)

    @property
    def matched_links(self) -> int:
        return self.report.matched_links

    @property
    def unmatched_companies(self) -> int:
        return self.report.unmatched_companies

    @property
    def unmatched_problems(self) -> list[str]:
        return self.report.unmatched_problems

    @property
    def warnings(self) -> list[str]:
        return self.report.warnings()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'run_id': self.run_id,
            'output_path': str(self.output_path),
            'rows_loaded': self.rows_loaded,
            'companies_written': self.companies_written,
            'problems_indexed': self.problems_indexed,
            'skipped_companies': self.skipped_companies,
            'duplicate_companies': self.duplicate_companies,
            **self.report.to_dict(),
            'stage_timings': self.stage_timings,
            'warnings': self.warnings,
        }


class CatalogPipeline:
    """
    End-to-end build of the catalog JSON from the spreadsheet tabs.

    Any fatal error (fetch, empty tab, missing columns) propagates before
    the output file is touched. Reconciliation mismatches are only reported.

    Usage:
        async with SheetFetcher(sheet_id) as fetcher:
            pipeline = CatalogPipeline(fetcher, "data.json")
            result = await pipeline.run()
    """

    def __init__(
        self,
        fetcher: SheetFetcher,
        output_path: str | Path,
        case_sensitive: bool = False,
        require_company_id: bool = True,
    ):
        """
        Initialize the pipeline.

        Args:
            fetcher: Loader for the spreadsheet tabs
            output_path: Where the JSON document is written
            case_sensitive: Match column headers exactly instead of case-insensitively
            require_company_id: Fail when the Companies tab has no Company ID column
        """
        self.fetcher = fetcher
        self.output_path = Path(output_path)
        self.case_sensitive = case_sensitive
        self.require_company_id = require_company_id

    @classmethod
    def from_settings(cls, settings: Settings, fetcher: SheetFetcher | None = None) -> CatalogPipeline:
        return cls(
            fetcher=fetcher or SheetFetcher.from_settings(settings),
            output_path=settings.OUTPUT_PATH,
            case_sensitive=settings.CASE_SENSITIVE_HEADERS,
            require_company_id=settings.REQUIRE_COMPANY_ID,
        )

    def validate(self, tables: dict[str, list[dict[str, str]]]) -> None:
        """Check required columns of every non-empty table."""
        for name, rows in tables.items():
            if not rows:
                # Only reachable with allow_empty; nothing to validate
                continue
            require_columns(
                name,
                rows,
                required_columns(name, require_company_id=self.require_company_id),
                case_sensitive=self.case_sensitive,
            )

    async def run(self) -> PipelineResult:
        """
        Fetch, validate, reconcile and write the catalog.

        Raises:
            FetchError, EmptyTableError, SchemaError: Fatal; no output is written
        """
        run_id = uuid.uuid4().hex[:12]
        timer = PipelineTimer()
        result = PipelineResult(run_id=run_id, output_path=self.output_path)

        with logging_context(run_id=run_id):
            logger.info('pipeline.started', tables=list(TABLES), output=str(self.output_path))

            with timer.stage('fetch'):
                loaded = await self.fetcher.load_tables(TABLES)
            tables = dict(zip(TABLES, loaded))
            result.rows_loaded = {name: len(rows) for name, rows in tables.items()}

            with timer.stage('validate'):
                self.validate(tables)

            with timer.stage('reconcile'):
                reconciled = reconcile(
                    tables[COMPANIES_TABLE],
                    tables[PROBLEMS_TABLE],
                    tables[LINKS_TABLE],
                    case_sensitive=self.case_sensitive,
                )

            with timer.stage('write'):
                document = build_document(reconciled.companies)
                result.output_path = write_document(document, self.output_path)

            result.companies_written = len(document.companies)
            result.problems_indexed = reconciled.problems_indexed
            result.skipped_companies = reconciled.skipped_companies
            result.duplicate_companies = reconciled.duplicate_companies
            result.report = reconciled.report
            result.completed_at = datetime.now()
            result.stage_timings = timer.summary()['stages']

            for warning in result.warnings:
                logger.warning('pipeline.mismatch', detail=warning)

            logger.info(
                'pipeline.completed',
                companies=result.companies_written,
                matched_links=result.matched_links,
                unmatched_companies=result.unmatched_companies,
                unmatched_problems=len(result.unmatched_problems),
                total_ms=timer.summary()['total_ms'],
            )

        return result
