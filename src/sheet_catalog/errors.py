"""
Custom exceptions and mismatch reporting for the sheet catalog build.

Provides:
- Typed exception hierarchy for the fatal failure modes (config, fetch, schema)
- Error context preservation for debugging
- A non-fatal report that accumulates reconciliation mismatches
"""

from dataclasses import dataclass, field
from typing import Any


class SheetCatalogError(Exception):
    """Base exception for all sheet catalog errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigError(SheetCatalogError):
    """Required configuration is missing or invalid."""

    pass


# =============================================================================
# Source Errors
# =============================================================================


class SourceError(SheetCatalogError):
    """Base class for errors loading a table from the spreadsheet source."""

    pass


class FetchError(SourceError):
    """Transport failure or non-2xx response while fetching a table."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.status_code = status_code


class EmptyTableError(SourceError):
    """A fetched table parsed to zero rows (usually the wrong tab was returned)."""

    pass


class MalformedTableError(SourceError):
    """A fetched table is not parseable CSV (e.g. a field over the size limit)."""

    pass


# =============================================================================
# Schema Errors
# =============================================================================


class SchemaError(SheetCatalogError):
    """A table is missing one or more required columns."""

    @property
    def missing(self) -> list[str]:
        return list(self.context.get('missing', []))

    @property
    def found(self) -> list[str]:
        return list(self.context.get('found', []))


# =============================================================================
# Non-fatal Reconciliation Mismatches
# =============================================================================


@dataclass
class ReconciliationReport:
    """
    Mismatches collected while attaching link rows to companies.

    Spreadsheet data is hand-edited, so stray rows are expected. Nothing
    recorded here fails the run; it is surfaced as warnings afterwards.
    """

    matched_links: int = 0
    duplicate_links: int = 0
    skipped_links: int = 0
    unmatched_companies: int = 0
    unmatched_company_refs: list[str] = field(default_factory=list)
    unmatched_problems: list[str] = field(default_factory=list)

    def record_match(self) -> None:
        self.matched_links += 1

    def record_duplicate(self) -> None:
        self.duplicate_links += 1

    def record_skipped(self) -> None:
        self.skipped_links += 1

    def record_unmatched_company(self, ref: str) -> None:
        """Count a link row whose company could not be resolved."""
        self.unmatched_companies += 1
        if ref and ref not in self.unmatched_company_refs:
            self.unmatched_company_refs.append(ref)

    def record_unmatched_problem(self, text: str) -> None:
        """Remember raw problem text that had no entry in the Problems table."""
        if text not in self.unmatched_problems:
            self.unmatched_problems.append(text)

    @property
    def has_mismatches(self) -> bool:
        return self.unmatched_companies > 0 or len(self.unmatched_problems) > 0

    def warnings(self) -> list[str]:
        """Human-readable warning lines for the post-run diagnostic."""
        lines = []
        if self.unmatched_companies:
            lines.append(
                f'{self.unmatched_companies} "Company Solutions" row(s) reference a company '
                f'missing from "Companies": {", ".join(self.unmatched_company_refs)}'
            )
        if self.unmatched_problems:
            lines.append(
                f'{len(self.unmatched_problems)} problem(s) referenced in "Company Solutions" '
                f'are missing from "Problems": {"; ".join(self.unmatched_problems)}'
            )
        if self.skipped_links:
            lines.append(
                f'{self.skipped_links} "Company Solutions" row(s) skipped '
                f'(missing company or problem text)'
            )
        return lines

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'matched_links': self.matched_links,
            'duplicate_links': self.duplicate_links,
            'skipped_links': self.skipped_links,
            'unmatched_companies': self.unmatched_companies,
            'unmatched_company_refs': self.unmatched_company_refs,
            'unmatched_problems': self.unmatched_problems,
        }
