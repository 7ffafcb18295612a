"""
Cross-table reconciliation of Companies, Problems and Company Solutions.

Pipeline:
1. Index Problems by keyify(problem text) (last row wins)
2. Index Companies by normalized id (or name when the row has no id), with a
   secondary name index (first row wins)
3. Walk the Company Solutions link rows, resolve each to a (Company, Problem)
   pair and attach the shared Problem to the Company, deduplicated

Mismatched link rows are never fatal; they accumulate in a
ReconciliationReport for the post-run diagnostic.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import ReconciliationReport
from .fields import (
    COMPANY_ID,
    COMPANY_NAME,
    FEATURE,
    LOCATION,
    ORG_TYPES,
    PROBLEM,
    SOLUTION,
    TARGET,
    WEBSITE,
    keyify,
    norm,
    pick,
    slug,
    split_multi,
)
from .logging import get_logger
from .models.catalog import Company, Problem

logger = get_logger(__name__)

Row = Mapping[str, str]


@dataclass
class CompanyIndex:
    """
    Companies keyed by identity, plus secondary name and emitted-id lookups.

    The identity key is the normalized Company ID when the row has one and
    the normalized name otherwise. slug(name) is only the emitted id, never
    the identity, so "C++ Labs" and "C# Labs" stay distinct companies.
    """

    by_key: dict[str, Company] = field(default_factory=dict)
    by_name: dict[str, Company] = field(default_factory=dict)
    by_id: dict[str, Company] = field(default_factory=dict)
    skipped: int = 0
    duplicates: int = 0

    def add(self, company: Company, key: str | None = None) -> bool:
        """
        Index a company under key (default: its normalized id).

        Returns False if the key was already taken. A generated id that
        collides with one already emitted gets a numeric suffix.
        """
        key = norm(company.id) if key is None else key
        if key in self.by_key:
            return False
        emitted = norm(company.id)
        if emitted in self.by_id:
            company.id = self._unique_id(company.id)
            emitted = norm(company.id)
        self.by_key[key] = company
        self.by_id[emitted] = company
        self.by_name.setdefault(norm(company.name), company)
        return True

    def _unique_id(self, base: str) -> str:
        n = 2
        while norm(f'{base}-{n}') in self.by_id:
            n += 1
        return f'{base}-{n}'

    def _lookup(self, value: str) -> Company | None:
        key = norm(value)
        return self.by_key.get(key) or self.by_id.get(key) or self.by_name.get(key)

    def resolve(self, company_id: str = '', company_name: str = '') -> Company | None:
        """
        Find a company by id, falling back to name.

        An id that matches no company is also tried as a name, since link
        sheets sometimes carry names in the id column.
        """
        if company_id:
            found = self._lookup(company_id)
            if found is not None:
                return found
        if company_name:
            return self.by_name.get(norm(company_name)) or self._lookup(company_name)
        return None

    def companies(self) -> list[Company]:
        """Companies in first-seen order."""
        return list(self.by_key.values())

    def __len__(self) -> int:
        return len(self.by_key)


@dataclass
class ReconciliationResult:
    """Reconciled companies plus indexing counters and the mismatch report."""

    companies: list[Company]
    problems_indexed: int = 0
    companies_indexed: int = 0
    skipped_companies: int = 0
    duplicate_companies: int = 0
    report: ReconciliationReport = field(default_factory=ReconciliationReport)

    def to_dict(self) -> dict[str, Any]:
        """Convert counters to a dictionary for logging."""
        return {
            'problems_indexed': self.problems_indexed,
            'companies_indexed': self.companies_indexed,
            'skipped_companies': self.skipped_companies,
            'duplicate_companies': self.duplicate_companies,
            **self.report.to_dict(),
        }


def build_problem_index(
    rows: Iterable[Row],
    *,
    case_sensitive: bool = False,
) -> dict[str, Problem]:
    """
    Index Problems rows by keyify(problem text).

    A later row with the same normalized text replaces the earlier one.
    Rows with no problem text are ignored.
    """
    index: dict[str, Problem] = {}
    for row in rows:
        text = pick(row, PROBLEM, case_sensitive=case_sensitive)
        if not text:
            continue
        problem = Problem(
            problem=text,
            solution=pick(row, SOLUTION, case_sensitive=case_sensitive),
            feature=pick(row, FEATURE, case_sensitive=case_sensitive),
        )
        if problem.key in index:
            logger.debug('reconcile.problem_overwritten', problem=text)
        index[problem.key] = problem
    return index


def company_from_row(row: Row, *, case_sensitive: bool = False) -> Company | None:
    """Build a Company from a Companies row, or None if it has neither id nor name."""
    company_id = pick(row, COMPANY_ID, case_sensitive=case_sensitive)
    name = pick(row, COMPANY_NAME, case_sensitive=case_sensitive)
    if not company_id and not name:
        return None

    return Company(
        id=company_id or slug(name) or norm(name).replace(' ', '-'),
        name=name or company_id,
        website=pick(row, WEBSITE, case_sensitive=case_sensitive),
        location=pick(row, LOCATION, case_sensitive=case_sensitive),
        target=pick(row, TARGET, case_sensitive=case_sensitive),
        org_types=split_multi(pick(row, ORG_TYPES, case_sensitive=case_sensitive)),
    )


def build_company_index(
    rows: Iterable[Row],
    *,
    case_sensitive: bool = False,
) -> CompanyIndex:
    """
    Index Companies rows; the first row for a given identity wins.

    Rows with a Company ID are keyed by it; rows without one are keyed by
    their normalized name.
    """
    index = CompanyIndex()
    for row in rows:
        company = company_from_row(row, case_sensitive=case_sensitive)
        if company is None:
            index.skipped += 1
            continue
        raw_id = pick(row, COMPANY_ID, case_sensitive=case_sensitive)
        key = norm(raw_id) if raw_id else norm(company.name)
        if not index.add(company, key):
            index.duplicates += 1
            logger.warning(
                'reconcile.duplicate_company',
                company_id=company.id,
                company_name=company.name,
            )
    return index


def attach_solutions(
    index: CompanyIndex,
    problems: Mapping[str, Problem],
    link_rows: Iterable[Row],
    *,
    case_sensitive: bool = False,
) -> ReconciliationReport:
    """
    Attach problems to companies according to the link rows.

    Returns:
        Report of matched, duplicate, skipped and unresolved link rows
    """
    report = ReconciliationReport()

    for row in link_rows:
        company_id = pick(row, COMPANY_ID, case_sensitive=case_sensitive)
        company_name = pick(row, COMPANY_NAME, case_sensitive=case_sensitive)
        problem_text = pick(row, PROBLEM, case_sensitive=case_sensitive)

        if not (company_id or company_name) or not problem_text:
            report.record_skipped()
            continue

        company = index.resolve(company_id, company_name)
        if company is None:
            report.record_unmatched_company(company_id or company_name)
            logger.debug(
                'reconcile.unmatched_company',
                company_id=company_id,
                company_name=company_name,
            )
            continue

        problem = problems.get(keyify(problem_text))
        if problem is None:
            report.record_unmatched_problem(problem_text)
            logger.debug(
                'reconcile.unmatched_problem',
                company_id=company.id,
                problem=problem_text,
            )
            continue

        if company.add_solution(problem):
            report.record_match()
        else:
            report.record_duplicate()

    return report


def reconcile(
    company_rows: Iterable[Row],
    problem_rows: Iterable[Row],
    link_rows: Iterable[Row],
    *,
    case_sensitive: bool = False,
) -> ReconciliationResult:
    """
    Build both indices and attach solutions in a single pass over the links.

    Args:
        company_rows: Parsed Companies table
        problem_rows: Parsed Problems table
        link_rows: Parsed Company Solutions table
        case_sensitive: Match header names exactly

    Returns:
        ReconciliationResult with companies in Companies-table order
    """
    problems = build_problem_index(problem_rows, case_sensitive=case_sensitive)
    index = build_company_index(company_rows, case_sensitive=case_sensitive)
    report = attach_solutions(index, problems, link_rows, case_sensitive=case_sensitive)

    result = ReconciliationResult(
        companies=index.companies(),
        problems_indexed=len(problems),
        companies_indexed=len(index),
        skipped_companies=index.skipped,
        duplicate_companies=index.duplicates,
        report=report,
    )
    logger.info('reconcile.completed', **result.to_dict())
    return result
