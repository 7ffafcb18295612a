"""
Column-presence checks for fetched tables.

The most common failure of a spreadsheet export is the source silently
returning the wrong tab. Checking required columns right after the fetch
turns that into one actionable error instead of an empty or confusing
catalog.
"""

from collections.abc import Mapping, Sequence

from .errors import SchemaError
from .fields import COMPANY_ID, COMPANY_NAME, FEATURE, PROBLEM, SOLUTION

# Each entry is a group of acceptable aliases; any one satisfies the group
ColumnGroup = Sequence[str]

COMPANIES_TABLE = 'Companies'
PROBLEMS_TABLE = 'Problems'
LINKS_TABLE = 'Company Solutions'

REQUIRED_COLUMNS: dict[str, list[ColumnGroup]] = {
    COMPANIES_TABLE: [COMPANY_NAME],
    PROBLEMS_TABLE: [PROBLEM, SOLUTION, FEATURE],
    LINKS_TABLE: [COMPANY_NAME + COMPANY_ID, PROBLEM],
}


def required_columns(table: str, *, require_company_id: bool = True) -> list[ColumnGroup]:
    """
    Required column groups for a table.

    With require_company_id the Companies tab must also carry a Company ID
    column; without it ids are generated from company names.
    """
    groups = list(REQUIRED_COLUMNS[table])
    if table == COMPANIES_TABLE and require_company_id:
        groups.insert(0, COMPANY_ID)
    return groups


def require_columns(
    table: str,
    rows: Sequence[Mapping[str, str]],
    required: Sequence[ColumnGroup],
    *,
    case_sensitive: bool = False,
) -> None:
    """
    Fail if the table's first row lacks any required column group.

    Args:
        table: Table name, used in the error message
        rows: Parsed rows of the table
        required: Alias groups; each must be matched by at least one column
        case_sensitive: Compare header names exactly

    Raises:
        SchemaError: Naming the missing groups and every column found
    """
    found = list(rows[0].keys()) if rows else []
    present = set(found) if case_sensitive else {c.lower() for c in found}

    missing = []
    for group in required:
        names = group if case_sensitive else [alias.lower() for alias in group]
        if not any(name in present for name in names):
            missing.append(group[0])

    if missing:
        raise SchemaError(
            f'Sheet "{table}" is missing required columns: {", ".join(missing)}.\n'
            f'Columns found: {", ".join(found) or "(none)"}\n'
            f'This usually means the CSV export returned the wrong tab, '
            f'or the tab name changed.',
            context={'table': table, 'missing': missing, 'found': found},
        )
