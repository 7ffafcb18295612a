"""
Tests for required-column validation.
"""

import pytest

from sheet_catalog.errors import SchemaError, SheetCatalogError
from sheet_catalog.schema import (
    COMPANIES_TABLE,
    LINKS_TABLE,
    PROBLEMS_TABLE,
    REQUIRED_COLUMNS,
    require_columns,
    required_columns,
)


class TestRequireColumns:
    def test_all_present(self):
        rows = [{'Problem': 'x', 'Solution': 'y', 'Feature': 'z'}]
        require_columns(PROBLEMS_TABLE, rows, REQUIRED_COLUMNS[PROBLEMS_TABLE])

    def test_alias_satisfies_group(self):
        rows = [{'Common Problem': 'x', 'Solution': 'y', 'OpenRecovery Feature': 'z'}]
        require_columns(PROBLEMS_TABLE, rows, REQUIRED_COLUMNS[PROBLEMS_TABLE])

    def test_missing_solution_listed(self):
        rows = [{'Problem': 'x', 'Feature': 'z'}]

        with pytest.raises(SchemaError) as exc_info:
            require_columns(PROBLEMS_TABLE, rows, REQUIRED_COLUMNS[PROBLEMS_TABLE])

        err = exc_info.value
        assert isinstance(err, SheetCatalogError)
        assert err.missing == ['Solution']
        assert err.found == ['Problem', 'Feature']
        assert 'Solution' in err.message
        assert 'Columns found: Problem, Feature' in err.message
        assert 'wrong tab' in err.message

    def test_wrong_tab_reports_every_group(self):
        rows = [{'Company ID': 'c1', 'Company Name': 'Acme'}]

        with pytest.raises(SchemaError) as exc_info:
            require_columns(PROBLEMS_TABLE, rows, REQUIRED_COLUMNS[PROBLEMS_TABLE])

        assert exc_info.value.missing == ['Problem', 'Solution', 'Feature']

    def test_links_accept_company_id_only(self):
        rows = [{'Company ID': 'c1', 'Problem': 'x'}]
        require_columns(LINKS_TABLE, rows, REQUIRED_COLUMNS[LINKS_TABLE])

    def test_case_insensitive_by_default(self):
        rows = [{'problem': 'x', 'SOLUTION': 'y', 'feature': 'z'}]
        require_columns(PROBLEMS_TABLE, rows, REQUIRED_COLUMNS[PROBLEMS_TABLE])

    def test_case_sensitive_mode(self):
        rows = [{'problem': 'x', 'Solution': 'y', 'Feature': 'z'}]

        with pytest.raises(SchemaError) as exc_info:
            require_columns(
                PROBLEMS_TABLE,
                rows,
                REQUIRED_COLUMNS[PROBLEMS_TABLE],
                case_sensitive=True,
            )

        assert exc_info.value.missing == ['Problem']

    def test_no_rows_reports_none_found(self):
        with pytest.raises(SchemaError) as exc_info:
            require_columns(PROBLEMS_TABLE, [], REQUIRED_COLUMNS[PROBLEMS_TABLE])

        assert '(none)' in exc_info.value.message


class TestCompanyIdRequirement:
    """Companies must carry a Company ID column unless explicitly relaxed."""

    def test_company_id_required_by_default(self):
        rows = [{'Company Name': 'Acme', 'Website': 'https://acme.example'}]

        with pytest.raises(SchemaError) as exc_info:
            require_columns(COMPANIES_TABLE, rows, required_columns(COMPANIES_TABLE))

        assert exc_info.value.missing == ['Company ID']
        assert exc_info.value.context['table'] == COMPANIES_TABLE

    def test_id_alias_satisfies_requirement(self):
        rows = [{'ID': 'c1', 'Company Name': 'Acme'}]
        require_columns(COMPANIES_TABLE, rows, required_columns(COMPANIES_TABLE))

    def test_relaxed_mode_accepts_name_only(self):
        rows = [{'Company Name': 'Acme'}]
        require_columns(
            COMPANIES_TABLE,
            rows,
            required_columns(COMPANIES_TABLE, require_company_id=False),
        )

    def test_other_tables_unchanged(self):
        assert required_columns(PROBLEMS_TABLE) == REQUIRED_COLUMNS[PROBLEMS_TABLE]
        assert required_columns(LINKS_TABLE) == REQUIRED_COLUMNS[LINKS_TABLE]
