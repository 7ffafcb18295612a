"""Serialization of the reconciled catalog to a JSON file."""

import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from .models.catalog import CatalogDocument, Company

if TYPE_CHECKING:
    from .pipeline import PipelineResult


def build_document(companies: Iterable[Company]) -> CatalogDocument:
    return CatalogDocument(companies=list(companies))


def write_document(document: CatalogDocument, path: str | Path) -> Path:
    """
    Write the document, replacing any existing file wholesale.

    The JSON goes to a temporary file in the target directory first, so an
    interrupted write never leaves a truncated catalog behind.

    Returns:
        The resolved output path
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f'.{target.name}.', dir=target.parent)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(document.to_json())
            f.write('\n')
        # mkstemp creates 0600 files
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return target


def format_summary(result: 'PipelineResult') -> str:
    """One-line summary printed on success."""
    return (
        f'Wrote {result.output_path} with {result.companies_written} companies '
        f'({result.matched_links} solutions matched, '
        f'{result.unmatched_companies} unmatched company rows, '
        f'{len(result.unmatched_problems)} unmatched problems)'
    )
