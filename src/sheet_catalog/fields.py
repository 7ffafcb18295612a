"""
Field resolution and key normalization for spreadsheet rows.

Sheets are hand-edited, so column names drift ("Problem" vs "Common
Problem") and free text drifts in case, quoting and punctuation. pick()
resolves a value through a list of column aliases; norm() and keyify()
produce comparison keys for company identifiers and problem statements.
"""

import re
from collections.abc import Mapping, Sequence

# =============================================================================
# Column aliases (first match wins)
# =============================================================================

COMPANY_ID = ('Company ID', 'ID')
COMPANY_NAME = ('Company Name', 'Company')
WEBSITE = ('Website', 'URL')
LOCATION = ('Location',)
TARGET = ('Target', 'Target Audience')
ORG_TYPES = ('Org Types', 'Org Type', 'Category')

PROBLEM = ('Problem', 'Common Problem')
SOLUTION = ('Solution',)
FEATURE = ('Feature', 'OpenRecovery Feature')

# =============================================================================
# Normalization
# =============================================================================

_SMART_QUOTES = str.maketrans({
    '\u2018': "'",
    '\u2019': "'",
    '\u201a': "'",
    '\u201b': "'",
    '\u2032': "'",
    '\u201c': '"',
    '\u201d': '"',
    '\u201e': '"',
    '\u201f': '"',
    '\u2033': '"',
    '\u00a0': ' ',
})
_NOT_WORD = re.compile(r'[^\w\s-]')
_SEPARATORS = re.compile(r'[-_]+')
_WHITESPACE = re.compile(r'\s+')
_NON_ALNUM = re.compile(r'[^a-z0-9]+')


def norm(value: object) -> str:
    """Lowercase and trim. None becomes ""."""
    if value is None:
        return ''
    return str(value).strip().lower()


def keyify(value: object) -> str:
    """
    Normalize free text for cross-table matching.

    Applies norm(), maps NBSP and smart quotes to their ASCII forms, strips
    everything but letters, digits, whitespace, hyphens and underscores,
    turns hyphens and underscores into spaces and collapses whitespace.
    keyify(keyify(s)) == keyify(s).
    """
    text = norm(value).translate(_SMART_QUOTES)
    text = _NOT_WORD.sub('', text)
    text = _SEPARATORS.sub(' ', text)
    return _WHITESPACE.sub(' ', text).strip()


def slug(value: object) -> str:
    """URL-safe identifier from a display name ("Acme & Co." -> "acme-and-co")."""
    text = norm(value).replace('&', 'and')
    return _NON_ALNUM.sub('-', text).strip('-')


def split_multi(value: str, sep: str = '|') -> list[str]:
    """Split a multi-valued cell, dropping blanks and repeats (order kept)."""
    parts = [part.strip() for part in (value or '').split(sep)]
    return list(dict.fromkeys(part for part in parts if part))


# =============================================================================
# Field resolution
# =============================================================================


def pick(
    row: Mapping[str, str] | None,
    aliases: Sequence[str],
    *,
    case_sensitive: bool = False,
) -> str:
    """
    Return the first alias whose cell is present and non-blank.

    Args:
        row: Parsed row mapping (None is treated as an empty row)
        aliases: Candidate column names in priority order
        case_sensitive: Match header names exactly instead of case-insensitively

    Returns:
        The trimmed cell value, or "" if no alias matches
    """
    if not row:
        return ''

    if case_sensitive:
        lookup = dict(row)
    else:
        # Later header wins when two differ only by case, as in parse_csv
        lookup = {header.strip().lower(): cell for header, cell in row.items()}

    for alias in aliases:
        key = alias if case_sensitive else alias.strip().lower()
        cell = lookup.get(key)
        if cell is not None and str(cell).strip():
            return str(cell).strip()
    return ''
