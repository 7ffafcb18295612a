"""
CSV parsing for spreadsheet exports.

Turns raw CSV text into a list of row mappings keyed by the (trimmed)
header. Quoting follows RFC 4180: doubled quotes escape a literal quote, and
commas and line breaks inside a quoted field are kept. \\r\\n, \\r and \\n
all terminate a row.
"""

import csv
import io

from .errors import MalformedTableError


def _is_blank(cells: list[str]) -> bool:
    return not any(cell.strip() for cell in cells)


def parse_records(text: str) -> list[list[str]]:
    """
    Split CSV text into records, dropping blank ones.

    A trailing record without a final newline is kept.

    Raises:
        MalformedTableError: If the csv module rejects the input
    """
    # newline='' lets the csv reader see \r, \n and \r\n untranslated
    reader = csv.reader(io.StringIO(text, newline=''), strict=False)
    try:
        return [record for record in reader if not _is_blank(record)]
    except csv.Error as e:
        raise MalformedTableError(
            f'Malformed CSV near line {reader.line_num}: {e}',
            context={'line': reader.line_num},
        ) from e


def parse_csv(text: str) -> list[dict[str, str]]:
    """
    Parse CSV text into row mappings.

    The first record is the header. Columns with an empty header are left
    out of every row; cell values are trimmed and missing cells become "".

    Args:
        text: Raw CSV text

    Returns:
        One dict per non-blank data row. Empty input returns [].
    """
    records = parse_records(text or '')
    if not records:
        return []

    headers = [h.strip() for h in records[0]]
    rows = []
    for record in records[1:]:
        row: dict[str, str] = {}
        for i, header in enumerate(headers):
            if not header:
                continue
            row[header] = record[i].strip() if i < len(record) else ''
        rows.append(row)
    return rows
