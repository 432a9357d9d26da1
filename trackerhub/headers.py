"""Header-row detection and column lookup."""

import re
from collections import namedtuple

from trackerhub.config import HEADER_MIN_MATCHES, HEADER_SCAN_ROWS
from trackerhub.normalize import normalize_text

MISSING = -1

HeaderMatch = namedtuple("HeaderMatch", ["header_index", "column_map"])

# Ordered: a cell claims the first still-unclaimed field it matches.
FIELD_PATTERNS = [
    ("era", re.compile(r"\beras?\b|\balbums?\b")),
    ("name", re.compile(r"^name|song title|track title|track name|^title$")),
    ("notes", re.compile(r"\bnotes?\b|description")),
    ("available_length", re.compile(r"avail")),
    ("track_length", re.compile(r"length|duration|^time$")),
    ("file_date", re.compile(r"file\s*date|^date$|recorded")),
    ("leak_date", re.compile(r"leak")),
    ("quality", re.compile(r"quality")),
    ("links", re.compile(r"links?|url|download")),
]

FIELDS = [name for name, _ in FIELD_PATTERNS]


def match_header_row(row):
    """Map field name → column index for one candidate row (MISSING if absent)."""
    column_map = {f: MISSING for f in FIELDS}
    for index, raw in enumerate(row):
        cell = normalize_text(raw).lower()
        if not cell:
            continue
        for field, pattern in FIELD_PATTERNS:
            if column_map[field] == MISSING and pattern.search(cell):
                column_map[field] = index
                break
    return column_map


def match_count(column_map):
    return sum(1 for index in column_map.values() if index != MISSING)


def locate_header(rows):
    """Find the header among the first HEADER_SCAN_ROWS rows.

    Returns HeaderMatch(-1, {}) when no row names at least
    HEADER_MIN_MATCHES distinct columns. There is no positional fallback.
    """
    for i, row in enumerate(rows[:HEADER_SCAN_ROWS]):
        column_map = match_header_row(row)
        if match_count(column_map) >= HEADER_MIN_MATCHES:
            return HeaderMatch(i, column_map)
    return HeaderMatch(-1, {})


def cell(row, column_map, field):
    """Raw cell for a field; "" for unmapped fields, short rows, and None."""
    index = column_map.get(field, MISSING)
    if index == MISSING or index < 0 or index >= len(row):
        return ""
    value = row[index]
    return "" if value is None else str(value)
