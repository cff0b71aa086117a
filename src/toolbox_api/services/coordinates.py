"""Cell reference parsing for A1-style spreadsheet addresses."""

from __future__ import annotations

import re

from toolbox_api.utils.exceptions import InvalidCellReferenceError

_CELL_REF_RE = re.compile(r"^\$?([A-Za-z]{1,3})\$?([0-9]+)$")

# Excel's grid limits (XFD1048576)
MAX_COLUMN = 16384
MAX_ROW = 1048576


def column_index(letters: str) -> int:
    """Convert column letters to a 1-based index (A=1, Z=26, AA=27)."""
    if not letters or not letters.isalpha() or not letters.isascii():
        raise InvalidCellReferenceError(letters)
    value = 0
    for letter in letters.upper():
        value = value * 26 + (ord(letter) - ord("A") + 1)
    return value


def parse_cell_reference(reference: str) -> tuple[int, int]:
    """Parse a reference such as ``B3`` into 1-based ``(row, column)``.

    Lowercase letters and ``$`` absolute markers are accepted.

    Raises:
        InvalidCellReferenceError: If the reference is malformed or lies
            outside the worksheet grid.
    """
    match = _CELL_REF_RE.match(reference.strip())
    if not match:
        raise InvalidCellReferenceError(reference)

    col = column_index(match.group(1))
    row = int(match.group(2))
    if not (1 <= row <= MAX_ROW and col <= MAX_COLUMN):
        raise InvalidCellReferenceError(reference)
    return row, col
