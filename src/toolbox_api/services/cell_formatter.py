"""Type-driven value coercion and number formats for generated cells.

Every column carries a semantic ``ColumnType``. For each input cell the
formatter decides what value lands in the worksheet and which Excel number
format is applied to it:

    ============  ======================  ==========================
    Column type   Stored value            Default number format
    ============  ======================  ==========================
    number        rounded integer         ``0``
    percent       float                   ``0.00%``
    currency      float                   ``$#,##0``
    date          datetime                ``yyyy-mm-dd``
    boolean       bool                    (none)
    text          str                     (none)
    ============  ======================  ==========================

Values that cannot be coerced are stored as the raw literal so that a
malformed cell never aborts a workbook.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import pandas as pd

from toolbox_api.models import Cell, CellKind, CellValue, Column, ColumnType

PERCENT_FORMAT = "0.00%"
CURRENCY_FORMAT = "$#,##0"
INTEGER_FORMAT = "0"
DATE_FORMAT = "yyyy-mm-dd"

_TYPE_DEFAULT_FORMATS: dict[ColumnType, str] = {
    ColumnType.PERCENT: PERCENT_FORMAT,
    ColumnType.CURRENCY: CURRENCY_FORMAT,
}

_FORMULA_FORMATTED_TYPES = frozenset(
    {ColumnType.PERCENT, ColumnType.CURRENCY, ColumnType.NUMBER, ColumnType.DATE}
)

_TRUE_STRINGS = frozenset({"true", "1", "yes", "y", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "n", "off", ""})
_CURRENCY_SYMBOLS = ("$", "€", "£", "¥")


@dataclass(frozen=True)
class RenderedCell:
    """The value and number format a single cell is written with."""

    value: Any
    number_format: str | None = None
    is_formula: bool = False


def resolve_format(column: Column) -> str | None:
    """Return the column's explicit format or its type's default, if any."""
    if column.format:
        return column.format
    return _TYPE_DEFAULT_FORMATS.get(column.type)


def format_cell(column: Column, cell: Cell) -> RenderedCell:
    """Decide the stored value and number format of one cell."""
    if cell.type is CellKind.FORMULA:
        return _format_formula(column, cell.value)
    return _format_static(column, cell.value)


def _format_formula(column: Column, value: CellValue) -> RenderedCell:
    if value is None or value == "":
        return RenderedCell(value=None)
    expression = str(value).strip()
    if not expression.startswith("="):
        expression = f"={expression}"
    number_format = (
        resolve_format(column) if column.type in _FORMULA_FORMATTED_TYPES else None
    )
    return RenderedCell(value=expression, number_format=number_format, is_formula=True)


def _format_static(column: Column, value: CellValue) -> RenderedCell:
    if value is None:
        return RenderedCell(value=None)

    column_type = column.type
    if column_type is ColumnType.NUMBER:
        number = parse_number(value)
        stored = round_half_up(number) if number is not None else value
        return RenderedCell(value=stored, number_format=column.format or INTEGER_FORMAT)
    if column_type is ColumnType.PERCENT or column_type is ColumnType.CURRENCY:
        number = parse_number(value)
        return RenderedCell(
            value=number if number is not None else value,
            number_format=resolve_format(column),
        )
    if column_type is ColumnType.DATE:
        parsed = parse_date(value)
        return RenderedCell(
            value=parsed if parsed is not None else value,
            number_format=column.format or DATE_FORMAT,
        )
    if column_type is ColumnType.BOOLEAN:
        return RenderedCell(value=to_boolean(value), number_format=column.format)
    return RenderedCell(value=str(value), number_format=column.format)


# ---------------------------------------------------------------------- #
# Coercion helpers
# ---------------------------------------------------------------------- #


def parse_number(value: CellValue) -> float | None:
    """Parse a finite number from a literal, or None if it is not one.

    Thousands separators, a leading currency symbol and a trailing percent
    sign are accepted, so ``"$1,200"`` is 1200 and ``"50%"`` is 0.5.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int | float):
        number = float(value)
    else:
        text = value.strip().replace(",", "")
        percent = text.endswith("%")
        if percent:
            text = text[:-1].rstrip()
        sign = ""
        if text.startswith(("-", "+")):
            sign, text = text[0], text[1:].lstrip()
        if text.startswith(_CURRENCY_SYMBOLS):
            text = text[1:].lstrip()
        if not text:
            return None
        try:
            number = float(sign + text)
        except ValueError:
            return None
        if percent:
            number /= 100
    if not math.isfinite(number):
        return None
    return number


def round_half_up(number: float) -> int:
    """Round to the nearest integer with halves rounded towards +infinity."""
    return math.floor(number + 0.5)


def parse_date(value: CellValue) -> datetime | None:
    """Parse a calendar date, returning a naive datetime or None.

    Strings go through pandas' parser; numbers are epoch milliseconds.
    Timezone-aware results are converted to UTC and made naive, since
    Excel cells carry no timezone.
    """
    if isinstance(value, bool) or value is None:
        return None
    try:
        if isinstance(value, int | float):
            parsed = pd.to_datetime(value, unit="ms", errors="coerce")
        else:
            text = value.strip()
            if not text:
                return None
            parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, OverflowError, TypeError):
        return None
    if pd.isna(parsed):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.tz_convert("UTC").tz_localize(None)
    result: datetime = parsed.to_pydatetime()
    return result


def to_boolean(value: CellValue) -> bool:
    """Coerce a literal to a boolean, recognising common true/false words."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    return True
