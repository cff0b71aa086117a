"""Places table definitions onto openpyxl worksheets."""

from __future__ import annotations

from dataclasses import dataclass, field

from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE, Cell
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from toolbox_api.models import Table
from toolbox_api.services.cell_formatter import format_cell
from toolbox_api.services.coordinates import parse_cell_reference
from toolbox_api.services.excel_styles import ExcelConfig

AUTOFIT_PADDING = 2


@dataclass
class TablePlacement:
    """Where the parts of a placed table ended up on the worksheet.

    Row attributes are None when the corresponding part was not emitted.
    ``next_row`` is the first row below the table.
    """

    start_row: int
    start_col: int
    end_col: int
    title_row: int | None = None
    header_row: int | None = None
    first_data_row: int | None = None
    last_data_row: int | None = None
    next_row: int = 0
    autofilter_ref: str | None = None
    column_widths: dict[str, float] = field(default_factory=dict)


def place_table(
    worksheet: Worksheet, table: Table, config: ExcelConfig
) -> TablePlacement:
    """Write one table onto the worksheet, anchored at ``table.start_cell``.

    Layout, top to bottom: an optional title merged across the table width,
    an optional header row, then one row per data row. Afterwards an
    autofilter and autofit column widths are applied when enabled.
    """
    start_row, start_col = parse_cell_reference(table.start_cell)
    width = len(table.columns)
    span = max(1, width)
    placement = TablePlacement(
        start_row=start_row,
        start_col=start_col,
        end_col=start_col + span - 1,
    )
    row = start_row

    if table.title is not None:
        cell = _write_text(worksheet, row, start_col, table.title)
        cell.font = config.title_font()
        cell.alignment = config.title_alignment()
        if span > 1:
            worksheet.merge_cells(
                start_row=row,
                start_column=start_col,
                end_row=row,
                end_column=placement.end_col,
            )
        placement.title_row = row
        row += 1

    if not table.skip_header and width > 0:
        header_font = config.header_font()
        header_border = config.border()
        header_alignment = config.body_alignment()
        for index, column in enumerate(table.columns):
            cell = _write_text(worksheet, row, start_col + index, column.name)
            cell.font = header_font
            cell.border = header_border
            cell.alignment = header_alignment
        placement.header_row = row
        row += 1

    body_font = config.body_font()
    body_border = config.border()
    body_alignment = config.body_alignment()
    for data_row in table.rows:
        for index, input_cell in enumerate(data_row[:width]):
            if input_cell is None:
                continue
            rendered = format_cell(table.columns[index], input_cell)
            value = rendered.value
            if isinstance(value, str):
                value = ILLEGAL_CHARACTERS_RE.sub("", value)
            cell = worksheet.cell(row=row, column=start_col + index)
            cell.value = value
            if isinstance(value, str) and not rendered.is_formula:
                cell.data_type = "s"
            if rendered.number_format:
                cell.number_format = rendered.number_format
            cell.font = body_font
            cell.border = body_border
            cell.alignment = body_alignment
        if placement.first_data_row is None:
            placement.first_data_row = row
        placement.last_data_row = row
        row += 1

    placement.next_row = row

    if (
        config.auto_filter
        and width > 0
        and placement.first_data_row is not None
        and placement.last_data_row is not None
    ):
        placement.autofilter_ref = (
            f"{get_column_letter(start_col)}{placement.first_data_row}:"
            f"{get_column_letter(placement.end_col)}{placement.last_data_row}"
        )
        worksheet.auto_filter.ref = placement.autofilter_ref

    if config.auto_fit_column_width:
        for index, fitted in _fit_widths(table).items():
            letter = get_column_letter(start_col + index)
            worksheet.column_dimensions[letter].width = fitted
            placement.column_widths[letter] = fitted

    return placement


def _write_text(worksheet: Worksheet, row: int, column: int, text: str) -> Cell:
    """Write ``text`` as a literal string, never as a formula."""
    cell = worksheet.cell(row=row, column=column)
    cell.value = ILLEGAL_CHARACTERS_RE.sub("", text)
    cell.data_type = "s"
    return cell


def _fit_widths(table: Table) -> dict[int, float]:
    """Width per column index: longest header or input value plus padding."""
    widths: dict[int, float] = {}
    for index, column in enumerate(table.columns):
        max_length = 0 if table.skip_header else len(column.name)
        for data_row in table.rows:
            if index >= len(data_row):
                continue
            input_cell = data_row[index]
            if input_cell is None or input_cell.value is None:
                continue
            max_length = max(max_length, len(str(input_cell.value)))
        widths[index] = max_length + AUTOFIT_PADDING
    return widths
