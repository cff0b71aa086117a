"""Builds workbooks from sheet definitions and writes them to the exports dir."""

from __future__ import annotations

import asyncio
import os
import re
import tempfile
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from pathlib import Path

from openpyxl import Workbook

from toolbox_api.models import Sheet
from toolbox_api.services.excel_styles import ExcelConfig
from toolbox_api.services.layout_engine import place_table
from toolbox_api.utils.exceptions import (
    ExportStorageError,
    GenerationError,
    ToolboxError,
)
from toolbox_api.utils.logging import LogContext, get_logger, timed_operation

logger = get_logger(__name__)

EXPORT_FILE_PREFIX = "excel-file-"
EXPORT_FILE_SUFFIX = ".xlsx"
DOWNLOADS_PATH = "/excel-generator/downloads"


def export_file_name(now: datetime) -> str:
    """Name an export after ``now`` as a digits-only UTC ISO timestamp.

    Two calls within the same millisecond produce the same name.
    """
    if now.tzinfo is not None:
        now = now.astimezone(UTC).replace(tzinfo=None)
    digits = re.sub(r"\D", "", now.isoformat(timespec="milliseconds"))
    return f"{EXPORT_FILE_PREFIX}{digits}{EXPORT_FILE_SUFFIX}"


def download_url(base_url: str, file_name: str) -> str:
    """Absolute URL under which a generated file is served."""
    return f"{base_url.rstrip('/')}{DOWNLOADS_PATH}/{file_name}"


class WorkbookBuilder:
    """Lays out sheets into an openpyxl workbook and saves it to disk.

    One builder may serve many requests; it holds no per-request state.
    """

    def __init__(
        self,
        exports_dir: str | Path,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            exports_dir: Directory generated files are written to.
            clock: Source of the current time, used for file naming.
        """
        self.exports_dir = Path(exports_dir)
        self._clock = clock or (lambda: datetime.now(UTC))

    def render(self, sheets: Sequence[Sheet], config: ExcelConfig) -> Workbook:
        """Create the workbook in memory, one worksheet per sheet.

        Raises:
            GenerationError: If any sheet cannot be laid out.
            ValidationError: If a table's start cell is malformed.
        """
        workbook = Workbook()
        workbook.remove(workbook.active)

        for sheet in sheets:
            with LogContext(sheet=sheet.sheet_name):
                try:
                    worksheet = workbook.create_sheet(title=sheet.sheet_name)
                    for table in sheet.tables:
                        placement = place_table(worksheet, table, config)
                        logger.debug(
                            "Table placed",
                            title=table.title,
                            start_cell=table.start_cell,
                            next_row=placement.next_row,
                        )
                except ToolboxError:
                    raise
                except Exception as e:
                    raise GenerationError(
                        message=f"Error generating sheet '{sheet.sheet_name}': {e}",
                        sheet_name=sheet.sheet_name,
                    ) from e

        return workbook

    async def build(self, sheets: Sequence[Sheet], config: ExcelConfig) -> str:
        """Render ``sheets`` and write the workbook, returning its file name.

        The workbook is written in a worker thread and the write is complete
        when this coroutine returns.
        """
        with timed_operation(logger, "workbook_generation") as metrics:
            workbook = self.render(sheets, config)
            metrics.sheets = len(sheets)
            metrics.tables = sum(len(sheet.tables) for sheet in sheets)
            metrics.rows_written = sum(
                len(table.rows) for sheet in sheets for table in sheet.tables
            )

            file_name = export_file_name(self._clock())
            await asyncio.to_thread(self._save, workbook, self.exports_dir / file_name)

        logger.info("Workbook saved", file_name=file_name, sheets=len(sheets))
        return file_name

    def _save(self, workbook: Workbook, path: Path) -> None:
        """Write through a temporary file so the final name is never partial."""
        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                dir=path.parent, prefix=".", suffix=".part", delete=False
            ) as handle:
                tmp_name = handle.name
                workbook.save(handle)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise ExportStorageError(
                message=f"Failed to write workbook: {e}",
                file_path=str(path),
            ) from e
