"""Services for the toolbox API."""

from toolbox_api.services.excel_styles import ExcelConfig
from toolbox_api.services.retention import RetentionSweeper, purge_expired_exports
from toolbox_api.services.web_page_reader import WebPageReader
from toolbox_api.services.workbook_builder import WorkbookBuilder

__all__ = [
    "ExcelConfig",
    "RetentionSweeper",
    "WebPageReader",
    "WorkbookBuilder",
    "purge_expired_exports",
]
