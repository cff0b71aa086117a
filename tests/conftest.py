from __future__ import annotations

import os
import tempfile
from typing import Any

import pytest

# Keep module-level app creation away from the working directory and
# from starting a background sweep during test collection.
os.environ.setdefault(
    "TOOLBOX_EXPORTS_DIR", tempfile.mkdtemp(prefix="toolbox-exports-")
)
os.environ.setdefault("TOOLBOX_ENABLE_RETENTION_SWEEPER", "false")

from toolbox_api.models import Table  # noqa: E402
from toolbox_api.services.excel_styles import ExcelConfig  # noqa: E402


@pytest.fixture
def default_config() -> ExcelConfig:
    return ExcelConfig()


@pytest.fixture
def sales_table_payload() -> dict[str, Any]:
    """Single-column table matching the canonical 'Sales' example."""
    return {
        "title": "Sales",
        "startCell": "A1",
        "columns": [{"name": "Qty", "type": "number"}],
        "rows": [[{"type": "static_value", "value": "3"}]],
    }


@pytest.fixture
def sales_table(sales_table_payload: dict[str, Any]) -> Table:
    return Table.model_validate(sales_table_payload)


@pytest.fixture
def mixed_table_payload() -> dict[str, Any]:
    """Three typed columns anchored away from A1."""
    return {
        "title": "Quarterly Report",
        "startCell": "B2",
        "columns": [
            {"name": "Region", "type": "text"},
            {"name": "Revenue", "type": "currency"},
            {"name": "Growth", "type": "percent"},
        ],
        "rows": [
            [
                {"type": "static_value", "value": "North"},
                {"type": "static_value", "value": "1200.5"},
                {"type": "static_value", "value": "0.125"},
            ],
            [
                {"type": "static_value", "value": "South"},
                {"type": "static_value", "value": 980},
                {"type": "formula", "value": "C4/C3-1"},
            ],
        ],
    }


@pytest.fixture
def generate_payload(sales_table_payload: dict[str, Any]) -> dict[str, Any]:
    return {
        "sheetsData": [{"sheetName": "Report", "tables": [sales_table_payload]}],
        "excelConfigs": {},
    }
