"""Tests for the centralized exception classes."""

import pytest

from toolbox_api.utils.exceptions import (
    ContentError,
    ErrorCode,
    ExportStorageError,
    FetchError,
    GenerationError,
    InvalidCellReferenceError,
    ParseError,
    ToolboxError,
    ValidationError,
)


class TestErrorCode:
    """Tests for ErrorCode enum."""

    def test_error_codes_are_unique(self) -> None:
        codes = [code.value for code in ErrorCode]
        assert len(codes) == len(set(codes))

    def test_error_code_format(self) -> None:
        for code in ErrorCode:
            assert code.value.startswith("E")
            assert len(code.value) == 5
            assert code.value[1:].isdigit()

    @pytest.mark.parametrize(
        ("code", "prefix"),
        [
            (ErrorCode.MISSING_FIELD, "E1"),
            (ErrorCode.INVALID_CELL_REFERENCE, "E1"),
            (ErrorCode.EXPORT_WRITE_FAILED, "E2"),
            (ErrorCode.PARSE_FAILED, "E3"),
            (ErrorCode.CONFIGURATION_ERROR, "E9"),
        ],
    )
    def test_codes_are_grouped_by_category(
        self, code: ErrorCode, prefix: str
    ) -> None:
        assert code.value.startswith(prefix)


class TestToolboxError:
    """Tests for the base ToolboxError class."""

    def test_basic_initialization(self) -> None:
        error = ToolboxError("Something broke")

        assert str(error) == "[E9001] Something broke"
        assert error.message == "Something broke"
        assert error.error_code == ErrorCode.INTERNAL_ERROR
        assert error.details == {}
        assert error.get_http_status() == 500

    def test_to_dict(self) -> None:
        error = ToolboxError(
            "Bad thing",
            error_code=ErrorCode.GENERATION_FAILED,
            details={"sheet_name": "Report"},
        )

        assert error.to_dict() == {
            "error_code": "E2001",
            "message": "Bad thing",
            "details": {"sheet_name": "Report"},
        }

    def test_to_dict_without_details(self) -> None:
        assert "details" not in ToolboxError("Bad thing").to_dict()


class TestValidationErrors:
    """Tests for request validation errors."""

    def test_validation_error(self) -> None:
        error = ValidationError(
            "sheetsData is required",
            field="sheetsData",
            errors=["must be non-empty"],
            error_code=ErrorCode.MISSING_FIELD,
        )

        assert error.http_status == 400
        assert error.field == "sheetsData"
        assert error.details == {
            "field": "sheetsData",
            "validation_errors": ["must be non-empty"],
        }
        assert str(error) == "[E1002] sheetsData is required"

    def test_invalid_cell_reference(self) -> None:
        error = InvalidCellReferenceError("3B")

        assert isinstance(error, ValidationError)
        assert isinstance(error, ValueError)
        assert error.http_status == 400
        assert error.error_code == ErrorCode.INVALID_CELL_REFERENCE
        assert error.reference == "3B"
        assert error.details == {"reference": "3B", "field": "startCell"}
        assert "'3B'" in error.message


class TestGenerationErrors:
    """Tests for workbook generation errors."""

    def test_generation_error(self) -> None:
        error = GenerationError("Sheet failed", sheet_name="Report")

        assert error.http_status == 500
        assert error.error_code == ErrorCode.GENERATION_FAILED
        assert error.sheet_name == "Report"
        assert error.details["sheet_name"] == "Report"

    def test_export_storage_error(self) -> None:
        error = ExportStorageError("Disk full", file_path="/exports/a.xlsx")

        assert isinstance(error, GenerationError)
        assert error.error_code == ErrorCode.EXPORT_WRITE_FAILED
        assert error.file_path == "/exports/a.xlsx"
        assert error.details == {"file_path": "/exports/a.xlsx"}


class TestContentErrors:
    """Tests for web page reader errors."""

    def test_fetch_error_with_upstream_status(self) -> None:
        error = FetchError("Not found", url="https://example.com", status_code=404)

        assert isinstance(error, ContentError)
        assert error.http_status == 500
        assert error.error_code == ErrorCode.FETCH_FAILED
        assert error.status_code == 404
        assert error.details == {"upstream_status": 404, "url": "https://example.com"}

    def test_fetch_error_without_response(self) -> None:
        error = FetchError("Connection refused", url="https://example.com")

        assert error.status_code is None
        assert "upstream_status" not in error.details

    def test_parse_error(self) -> None:
        error = ParseError("Bad markup", url="https://example.com")

        assert isinstance(error, ContentError)
        assert error.error_code == ErrorCode.PARSE_FAILED
        assert error.url == "https://example.com"
