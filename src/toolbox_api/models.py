"""Pydantic models for API requests and responses."""

from enum import Enum
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from toolbox_api.utils.exceptions import ErrorCode


class CamelModel(BaseModel):
    """Base model exchanging camelCase JSON while exposing snake_case fields."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: str
    version: str


# =============================================================================
# Excel Generator
# =============================================================================


class ColumnType(str, Enum):
    """Semantic type of a table column, driving value coercion and format."""

    TEXT = "text"
    NUMBER = "number"
    PERCENT = "percent"
    CURRENCY = "currency"
    DATE = "date"
    BOOLEAN = "boolean"


class CellKind(str, Enum):
    """Whether a cell carries a literal value or a formula expression."""

    STATIC_VALUE = "static_value"
    FORMULA = "formula"


CellValue = str | int | float | bool | None


class Cell(CamelModel):
    """One input cell, positionally aligned to a table column."""

    type: CellKind = Field(
        default=CellKind.STATIC_VALUE,
        description="'static_value' for literals, 'formula' for expressions",
    )
    value: CellValue = Field(default=None, description="Literal value or formula")


class Column(CamelModel):
    """Column descriptor: header name, semantic type and optional format."""

    name: str = Field(..., description="Header text for the column")
    type: ColumnType = Field(
        default=ColumnType.TEXT, description="Semantic type of the column's cells"
    )
    format: str | None = Field(
        default=None,
        description="Explicit Excel number format overriding the type default",
    )

    @field_validator("type", mode="before")
    @classmethod
    def default_unknown_type(cls, v: Any) -> Any:
        """Map missing or unrecognized column types to text."""
        if isinstance(v, ColumnType):
            return v
        if isinstance(v, str) and v.lower() in {t.value for t in ColumnType}:
            return v.lower()
        return ColumnType.TEXT


class Table(CamelModel):
    """A titled, headed grid of rows placed at an anchor cell."""

    title: str | None = Field(default=None, description="Merged title bar text")
    start_cell: str = Field(
        default="A1", description="Top-left anchor cell reference, e.g. 'B3'"
    )
    skip_header: bool = Field(default=False, description="Omit the header row")
    columns: list[Column] = Field(default_factory=list)
    rows: list[list[Cell | None]] = Field(default_factory=list)


class Sheet(CamelModel):
    """A named worksheet holding one or more tables."""

    sheet_name: str = Field(..., min_length=1, description="Worksheet name")
    tables: list[Table] = Field(default_factory=list)


class ExcelConfigOverrides(CamelModel):
    """Caller-supplied style overrides merged onto the default ExcelConfig."""

    font_family: str | None = None
    title_font_size: float | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "titleFontSize", "tableTitleFontSize", "title_font_size"
        ),
    )
    header_font_size: float | None = None
    font_size: float | None = None
    auto_filter: bool | None = None
    border_style: str | None = None
    wrap_text: bool | None = None
    auto_fit_column_width: bool | None = None


class GenerateRequest(CamelModel):
    """Request body for workbook generation."""

    sheets_data: list[Sheet] | None = Field(
        default=None, description="Sheets to render, in workbook order"
    )
    excel_configs: ExcelConfigOverrides | None = Field(
        default=None,
        description="Style overrides applied to every sheet and table",
    )

    @model_validator(mode="after")
    def validate_unique_sheet_names(self) -> "GenerateRequest":
        """Reject requests that repeat a sheet name."""
        seen: set[str] = set()
        for sheet in self.sheets_data or []:
            key = sheet.sheet_name.casefold()
            if key in seen:
                raise ValueError(f"Duplicate sheet name: {sheet.sheet_name}")
            seen.add(key)
        return self


class DownloadLink(CamelModel):
    """Location of a generated workbook."""

    download_url: str = Field(..., description="Absolute URL of the workbook")


# =============================================================================
# Web Page Reader
# =============================================================================


class WebPageContent(BaseModel):
    """Title and main readable text of a web page."""

    title: str = Field(..., description="Text of the page's <title> element")
    content: str = Field(..., description="Main article text, empty if none found")


# =============================================================================
# Response Envelope
# =============================================================================


class ServiceResponse(CamelModel):
    """Uniform response envelope used by every endpoint.

    Carries:
    - A success flag and human-readable message
    - The payload, when the call succeeded
    - The HTTP status code mirrored in the body
    - Optional machine-readable error code and request ID for failures
    """

    success: bool = Field(..., description="Whether the call succeeded")
    message: str = Field(..., description="Human-readable outcome message")
    response_object: Any = Field(default=None, description="Payload on success")
    status_code: int = Field(..., description="HTTP status code of the response")
    error_code: str | None = Field(
        default=None, description="Machine-readable error code (e.g., 'E1001')"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for error correlation"
    )

    @classmethod
    def failure(
        cls,
        message: str,
        status_code: int,
        error_code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
        request_id: str | None = None,
    ) -> "ServiceResponse":
        """Build a failure envelope, carrying error details as the payload."""
        return cls(
            success=False,
            message=message,
            response_object=details or None,
            status_code=status_code,
            error_code=error_code.value if error_code else None,
            request_id=request_id,
        )


class GenerateResponse(ServiceResponse):
    """Envelope returned by the generate endpoint."""

    response_object: DownloadLink | None = None


class WebPageContentResponse(ServiceResponse):
    """Envelope returned by the get-content endpoint."""

    response_object: WebPageContent | None = None
