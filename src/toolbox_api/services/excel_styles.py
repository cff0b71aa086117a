"""Per-request workbook style configuration and the openpyxl styles it yields."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace

from openpyxl.styles import Alignment, Border, Font, Side

from toolbox_api.models import ExcelConfigOverrides
from toolbox_api.utils.exceptions import ValidationError

BORDER_STYLES = (
    "dashDot",
    "dashDotDot",
    "dashed",
    "dotted",
    "double",
    "hair",
    "medium",
    "mediumDashDot",
    "mediumDashDotDot",
    "mediumDashed",
    "slantDashDot",
    "thick",
    "thin",
)


@dataclass(frozen=True)
class ExcelConfig:
    """Style options applied uniformly to every sheet and table of one workbook.

    Attributes:
        font_family: Font name used for every written cell.
        title_font_size: Point size of table titles.
        header_font_size: Point size of header cells.
        font_size: Point size of body cells.
        border_style: openpyxl side style for all four borders, or None.
        wrap_text: Wrap body cell text.
        auto_filter: Register an autofilter over each table's data rows.
        auto_fit_column_width: Size columns to their widest value.
    """

    font_family: str = "Calibri"
    title_font_size: float = 13
    header_font_size: float = 11
    font_size: float = 11
    border_style: str | None = "thin"
    wrap_text: bool = False
    auto_filter: bool = False
    auto_fit_column_width: bool = True

    def __post_init__(self) -> None:
        if self.border_style is not None and self.border_style not in BORDER_STYLES:
            raise ValidationError(
                message=f"Unsupported border style: {self.border_style}",
                field="borderStyle",
                errors=[f"Must be one of: {', '.join(BORDER_STYLES)}"],
            )
        for name in ("title_font_size", "header_font_size", "font_size"):
            if getattr(self, name) <= 0:
                raise ValidationError(
                    message=f"{name} must be positive", field=name
                )

    @classmethod
    def from_overrides(cls, overrides: ExcelConfigOverrides | None) -> ExcelConfig:
        """Merge the fields a caller actually sent onto the defaults.

        An explicit ``null`` for ``borderStyle`` disables borders; other
        explicit nulls keep the default.
        """
        if overrides is None:
            return cls()
        sent = overrides.model_dump(exclude_unset=True)
        known = {f.name for f in fields(cls)}
        changes = {
            key: value
            for key, value in sent.items()
            if key in known and (value is not None or key == "border_style")
        }
        return replace(cls(), **changes)

    # ------------------------------------------------------------------ #
    # openpyxl style objects
    # ------------------------------------------------------------------ #

    def title_font(self) -> Font:
        return Font(name=self.font_family, size=self.title_font_size, bold=True)

    def header_font(self) -> Font:
        return Font(name=self.font_family, size=self.header_font_size, bold=True)

    def body_font(self) -> Font:
        return Font(name=self.font_family, size=self.font_size)

    def border(self) -> Border:
        if self.border_style is None:
            return Border()
        side = Side(style=self.border_style)
        return Border(left=side, right=side, top=side, bottom=side)

    def title_alignment(self) -> Alignment:
        return Alignment(horizontal="center", vertical="center")

    def body_alignment(self) -> Alignment:
        return Alignment(wrap_text=self.wrap_text, vertical="top")
