"""Data models for workbook snapshots."""

from typing import Any, Optional
from pydantic import BaseModel, Field


class SheetInfo(BaseModel):
    """A worksheet and its visibility."""

    name: str
    visibility: str = "Visible"  # Visible, Hidden


class TableInfo(BaseModel):
    """A table defined in the workbook."""

    name: str
    sheet: Optional[str] = None
    range: Optional[str] = None


class NamedRangeInfo(BaseModel):
    """A workbook-level named range."""

    name: str
    formula: str


class UsedRange(BaseModel):
    """Values and formulas of the active sheet's used range."""

    address: str
    values: list[list[Any]] = Field(default_factory=list)
    formulas: list[list[Any]] = Field(default_factory=list)
    row_count: int = 0
    col_count: int = 0


class WorkbookSnapshot(BaseModel):
    """Read-only view of the workbook, materialized per request."""

    active_sheet_name: str
    sheets: list[SheetInfo] = Field(default_factory=list)
    tables: list[TableInfo] = Field(default_factory=list)
    named_ranges: list[NamedRangeInfo] = Field(default_factory=list)
    used_range: Optional[UsedRange] = None

    @property
    def sheet_names(self) -> list[str]:
        return [sheet.name for sheet in self.sheets]
