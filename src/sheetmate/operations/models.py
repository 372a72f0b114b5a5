"""Canonical spreadsheet operations.

Every operation the model may request is a pydantic model with a literal
``action`` tag. The tagged union ``Operation`` is the closed vocabulary: the
tool schema and the text convention are both generated from these classes.
Wire fields are camelCase (``chartType``), attributes are snake_case.
"""

import logging
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from ..errors import ResponseParseError

logger = logging.getLogger(__name__)

CellValue = Union[str, int, float, bool]


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict:
        """Dump using the camelCase wire names, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


class CellFormat(_WireModel):
    """Formatting applied to a range."""

    bold: Optional[bool] = Field(default=None, description="Bold font")
    italic: Optional[bool] = Field(default=None, description="Italic font")
    fill: Optional[str] = Field(default=None, description="Background color, e.g. '#FFFF00'")
    color: Optional[str] = Field(default=None, description="Font color, e.g. '#FF0000'")
    font_size: Optional[float] = Field(default=None, description="Font size in points")
    number_format: Optional[str] = Field(
        default=None, description="Number format code, e.g. '$#,##0.00' or '0%'"
    )
    horizontal_alignment: Optional[Literal["Left", "Center", "Right"]] = Field(
        default=None, description="Horizontal alignment"
    )


class PivotValue(_WireModel):
    """A data field of a pivot table."""

    field: str = Field(description="Header name of the source column to summarize")
    function: Literal["Sum", "Count", "Average", "Max", "Min"] = Field(
        default="Sum", description="Summary function"
    )


_ADDRESS = "Target range in A1 notation, e.g. 'A1' or 'A1:C10'"
_SHEET = "Sheet name (default: the active sheet)"


class SetCellValue(_WireModel):
    """Write a literal value into a cell or range."""

    action: Literal["setCellValue"] = "setCellValue"
    address: str = Field(description=_ADDRESS)
    value: CellValue = Field(description="Value to write")
    sheet: Optional[str] = Field(default=None, description=_SHEET)


class SetFormula(_WireModel):
    """Write an Excel formula into a cell or range."""

    action: Literal["setFormula"] = "setFormula"
    address: str = Field(description=_ADDRESS)
    formula: str = Field(description="Formula starting with '=', e.g. '=SUM(A1:A10)'")
    sheet: Optional[str] = Field(default=None, description=_SHEET)


class FormatRange(_WireModel):
    """Apply font, fill, alignment or number formatting to a range."""

    action: Literal["format"] = "format"
    address: str = Field(description=_ADDRESS)
    format: CellFormat = Field(description="Formatting to apply")
    sheet: Optional[str] = Field(default=None, description=_SHEET)


class CreateTable(_WireModel):
    """Convert a range into a table."""

    action: Literal["createTable"] = "createTable"
    address: str = Field(description=_ADDRESS)
    name: Optional[str] = Field(default=None, description="Table name")
    has_headers: bool = Field(default=True, description="Whether the first row holds headers")
    sheet: Optional[str] = Field(default=None, description=_SHEET)


class CreateChart(_WireModel):
    """Create a chart from a data range."""

    action: Literal["createChart"] = "createChart"
    address: str = Field(description="Source data range in A1 notation")
    chart_type: Optional[str] = Field(
        default=None,
        description="Chart type: ColumnClustered (default), Line, Pie, BarClustered, Area, XYScatter",
    )
    title: Optional[str] = Field(default=None, description="Chart title")
    sheet: Optional[str] = Field(default=None, description=_SHEET)


class CreatePivotTable(_WireModel):
    """Summarize a source range into a pivot table."""

    action: Literal["createPivotTable"] = "createPivotTable"
    source_address: str = Field(description="Source data range including headers, e.g. 'A1:D100'")
    source_sheet: Optional[str] = Field(default=None, description="Sheet of the source range")
    destination_sheet: Optional[str] = Field(
        default=None, description="Sheet receiving the pivot table (created if missing)"
    )
    destination_address: Optional[str] = Field(
        default=None, description="Top-left cell of the pivot table (default: A1)"
    )
    rows: list[str] = Field(default_factory=list, description="Header names used as row groups")
    columns: list[str] = Field(
        default_factory=list, description="Header names used as column groups"
    )
    values: list[PivotValue] = Field(default_factory=list, description="Summarized data fields")
    name: Optional[str] = Field(default=None, description="Pivot table name")


class CreateSheet(_WireModel):
    """Add a new worksheet."""

    action: Literal["createSheet"] = "createSheet"
    name: str = Field(description="Name of the new sheet")
    activate: bool = Field(default=False, description="Make the new sheet active")


class DeleteSheet(_WireModel):
    """Delete a worksheet."""

    action: Literal["deleteSheet"] = "deleteSheet"
    name: str = Field(description="Name of the sheet to delete")


class RenameSheet(_WireModel):
    """Rename a worksheet."""

    action: Literal["renameSheet"] = "renameSheet"
    name: str = Field(description="Current sheet name")
    new_name: str = Field(description="New sheet name")


class ActivateSheet(_WireModel):
    """Make a worksheet the active sheet."""

    action: Literal["activateSheet"] = "activateSheet"
    name: str = Field(description="Sheet name")


class HideSheet(_WireModel):
    """Hide a worksheet."""

    action: Literal["hideSheet"] = "hideSheet"
    name: str = Field(description="Sheet name")


class SortRange(_WireModel):
    """Sort the rows of a range by one column."""

    action: Literal["sortRange"] = "sortRange"
    address: str = Field(description=_ADDRESS)
    key: int = Field(default=0, ge=0, description="Zero-based column index within the range")
    ascending: bool = Field(default=True, description="Sort ascending")
    has_headers: bool = Field(default=False, description="Keep the first row in place")
    sheet: Optional[str] = Field(default=None, description=_SHEET)


class FilterRange(_WireModel):
    """Apply an autofilter to a range, optionally filtering one column."""

    action: Literal["filterRange"] = "filterRange"
    address: str = Field(description=_ADDRESS)
    column: Optional[int] = Field(
        default=None, ge=0, description="Zero-based column index to filter"
    )
    criteria: Optional[list[str]] = Field(
        default=None, description="Values to keep visible in the filtered column"
    )
    sheet: Optional[str] = Field(default=None, description=_SHEET)


class InsertRows(_WireModel):
    """Insert whole rows, shifting existing rows down."""

    action: Literal["insertRows"] = "insertRows"
    address: str = Field(description="Row span, e.g. '3:5'")
    sheet: Optional[str] = Field(default=None, description=_SHEET)


class DeleteRows(_WireModel):
    """Delete whole rows."""

    action: Literal["deleteRows"] = "deleteRows"
    address: str = Field(description="Row span, e.g. '3:5'")
    sheet: Optional[str] = Field(default=None, description=_SHEET)


class InsertColumns(_WireModel):
    """Insert whole columns, shifting existing columns right."""

    action: Literal["insertColumns"] = "insertColumns"
    address: str = Field(description="Column span, e.g. 'B:C'")
    sheet: Optional[str] = Field(default=None, description=_SHEET)


class DeleteColumns(_WireModel):
    """Delete whole columns."""

    action: Literal["deleteColumns"] = "deleteColumns"
    address: str = Field(description="Column span, e.g. 'B:C'")
    sheet: Optional[str] = Field(default=None, description=_SHEET)


class AutofitColumns(_WireModel):
    """Resize columns to fit their contents."""

    action: Literal["autofitColumns"] = "autofitColumns"
    address: str = Field(description="Range whose columns are resized, e.g. 'A:D'")
    sheet: Optional[str] = Field(default=None, description=_SHEET)


OPERATION_TYPES: tuple[type[_WireModel], ...] = (
    SetCellValue,
    SetFormula,
    FormatRange,
    CreateTable,
    CreateChart,
    CreatePivotTable,
    CreateSheet,
    DeleteSheet,
    RenameSheet,
    ActivateSheet,
    HideSheet,
    SortRange,
    FilterRange,
    InsertRows,
    DeleteRows,
    InsertColumns,
    DeleteColumns,
    AutofitColumns,
)

Operation = Annotated[
    Union[
        SetCellValue,
        SetFormula,
        FormatRange,
        CreateTable,
        CreateChart,
        CreatePivotTable,
        CreateSheet,
        DeleteSheet,
        RenameSheet,
        ActivateSheet,
        HideSheet,
        SortRange,
        FilterRange,
        InsertRows,
        DeleteRows,
        InsertColumns,
        DeleteColumns,
        AutofitColumns,
    ],
    Field(discriminator="action"),
]

OPERATION_CLASSES: dict[str, type[_WireModel]] = {
    cls.model_fields["action"].default: cls for cls in OPERATION_TYPES
}

ACTION_NAMES: tuple[str, ...] = tuple(OPERATION_CLASSES)

_operation_adapter: TypeAdapter = TypeAdapter(Operation)


def parse_operation(data: Any) -> Operation:
    """Validate one wire item into an operation.

    Raises ResponseParseError for non-objects, unknown actions and
    malformed fields.
    """
    if not isinstance(data, dict):
        raise ResponseParseError(f"Operation must be an object, got {type(data).__name__}")
    action = data.get("action")
    if action not in OPERATION_CLASSES:
        raise ResponseParseError(f"Unknown action: {action!r}")
    try:
        return _operation_adapter.validate_python(data)
    except ValidationError as e:
        raise ResponseParseError(f"Invalid {action} operation: {e.error_count()} error(s)") from e


def parse_operations(items: Any) -> list[Operation]:
    """Validate a list of wire items, skipping unknown or malformed ones."""
    if not isinstance(items, list):
        raise ResponseParseError("'operations' must be a list")

    operations = []
    for index, item in enumerate(items):
        try:
            operations.append(parse_operation(item))
        except ResponseParseError as e:
            logger.warning(f"Skipping operation {index}: {e}")
    return operations


def operations_to_wire(operations: list[Operation]) -> dict:
    """Build the ``{"operations": [...]}`` wire payload."""
    return {"operations": [op.to_wire() for op in operations]}
