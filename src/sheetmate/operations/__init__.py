"""Spreadsheet operation vocabulary and its renderings."""

from .models import (
    ACTION_NAMES,
    OPERATION_CLASSES,
    OPERATION_TYPES,
    ActivateSheet,
    AutofitColumns,
    CellFormat,
    CreateChart,
    CreatePivotTable,
    CreateSheet,
    CreateTable,
    DeleteColumns,
    DeleteRows,
    DeleteSheet,
    FilterRange,
    FormatRange,
    HideSheet,
    InsertColumns,
    InsertRows,
    Operation,
    PivotValue,
    RenameSheet,
    SetCellValue,
    SetFormula,
    SortRange,
    operations_to_wire,
    parse_operation,
    parse_operations,
)
from .schema import (
    BLOCK_LANGUAGE,
    ActionSpec,
    OperationSchema,
    ToolParameter,
    encode_block,
    operation_schema,
)
from .fence import extract_operations, find_block, parse_block, strip_blocks

__all__ = [
    "ACTION_NAMES",
    "OPERATION_CLASSES",
    "OPERATION_TYPES",
    "ActivateSheet",
    "AutofitColumns",
    "CellFormat",
    "CreateChart",
    "CreatePivotTable",
    "CreateSheet",
    "CreateTable",
    "DeleteColumns",
    "DeleteRows",
    "DeleteSheet",
    "FilterRange",
    "FormatRange",
    "HideSheet",
    "InsertColumns",
    "InsertRows",
    "Operation",
    "PivotValue",
    "RenameSheet",
    "SetCellValue",
    "SetFormula",
    "SortRange",
    "operations_to_wire",
    "parse_operation",
    "parse_operations",
    "BLOCK_LANGUAGE",
    "ActionSpec",
    "OperationSchema",
    "ToolParameter",
    "encode_block",
    "operation_schema",
    "extract_operations",
    "find_block",
    "parse_block",
    "strip_blocks",
]
