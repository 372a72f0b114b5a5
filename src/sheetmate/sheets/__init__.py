"""Spreadsheet hosts, workbook snapshots and context rendering."""

from .models import NamedRangeInfo, SheetInfo, TableInfo, UsedRange, WorkbookSnapshot
from .host import HostBatch, SpreadsheetHost
from .simulated import SimulatedBatch, SimulatedHost, demo_snapshot
from .gsheets import GoogleSheetsBatch, GoogleSheetsHost
from .context import ContextSerializer

__all__ = [
    "NamedRangeInfo",
    "SheetInfo",
    "TableInfo",
    "UsedRange",
    "WorkbookSnapshot",
    "HostBatch",
    "SpreadsheetHost",
    "SimulatedBatch",
    "SimulatedHost",
    "demo_snapshot",
    "GoogleSheetsBatch",
    "GoogleSheetsHost",
    "ContextSerializer",
]
