"""Simulated host used when no live spreadsheet is available."""

import logging
from typing import Any, Optional

from ..operations.models import CellFormat, PivotValue
from .a1 import col_span, parse_range, row_span
from .host import HostBatch, SpreadsheetHost
from .models import SheetInfo, UsedRange, WorkbookSnapshot

logger = logging.getLogger(__name__)

DEMO_SHEET = "Demo Sheet"


def demo_snapshot() -> WorkbookSnapshot:
    """The fixed workbook shown when running headless."""
    return WorkbookSnapshot(
        active_sheet_name=DEMO_SHEET,
        sheets=[SheetInfo(name=DEMO_SHEET)],
        used_range=UsedRange(
            address="A1:C3",
            values=[
                ["Header 1", "Header 2", "Header 3"],
                ["Data 1", 100, 200],
                ["Data 2", 150, 300],
            ],
            formulas=[
                ["", "", ""],
                ["", "", ""],
                ["", "", ""],
            ],
            row_count=3,
            col_count=3,
        ),
    )


class SimulatedBatch(HostBatch):
    """Validates mutations and records what would have happened."""

    def __init__(self, active_sheet: str, sheet_names: list[str]):
        super().__init__(active_sheet)
        self.sheet_names = list(sheet_names)
        self.pending: list[str] = []

    @property
    def size(self) -> int:
        return len(self.pending)

    def _require_sheet(self, name: str):
        if name not in self.sheet_names:
            raise ValueError(f"Sheet not found: {name}")

    def _target(self, sheet: str, address: str) -> str:
        self._require_sheet(sheet)
        parse_range(address)
        return f"{sheet}!{address}"

    def set_values(self, sheet: str, address: str, value: Any):
        self.pending.append(f'write "{value}" to {self._target(sheet, address)}')

    def set_formula(self, sheet: str, address: str, formula: str):
        self.pending.append(f'write formula "{formula}" to {self._target(sheet, address)}')

    def format_range(self, sheet: str, address: str, fmt: CellFormat):
        self.pending.append(f"format {self._target(sheet, address)} with {fmt.to_wire()}")

    def add_table(self, sheet: str, address: str, name: Optional[str], has_headers: bool):
        self.pending.append(f"create table {name or '(unnamed)'} at {self._target(sheet, address)}")

    def add_chart(self, sheet: str, address: str, chart_type: str, title: Optional[str]):
        self.pending.append(
            f"create {chart_type} chart {title or '(untitled)'} from {self._target(sheet, address)}"
        )

    def add_pivot_table(
        self,
        source_sheet: str,
        source_address: str,
        destination_sheet: str,
        destination_address: str,
        rows: list[str],
        columns: list[str],
        values: list[PivotValue],
        name: Optional[str] = None,
    ):
        source = self._target(source_sheet, source_address)
        if destination_sheet not in self.sheet_names:
            self.sheet_names.append(destination_sheet)
        destination = self._target(destination_sheet, destination_address)
        summary = ", ".join(f"{v.function}({v.field})" for v in values)
        self.pending.append(
            f"create pivot table from {source} at {destination} "
            f"rows={rows} columns={columns} values=[{summary}]"
        )

    def add_sheet(self, name: str, activate: bool = False):
        if name in self.sheet_names:
            raise ValueError(f"Sheet already exists: {name}")
        self.sheet_names.append(name)
        self.pending.append(f"add sheet {name}")
        if activate:
            self.pending.append(f"activate sheet {name}")

    def delete_sheet(self, name: str):
        self._require_sheet(name)
        self.sheet_names.remove(name)
        self.pending.append(f"delete sheet {name}")

    def rename_sheet(self, name: str, new_name: str):
        self._require_sheet(name)
        self.sheet_names[self.sheet_names.index(name)] = new_name
        self.pending.append(f"rename sheet {name} to {new_name}")

    def activate_sheet(self, name: str):
        self._require_sheet(name)
        self.pending.append(f"activate sheet {name}")

    def hide_sheet(self, name: str):
        self._require_sheet(name)
        self.pending.append(f"hide sheet {name}")

    def sort_range(self, sheet: str, address: str, key: int, ascending: bool, has_headers: bool):
        target = self._target(sheet, address)
        width = parse_range(address).col_count
        if width is not None and key >= width:
            raise ValueError(f"Sort key {key} outside {address}")
        order = "ascending" if ascending else "descending"
        self.pending.append(f"sort {target} by column {key} {order}")

    def apply_filter(
        self,
        sheet: str,
        address: str,
        column: Optional[int] = None,
        criteria: Optional[list[str]] = None,
    ):
        target = self._target(sheet, address)
        detail = f" column {column} in {criteria}" if column is not None and criteria else ""
        self.pending.append(f"apply filter to {target}{detail}")

    def insert_rows(self, sheet: str, address: str):
        self._require_sheet(sheet)
        start, end = row_span(address)
        self.pending.append(f"insert rows {start + 1}-{end} in {sheet}")

    def delete_rows(self, sheet: str, address: str):
        self._require_sheet(sheet)
        start, end = row_span(address)
        self.pending.append(f"delete rows {start + 1}-{end} in {sheet}")

    def insert_columns(self, sheet: str, address: str):
        self._require_sheet(sheet)
        start, end = col_span(address)
        self.pending.append(f"insert columns {start}-{end - 1} in {sheet}")

    def delete_columns(self, sheet: str, address: str):
        self._require_sheet(sheet)
        start, end = col_span(address)
        self.pending.append(f"delete columns {start}-{end - 1} in {sheet}")

    def autofit_columns(self, sheet: str, address: str):
        self._require_sheet(sheet)
        col_span(address)
        self.pending.append(f"autofit columns {address} in {sheet}")


class SimulatedHost(SpreadsheetHost):
    """Serves the demo workbook and logs mutations instead of applying them."""

    name = "simulated"
    is_live = False

    def __init__(self, snapshot: Optional[WorkbookSnapshot] = None):
        self.snapshot = snapshot or demo_snapshot()
        self.applied: list[str] = []
        self.sync_count = 0

    def read_snapshot(self) -> WorkbookSnapshot:
        return self.snapshot.model_copy(deep=True)

    def begin_batch(self) -> SimulatedBatch:
        return SimulatedBatch(self.snapshot.active_sheet_name, self.snapshot.sheet_names)

    def sync(self, batch: SimulatedBatch) -> int:
        self.sync_count += 1
        for description in batch.pending:
            logger.info(f"Would {description}")
        self.applied.extend(batch.pending)
        count = len(batch.pending)
        batch.pending = []
        return count
