"""Spreadsheet host interface.

A host reads the workbook in one batched request and applies mutations
the same way: callers queue every mutation on a ``HostBatch`` and then
call ``SpreadsheetHost.sync`` once.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from ..errors import OperationApplyError
from ..operations.models import CellFormat, PivotValue
from .models import WorkbookSnapshot


class HostBatch(ABC):
    """Mutations queued for a single sync.

    Methods validate their arguments and raise ``ValueError`` for bad
    addresses or unknown sheets; nothing reaches the host until sync.
    Mutations that can only be checked at sync time record their failure
    in ``failures`` against ``operation_index``, the operation being queued.
    """

    def __init__(self, active_sheet: str):
        self.active_sheet = active_sheet
        self.operation_index = 0
        self.failures: list[OperationApplyError] = []

    @property
    @abstractmethod
    def size(self) -> int:
        """Number of queued mutations."""

    @abstractmethod
    def set_values(self, sheet: str, address: str, value: Any):
        pass

    @abstractmethod
    def set_formula(self, sheet: str, address: str, formula: str):
        pass

    @abstractmethod
    def format_range(self, sheet: str, address: str, fmt: CellFormat):
        pass

    @abstractmethod
    def add_table(self, sheet: str, address: str, name: Optional[str], has_headers: bool):
        pass

    @abstractmethod
    def add_chart(self, sheet: str, address: str, chart_type: str, title: Optional[str]):
        pass

    @abstractmethod
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
        pass

    @abstractmethod
    def add_sheet(self, name: str, activate: bool = False):
        pass

    @abstractmethod
    def delete_sheet(self, name: str):
        pass

    @abstractmethod
    def rename_sheet(self, name: str, new_name: str):
        pass

    @abstractmethod
    def activate_sheet(self, name: str):
        pass

    @abstractmethod
    def hide_sheet(self, name: str):
        pass

    @abstractmethod
    def sort_range(self, sheet: str, address: str, key: int, ascending: bool, has_headers: bool):
        pass

    @abstractmethod
    def apply_filter(
        self,
        sheet: str,
        address: str,
        column: Optional[int] = None,
        criteria: Optional[list[str]] = None,
    ):
        pass

    @abstractmethod
    def insert_rows(self, sheet: str, address: str):
        pass

    @abstractmethod
    def delete_rows(self, sheet: str, address: str):
        pass

    @abstractmethod
    def insert_columns(self, sheet: str, address: str):
        pass

    @abstractmethod
    def delete_columns(self, sheet: str, address: str):
        pass

    @abstractmethod
    def autofit_columns(self, sheet: str, address: str):
        pass


class SpreadsheetHost(ABC):
    """A live or simulated spreadsheet."""

    name: str = "host"
    is_live: bool = True

    @abstractmethod
    def read_snapshot(self) -> WorkbookSnapshot:
        """Read sheets, tables, names and the active used range in one request."""

    @abstractmethod
    def begin_batch(self) -> HostBatch:
        """Start collecting mutations."""

    @abstractmethod
    def sync(self, batch: HostBatch) -> int:
        """Commit all queued mutations in one request. Returns the count."""
