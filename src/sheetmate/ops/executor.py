"""Operation executor.

Operations are queued on a single host batch in list order, each inside
its own failure scope, and committed with one sync at the end. A failed
operation is logged and skipped; there is no rollback.
"""

import logging
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from ..errors import OperationApplyError, ResponseParseError
from ..operations.models import (
    ActivateSheet,
    AutofitColumns,
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
    OPERATION_TYPES,
    Operation,
    RenameSheet,
    SetCellValue,
    SetFormula,
    SortRange,
    parse_operation,
)
from ..sheets.a1 import split_sheet
from ..sheets.host import HostBatch, SpreadsheetHost

logger = logging.getLogger(__name__)

DEFAULT_CHART_TYPE = "ColumnClustered"


class ApplyReport(BaseModel):
    """Outcome of applying an operation list."""

    attempted: int = 0
    queued: int = 0
    skipped: int = 0
    committed: int = 0
    synced: bool = False
    simulated: bool = False
    errors: list[dict] = Field(default_factory=list)
    sync_error: Optional[str] = None

    @property
    def success(self) -> bool:
        return not self.errors and self.sync_error is None


def _target(batch: HostBatch, address: str, sheet: Optional[str]) -> tuple[str, str]:
    """Resolve the sheet for an address; an explicit ``Sheet!A1`` prefix wins."""
    prefix, range_part = split_sheet(address)
    return prefix or sheet or batch.active_sheet, range_part


def queue_operation(batch: HostBatch, op: Operation):
    """Queue one operation on the batch."""
    if isinstance(op, SetCellValue):
        batch.set_values(*_target(batch, op.address, op.sheet), op.value)
    elif isinstance(op, SetFormula):
        batch.set_formula(*_target(batch, op.address, op.sheet), op.formula)
    elif isinstance(op, FormatRange):
        batch.format_range(*_target(batch, op.address, op.sheet), op.format)
    elif isinstance(op, CreateTable):
        batch.add_table(*_target(batch, op.address, op.sheet), op.name, op.has_headers)
    elif isinstance(op, CreateChart):
        batch.add_chart(
            *_target(batch, op.address, op.sheet), op.chart_type or DEFAULT_CHART_TYPE, op.title
        )
    elif isinstance(op, CreatePivotTable):
        source_sheet, source_address = _target(batch, op.source_address, op.source_sheet)
        destination_sheet, destination_address = _target(
            batch, op.destination_address or "A1", op.destination_sheet
        )
        batch.add_pivot_table(
            source_sheet=source_sheet,
            source_address=source_address,
            destination_sheet=destination_sheet,
            destination_address=destination_address,
            rows=op.rows,
            columns=op.columns,
            values=op.values,
            name=op.name,
        )
    elif isinstance(op, CreateSheet):
        batch.add_sheet(op.name, op.activate)
    elif isinstance(op, DeleteSheet):
        batch.delete_sheet(op.name)
    elif isinstance(op, RenameSheet):
        batch.rename_sheet(op.name, op.new_name)
    elif isinstance(op, ActivateSheet):
        batch.activate_sheet(op.name)
    elif isinstance(op, HideSheet):
        batch.hide_sheet(op.name)
    elif isinstance(op, SortRange):
        batch.sort_range(
            *_target(batch, op.address, op.sheet), op.key, op.ascending, op.has_headers
        )
    elif isinstance(op, FilterRange):
        batch.apply_filter(*_target(batch, op.address, op.sheet), op.column, op.criteria)
    elif isinstance(op, InsertRows):
        batch.insert_rows(*_target(batch, op.address, op.sheet))
    elif isinstance(op, DeleteRows):
        batch.delete_rows(*_target(batch, op.address, op.sheet))
    elif isinstance(op, InsertColumns):
        batch.insert_columns(*_target(batch, op.address, op.sheet))
    elif isinstance(op, DeleteColumns):
        batch.delete_columns(*_target(batch, op.address, op.sheet))
    elif isinstance(op, AutofitColumns):
        batch.autofit_columns(*_target(batch, op.address, op.sheet))
    else:
        raise TypeError(f"Unsupported operation type: {type(op).__name__}")


class OperationExecutor:
    """Applies canonical operations against a spreadsheet host."""

    def __init__(self, host: SpreadsheetHost):
        self.host = host

    def apply(self, operations: list[Union[Operation, dict[str, Any]]]) -> ApplyReport:
        """Apply operations in order and commit once.

        Raw wire dicts are accepted; unknown actions are skipped.
        """
        report = ApplyReport(attempted=len(operations), simulated=not self.host.is_live)
        try:
            batch = self.host.begin_batch()
        except Exception as e:
            logger.error(f"Failed to start a batch on {self.host.name} host: {e}", exc_info=True)
            report.sync_error = str(e)
            return report

        for index, item in enumerate(operations):
            if isinstance(item, dict):
                action = item.get("action")
            else:
                action = getattr(item, "action", type(item).__name__)
            try:
                op = item if isinstance(item, OPERATION_TYPES) else parse_operation(item)
            except ResponseParseError as e:
                logger.info(f"Skipping operation {index}: {e}")
                report.skipped += 1
                continue

            try:
                batch.operation_index = index
                queue_operation(batch, op)
                report.queued += 1
            except Exception as e:
                error = OperationApplyError(index, str(action), str(e))
                logger.error(str(error))
                report.errors.append(error.to_dict())

        try:
            report.committed = self.host.sync(batch)
            report.synced = True
        except Exception as e:
            logger.error(f"Failed to commit operations to {self.host.name} host: {e}", exc_info=True)
            report.sync_error = str(e)

        # Failures only detectable at sync time
        report.errors.extend(failure.to_dict() for failure in batch.failures)
        report.queued -= len(batch.failures)

        logger.info(
            f"Applied {report.queued}/{report.attempted} operations "
            f"({report.skipped} skipped, {len(report.errors)} failed)"
        )
        return report
