"""Tests for the operation executor and the simulated host."""

from unittest.mock import Mock

import pytest

from sheetmate.operations import (
    CreateChart,
    CreatePivotTable,
    CreateSheet,
    DeleteRows,
    FilterRange,
    RenameSheet,
    SetCellValue,
    SetFormula,
    SortRange,
    parse_operation,
)
from sheetmate.operations.models import PivotValue
from sheetmate.ops import ApplyReport, OperationExecutor, queue_operation
from sheetmate.sheets import SimulatedHost
from sheetmate.sheets.simulated import SimulatedBatch


@pytest.fixture
def host() -> SimulatedHost:
    return SimulatedHost()


class TestOperationExecutor:
    """Tests for OperationExecutor."""

    def test_applies_in_order_with_one_sync(self, host):
        report = OperationExecutor(host).apply(
            [
                SetCellValue(address="A1", value="Total"),
                SetFormula(address="B1", formula="=SUM(B2:B3)"),
            ]
        )

        assert report.success
        assert report.attempted == 2
        assert report.queued == 2
        assert report.committed == 2
        assert report.synced is True
        assert report.simulated is True
        assert host.sync_count == 1
        assert host.applied == [
            'write "Total" to Demo Sheet!A1',
            'write formula "=SUM(B2:B3)" to Demo Sheet!B1',
        ]

    def test_invalid_operation_does_not_block_others(self, host):
        report = OperationExecutor(host).apply(
            [
                SetCellValue(address="A1", value=1),
                SetCellValue(address="A1", value=2, sheet="Missing Sheet"),
                SetFormula(address="not a range", formula="=1"),
                SetCellValue(address="A3", value=3),
            ]
        )

        assert report.queued == 2
        assert report.committed == 2
        assert [e["index"] for e in report.errors] == [1, 2]
        assert report.errors[0]["action"] == "setCellValue"
        assert "Sheet not found" in report.errors[0]["message"]
        assert report.success is False
        assert host.sync_count == 1
        assert host.applied == ['write "1" to Demo Sheet!A1', 'write "3" to Demo Sheet!A3']

    def test_unknown_wire_actions_skipped(self, host):
        report = OperationExecutor(host).apply(
            [
                {"action": "setCellValue", "address": "A1", "value": "x"},
                {"action": "explode"},
            ]
        )

        assert report.queued == 1
        assert report.skipped == 1
        assert report.errors == []

    def test_sort_defaults_to_first_column_ascending(self, host):
        op = parse_operation({"action": "sortRange", "address": "A1:C3"})
        OperationExecutor(host).apply([op])

        assert host.applied == ["sort Demo Sheet!A1:C3 by column 0 ascending"]

    def test_sort_key_outside_range_fails(self, host):
        report = OperationExecutor(host).apply([SortRange(address="A1:B3", key=5)])

        assert report.queued == 0
        assert "outside" in report.errors[0]["message"]

    def test_sheet_prefix_in_address_wins(self, host):
        OperationExecutor(host).apply(
            [
                CreateSheet(name="Summary"),
                SetCellValue(address="Summary!A1", value="Hi", sheet="Demo Sheet"),
            ]
        )

        assert host.applied[-1] == 'write "Hi" to Summary!A1'

    def test_sheet_lifecycle_tracked_within_batch(self, host):
        report = OperationExecutor(host).apply(
            [
                CreateSheet(name="Scratch"),
                RenameSheet(name="Scratch", new_name="Notes"),
                SetCellValue(address="A1", value="x", sheet="Notes"),
                SetCellValue(address="A1", value="y", sheet="Scratch"),
            ]
        )

        assert report.queued == 3
        assert [e["index"] for e in report.errors] == [3]

    def test_chart_type_default(self, host):
        OperationExecutor(host).apply([CreateChart(address="A1:C3")])
        assert host.applied == ["create ColumnClustered chart (untitled) from Demo Sheet!A1:C3"]

    def test_pivot_destination_defaults(self, host):
        OperationExecutor(host).apply(
            [
                CreatePivotTable(
                    source_address="A1:C3",
                    destination_sheet="Pivot",
                    rows=["Header 1"],
                    values=[PivotValue(field="Header 2")],
                )
            ]
        )

        assert host.applied[0].startswith("create pivot table from Demo Sheet!A1:C3 at Pivot!A1")

    def test_filter_and_rows(self, host):
        report = OperationExecutor(host).apply(
            [
                FilterRange(address="A1:C3", column=0, criteria=["Data 1"]),
                DeleteRows(address="2:2"),
            ]
        )

        assert report.success
        assert host.applied == [
            "apply filter to Demo Sheet!A1:C3 column 0 in ['Data 1']",
            "delete rows 2-2 in Demo Sheet",
        ]

    def test_empty_list(self, host):
        report = OperationExecutor(host).apply([])

        assert report.attempted == 0
        assert report.committed == 0
        assert report.synced is True

    def test_sync_failure_reported(self):
        host = Mock()
        host.name = "gsheets"
        host.is_live = True
        host.begin_batch.return_value = SimulatedBatch("Sheet1", ["Sheet1"])
        host.sync.side_effect = RuntimeError("Failed to apply updates: 403")

        report = OperationExecutor(host).apply([SetCellValue(address="A1", value=1)])

        assert report.queued == 1
        assert report.synced is False
        assert report.sync_error == "Failed to apply updates: 403"
        assert report.success is False

    def test_begin_batch_failure_reported(self):
        host = Mock()
        host.name = "gsheets"
        host.is_live = True
        host.begin_batch.side_effect = RuntimeError("Failed to read spreadsheet")

        report = OperationExecutor(host).apply([SetCellValue(address="A1", value=1)])

        assert report.queued == 0
        assert report.sync_error == "Failed to read spreadsheet"
        host.sync.assert_not_called()


class TestQueueOperation:
    """Tests for single-operation dispatch."""

    def test_unsupported_type(self):
        batch = SimulatedBatch("Sheet1", ["Sheet1"])
        with pytest.raises(TypeError):
            queue_operation(batch, Mock())

    def test_report_success_property(self):
        assert ApplyReport().success
        assert not ApplyReport(sync_error="boom").success
