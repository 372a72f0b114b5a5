"""Tests for the fenced operations block."""

import pytest

from sheetmate.errors import ResponseParseError
from sheetmate.operations import (
    CellFormat,
    CreateChart,
    CreatePivotTable,
    FormatRange,
    SetCellValue,
    SetFormula,
    SortRange,
    encode_block,
    extract_operations,
    find_block,
    parse_block,
    strip_blocks,
)
from sheetmate.operations.models import PivotValue


class TestFindBlock:
    """Test locating the block."""

    def test_no_block(self):
        assert find_block("Just some advice about VLOOKUP.") is None

    def test_payload_returned(self):
        text = 'Here:\n```excel-json\n{"operations": []}\n```\nDone.'
        assert find_block(text) == '{"operations": []}'

    def test_other_languages_ignored(self):
        assert find_block('```json\n{"operations": []}\n```') is None

    def test_first_block_wins(self):
        text = "```excel-json\nfirst\n```\nand\n```excel-json\nsecond\n```"
        assert find_block(text) == "first"


class TestStripBlocks:
    """Test display text cleanup."""

    def test_all_blocks_removed(self):
        text = "Before\n```excel-json\n{}\n```\nMiddle\n```excel-json\n{}\n```\nAfter"
        result = strip_blocks(text)

        assert "excel-json" not in result
        assert "Before" in result
        assert "Middle" in result
        assert "After" in result

    def test_blank_lines_collapsed(self):
        text = "Intro\n\n```excel-json\n{}\n```\n\n\nOutro"
        assert strip_blocks(text) == "Intro\n\nOutro"

    def test_plain_text_unchanged(self):
        assert strip_blocks("  =SUM(A1:A10) adds the range.  ") == "=SUM(A1:A10) adds the range."


class TestParseBlock:
    """Test block payload parsing."""

    def test_invalid_json(self):
        with pytest.raises(ResponseParseError, match="Invalid JSON"):
            parse_block("{not json")

    def test_requires_operations_key(self):
        with pytest.raises(ResponseParseError):
            parse_block('[{"action": "setCellValue", "address": "A1", "value": 1}]')

    def test_valid_items(self):
        ops = parse_block(
            '{"operations": [{"action": "setFormula", "address": "C1", "formula": "=A1+B1"}]}'
        )
        assert ops == [SetFormula(address="C1", formula="=A1+B1")]


class TestExtractOperations:
    """Test splitting model text into display text and operations."""

    def test_text_without_block(self):
        display, ops = extract_operations("The total in C10 is 450.")

        assert display == "The total in C10 is 450."
        assert ops == []

    def test_malformed_block_yields_no_operations(self):
        display, ops = extract_operations("I'll do it.\n```excel-json\n{oops\n```")

        assert display == "I'll do it."
        assert ops == []

    def test_round_trip(self):
        operations = [
            SetCellValue(address="A1", value="Header"),
            SetCellValue(address="B2", value=42),
            SetFormula(address="B1", formula="=SUM(A1:A10)"),
            FormatRange(address="A1:C1", format=CellFormat(bold=True, fill="#FFFF00")),
            CreateChart(address="A1:B5", chart_type="Line", title="Trend"),
            CreatePivotTable(
                source_address="A1:D20",
                rows=["Region"],
                values=[PivotValue(field="Revenue", function="Average")],
            ),
            SortRange(address="A2:C10", key=2, ascending=False),
        ]
        text = f"Updating the sheet.\n\n{encode_block(operations)}\n\nLet me know."

        display, parsed = extract_operations(text)

        assert parsed == operations
        assert display == "Updating the sheet.\n\nLet me know."
