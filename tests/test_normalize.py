"""Tests for provider response normalization."""

import pytest

from sheetmate.errors import ResponseParseError
from sheetmate.llm.normalize import (
    normalize_response,
    normalize_tool_calls,
    parse_arguments,
    tool_call_to_operation,
)
from sheetmate.operations import SetCellValue, SetFormula, encode_block


class TestParseArguments:
    """Test tool argument decoding."""

    def test_dict_passthrough(self):
        assert parse_arguments({"address": "A1"}) == {"address": "A1"}

    def test_json_string(self):
        assert parse_arguments('{"address": "A1", "value": 5}') == {"address": "A1", "value": 5}

    def test_empty(self):
        assert parse_arguments(None) == {}
        assert parse_arguments("") == {}

    def test_invalid_json(self):
        with pytest.raises(ResponseParseError):
            parse_arguments("{address: A1")

    def test_non_object(self):
        with pytest.raises(ResponseParseError):
            parse_arguments("[1, 2]")


class TestToolCalls:
    """Test native tool call mapping."""

    def test_name_becomes_action(self):
        op = tool_call_to_operation("setCellValue", {"address": "A1", "value": "x"})
        assert op == SetCellValue(address="A1", value="x")

    def test_unknown_tool_dropped(self):
        ops = normalize_tool_calls(
            [
                ("setFormula", '{"address": "B1", "formula": "=1+1"}'),
                ("deleteEverything", "{}"),
                ("setCellValue", "{broken"),
            ]
        )
        assert ops == [SetFormula(address="B1", formula="=1+1")]

    def test_order_preserved(self):
        ops = normalize_tool_calls(
            [
                ("setCellValue", {"address": "A1", "value": 1}),
                ("setCellValue", {"address": "A2", "value": 2}),
            ]
        )
        assert [op.address for op in ops] == ["A1", "A2"]


class TestNormalizeResponse:
    """Test combining text and tool calls."""

    def test_text_block_used_without_tool_calls(self):
        block = encode_block([SetCellValue(address="A1", value=5)])
        response = normalize_response(f"Setting A1.\n{block}", usage={"input_tokens": 3})

        assert response.text == "Setting A1."
        assert response.operations == [SetCellValue(address="A1", value=5)]
        assert response.usage == {"input_tokens": 3}

    def test_native_tool_calls_take_precedence(self):
        block = encode_block([SetCellValue(address="Z9", value="from text")])
        response = normalize_response(
            f"Done.\n{block}",
            tool_calls=[("setCellValue", {"address": "A1", "value": "from tool"})],
        )

        assert response.operations == [SetCellValue(address="A1", value="from tool")]
        assert response.text == "Done."

    def test_malformed_tool_calls_still_suppress_block(self):
        block = encode_block([SetCellValue(address="Z9", value=1)])
        response = normalize_response(block, tool_calls=[("setCellValue", "{broken")])

        assert response.operations == []
        assert response.text == ""

    def test_none_text(self):
        response = normalize_response(None)

        assert response.text == ""
        assert response.operations == []
