"""Normalization of provider output into canonical operations.

Native tool calls and the fenced text block are the two sources of
operations. When a response carries native tool calls, those win: the
text block is still stripped from the display text but its operations
are discarded, so nothing is applied twice.
"""

import json
import logging
from typing import Any, Optional

from ..errors import ResponseParseError
from ..operations.fence import extract_operations
from ..operations.models import Operation, parse_operation
from .base import ProviderResponse

logger = logging.getLogger(__name__)


def parse_arguments(arguments: Any) -> dict:
    """Accept tool arguments as a dict or a JSON-encoded string."""
    if arguments is None or arguments == "":
        return {}
    if isinstance(arguments, str):
        try:
            arguments = json.loads(arguments)
        except json.JSONDecodeError as e:
            raise ResponseParseError(f"Tool arguments are not valid JSON: {e}") from e
    if not isinstance(arguments, dict):
        raise ResponseParseError(
            f"Tool arguments must be an object, got {type(arguments).__name__}"
        )
    return arguments


def tool_call_to_operation(name: str, arguments: Any) -> Operation:
    """Map one native tool invocation to an operation."""
    data = dict(parse_arguments(arguments))
    data["action"] = name
    return parse_operation(data)


def normalize_tool_calls(tool_calls: list[tuple[str, Any]]) -> list[Operation]:
    """Map native tool invocations 1:1, dropping malformed ones."""
    operations = []
    for name, arguments in tool_calls:
        try:
            operations.append(tool_call_to_operation(name, arguments))
        except ResponseParseError as e:
            logger.warning(f"Skipping tool call {name!r}: {e}")
    return operations


def normalize_response(
    text: Optional[str],
    tool_calls: Optional[list[tuple[str, Any]]] = None,
    usage: Optional[dict] = None,
) -> ProviderResponse:
    """Build a ProviderResponse from raw text and native tool calls."""
    display, block_operations = extract_operations(text or "")

    if tool_calls:
        operations = normalize_tool_calls(tool_calls)
        if block_operations:
            logger.info(
                f"Native tool calls take precedence; ignoring {len(block_operations)} "
                "operation(s) from the text block"
            )
    else:
        operations = block_operations

    return ProviderResponse(text=display, operations=operations, usage=usage)
