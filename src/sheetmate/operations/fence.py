"""Extraction of the fenced operations block from model text."""

import json
import logging
import re
from typing import Optional

from ..errors import ResponseParseError
from .models import Operation, parse_operations
from .schema import BLOCK_LANGUAGE

logger = logging.getLogger(__name__)

_BLOCK_RE = re.compile(rf"```{re.escape(BLOCK_LANGUAGE)}[ \t]*\r?\n?(.*?)```", re.DOTALL)
_BLANK_LINES_RE = re.compile(r"\n{3,}")


def find_block(text: str) -> Optional[str]:
    """Return the payload of the first operations block, if any."""
    match = _BLOCK_RE.search(text or "")
    return match.group(1).strip() if match else None


def strip_blocks(text: str) -> str:
    """Remove every operations block from display text."""
    stripped = _BLOCK_RE.sub("", text or "")
    return _BLANK_LINES_RE.sub("\n\n", stripped).strip()


def parse_block(payload: str) -> list[Operation]:
    """Parse a block payload of shape ``{"operations": [...]}``.

    Raises ResponseParseError when the payload is not valid JSON or has
    the wrong shape. Individual bad items are skipped.
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Invalid JSON in {BLOCK_LANGUAGE} block: {e}") from e

    if not isinstance(data, dict) or "operations" not in data:
        raise ResponseParseError(f"{BLOCK_LANGUAGE} block must be an object with 'operations'")
    return parse_operations(data["operations"])


def extract_operations(text: str) -> tuple[str, list[Operation]]:
    """Split model text into display text and embedded operations.

    A malformed block yields no operations; the display text is still
    returned with the block removed.
    """
    payload = find_block(text)
    display = strip_blocks(text)
    if payload is None:
        return display, []

    try:
        return display, parse_block(payload)
    except ResponseParseError as e:
        logger.warning(f"Ignoring operations block: {e}")
        return display, []
