"""Chat assistant for SheetMate."""

from .orchestrator import Assistant, ChatReply, TurnState
from .prompts import SYSTEM_PROMPT, build_system_prompt

__all__ = ["Assistant", "ChatReply", "TurnState", "SYSTEM_PROMPT", "build_system_prompt"]
