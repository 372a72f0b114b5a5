"""Test doubles shared across test modules."""

from typing import Optional

from sheetmate.llm.base import ConversationTurn, ProviderAdapter, ProviderResponse
from sheetmate.llm.normalize import normalize_response


class FakeAdapter(ProviderAdapter):
    """Adapter returning canned text; records every call."""

    name = "fake"
    label = "Fake"

    def __init__(self, reply: str = "OK", supports_tools: bool = False, error: Optional[Exception] = None):
        super().__init__(api_key="test-key", model="fake-model")
        self.reply = reply
        self.supports_tools = supports_tools
        self.error = error
        self.calls: list[tuple[list[ConversationTurn], str]] = []

    def send(self, history: list[ConversationTurn], system_prompt: str) -> ProviderResponse:
        self.calls.append((list(history), system_prompt))
        if self.error:
            raise self.error
        return normalize_response(self.reply)
