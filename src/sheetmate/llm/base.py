"""Base provider adapter interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from ..operations.models import Operation


@dataclass(frozen=True)
class ConversationTurn:
    """Message in a conversation."""

    role: str  # system, user, assistant
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass
class ProviderResponse:
    """Normalized response from any provider."""

    text: str
    operations: list[Operation] = field(default_factory=list)
    usage: Optional[dict] = None


class ProviderAdapter(ABC):
    """Abstract base class for provider adapters.

    ``send`` makes exactly one network call and does not retry. Credential
    checks happen in the caller before an adapter is created.
    """

    name: str = ""
    label: str = ""
    supports_tools: bool = False

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    @abstractmethod
    def send(self, history: list[ConversationTurn], system_prompt: str) -> ProviderResponse:
        """Send the conversation and return the normalized response."""
        pass


def interpolate_history(history: list[ConversationTurn], system_prompt: str) -> str:
    """Flatten a conversation into one prompt for text-completion backends."""
    prompt = system_prompt
    prompt += "\n\nConversation:\n"
    for turn in history:
        role = "User" if turn.role == "user" else "Assistant"
        prompt += f"{role}: {turn.content}\n"
    prompt += "Assistant:"
    return prompt


def describe_usage(usage: Optional[dict[str, Any]]) -> str:
    if not usage:
        return "usage unavailable"
    return f"{usage.get('input_tokens', 0)} in / {usage.get('output_tokens', 0)} out"
