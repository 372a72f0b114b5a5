"""Anthropic provider adapter."""

import logging
from typing import Optional

from anthropic import Anthropic, APIConnectionError, APIStatusError

from ..errors import ProviderError
from ..operations.schema import OperationSchema, operation_schema
from .base import ConversationTurn, ProviderAdapter, ProviderResponse, describe_usage
from .normalize import normalize_response

logger = logging.getLogger(__name__)


def _status_error_message(error: APIStatusError) -> str:
    body = error.body if isinstance(error.body, dict) else {}
    detail = body.get("error")
    if isinstance(detail, dict) and detail.get("message"):
        return str(detail["message"])
    return f"Anthropic API error: {error.status_code}"


class AnthropicClient(ProviderAdapter):
    """Anthropic Claude with native tool use."""

    name = "anthropic"
    label = "Anthropic"
    supports_tools = True

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        timeout: float = 60.0,
        client: Optional[Anthropic] = None,
        schema: OperationSchema = operation_schema,
    ):
        super().__init__(api_key, model, temperature, max_tokens, timeout)
        # One request per turn: the SDK's automatic retries are disabled
        self.client = client or Anthropic(api_key=api_key, timeout=timeout, max_retries=0)
        self.schema = schema

    def send(self, history: list[ConversationTurn], system_prompt: str) -> ProviderResponse:
        """Create a message with Claude."""
        messages = [turn.to_dict() for turn in history if turn.role != "system"]
        logger.info(f"Anthropic request: model={self.model}, messages={len(messages)}")

        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=system_prompt,
                tools=self.schema.to_anthropic_tools(),
                messages=messages,
            )
        except APIStatusError as e:
            raise ProviderError(self.name, _status_error_message(e), e.status_code) from e
        except APIConnectionError as e:
            raise ProviderError(self.name, f"Anthropic request failed: {e}") from e

        text_parts = []
        tool_calls = []
        for block in response.content:
            if block.type == "text":
                text_parts.append(block.text)
            elif block.type == "tool_use":
                tool_calls.append((block.name, block.input))

        usage = {
            "input_tokens": response.usage.input_tokens,
            "output_tokens": response.usage.output_tokens,
        }
        logger.info(f"Anthropic response: {len(tool_calls)} tool call(s), {describe_usage(usage)}")
        return normalize_response("".join(text_parts), tool_calls, usage)
