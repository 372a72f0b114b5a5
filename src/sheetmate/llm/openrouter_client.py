"""OpenRouter provider adapter."""

import logging
from typing import Optional

import httpx

from ..operations.schema import OperationSchema, operation_schema
from .base import ConversationTurn, ProviderResponse, describe_usage
from .http import HTTPProviderAdapter
from .normalize import normalize_response

logger = logging.getLogger(__name__)

# Free models available on OpenRouter
OPENROUTER_FREE_MODELS = [
    {"id": "meta-llama/llama-3.1-8b-instruct:free", "name": "Llama 3.1 8B (Free)"},
    {"id": "mistralai/mistral-7b-instruct:free", "name": "Mistral 7B (Free)"},
    {"id": "google/gemma-7b-it:free", "name": "Gemma 7B (Free)"},
    {"id": "microsoft/phi-3-mini-128k-instruct:free", "name": "Phi-3 Mini (Free)"},
]


class OpenRouterClient(HTTPProviderAdapter):
    """OpenRouter chat completions with native function calling."""

    name = "openrouter"
    label = "OpenRouter"

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
        base_url: str = "https://openrouter.ai/api/v1",
        use_tools: bool = True,
        schema: OperationSchema = operation_schema,
    ):
        super().__init__(api_key, model, temperature, max_tokens, timeout, transport)
        self.base_url = base_url.rstrip("/")
        self.use_tools = use_tools
        self.supports_tools = use_tools
        self.schema = schema

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": "https://github.com/sheetmate/sheetmate",
            "X-Title": "SheetMate",
        }

    def send(self, history: list[ConversationTurn], system_prompt: str) -> ProviderResponse:
        """Send the conversation via the chat completions API."""
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend(turn.to_dict() for turn in history if turn.role != "system")

        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        if self.use_tools:
            payload["tools"] = self.schema.to_openai_tools()

        logger.info(f"OpenRouter request: model={self.model}, messages={len(messages)}")
        data = self._post(f"{self.base_url}/chat/completions", self._headers(), payload)
        return self._convert_response(data)

    def _convert_response(self, data: dict) -> ProviderResponse:
        """Convert an OpenRouter response to the canonical form."""
        choices = data.get("choices") or []
        message = choices[0].get("message", {}) if choices else {}

        tool_calls = []
        for tool_call in message.get("tool_calls") or []:
            function = tool_call.get("function", {})
            tool_calls.append((function.get("name", ""), function.get("arguments")))

        usage = None
        if "usage" in data:
            usage = {
                "input_tokens": data["usage"].get("prompt_tokens", 0),
                "output_tokens": data["usage"].get("completion_tokens", 0),
            }
        logger.info(f"OpenRouter response: {len(tool_calls)} tool call(s), {describe_usage(usage)}")

        return normalize_response(message.get("content") or "", tool_calls, usage)

    def list_models(self) -> list[dict]:
        """List available models, free ones first."""
        try:
            with self._client() as client:
                response = client.get(f"{self.base_url}/models")
            if not response.is_success:
                return OPENROUTER_FREE_MODELS
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Failed to fetch OpenRouter models: {e}")
            return OPENROUTER_FREE_MODELS

        models = [{"id": m["id"], "name": m.get("name") or m["id"]} for m in data.get("data", [])]
        return sorted(models, key=lambda m: (":free" not in m["id"], m["name"].lower()))
