"""Google Gemini provider adapter."""

import logging
from typing import Optional

import httpx

from .base import ConversationTurn, ProviderResponse, interpolate_history
from .http import HTTPProviderAdapter
from .normalize import normalize_response

logger = logging.getLogger(__name__)


class GeminiClient(HTTPProviderAdapter):
    """Gemini generateContent with the conversation flattened into one prompt."""

    name = "gemini"
    label = "Gemini"

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
    ):
        super().__init__(api_key, model, temperature, max_tokens, timeout, transport)
        self.base_url = base_url.rstrip("/")

    def send(self, history: list[ConversationTurn], system_prompt: str) -> ProviderResponse:
        prompt = interpolate_history(
            [t for t in history if t.role != "system"], system_prompt
        )
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_tokens,
            },
        }
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key}

        logger.info(f"Gemini request: model={self.model}, prompt_chars={len(prompt)}")
        data = self._post(f"{self.base_url}/models/{self.model}:generateContent", headers, payload)

        candidates = data.get("candidates") or []
        parts = candidates[0].get("content", {}).get("parts", []) if candidates else []
        text = "".join(part.get("text", "") for part in parts)
        if not candidates:
            reason = data.get("promptFeedback", {}).get("blockReason")
            logger.warning(f"Gemini returned no candidates (blockReason={reason})")

        usage = None
        if "usageMetadata" in data:
            usage = {
                "input_tokens": data["usageMetadata"].get("promptTokenCount", 0),
                "output_tokens": data["usageMetadata"].get("candidatesTokenCount", 0),
            }
        return normalize_response(text or "No response generated", usage=usage)
