"""HuggingFace Inference provider adapter."""

import logging
from typing import Optional

import httpx

from .base import ConversationTurn, ProviderResponse, interpolate_history
from .http import HTTPProviderAdapter
from .normalize import normalize_response

logger = logging.getLogger(__name__)


class HuggingFaceClient(HTTPProviderAdapter):
    """Text-generation inference with the conversation flattened into one prompt."""

    name = "huggingface"
    label = "HuggingFace"

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
        base_url: str = "https://router.huggingface.co/hf-inference/models",
    ):
        super().__init__(api_key, model, temperature, max_tokens, timeout, transport)
        self.base_url = base_url.rstrip("/")

    def send(self, history: list[ConversationTurn], system_prompt: str) -> ProviderResponse:
        prompt = interpolate_history(
            [t for t in history if t.role != "system"], system_prompt
        )
        payload = {
            "inputs": prompt,
            "parameters": {
                "max_new_tokens": self.max_tokens,
                "temperature": self.temperature,
            },
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        logger.info(f"HuggingFace request: model={self.model}, prompt_chars={len(prompt)}")
        data = self._post(f"{self.base_url}/{self.model}", headers, payload)

        # The API answers with either a list of generations or a single object
        if isinstance(data, list):
            generated = data[0].get("generated_text", "") if data else ""
        else:
            generated = data.get("generated_text") or ""
        text = generated.replace(prompt, "").strip()

        return normalize_response(text or "No response generated")
