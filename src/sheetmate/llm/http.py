"""Shared HTTP plumbing for httpx-based adapters."""

import logging
from typing import Any, Optional

import httpx

from ..errors import ProviderError
from .base import ProviderAdapter

logger = logging.getLogger(__name__)


def error_message(label: str, response: httpx.Response) -> str:
    """Prefer the backend's error message, fall back to the status code."""
    try:
        data = response.json()
    except ValueError:
        data = None

    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    return f"{label} API error: {response.status_code}"


class HTTPProviderAdapter(ProviderAdapter):
    """Adapter that talks JSON over HTTPS with httpx."""

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        super().__init__(api_key, model, temperature, max_tokens, timeout)
        self.transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, transport=self.transport)

    def _post(self, url: str, headers: dict, payload: dict) -> Any:
        """POST once and return the decoded JSON body."""
        with self._client() as client:
            try:
                response = client.post(url, headers=headers, json=payload)
            except httpx.HTTPError as e:
                raise ProviderError(self.name, f"{self.label} request failed: {e}") from e

        if not response.is_success:
            message = error_message(self.label, response)
            logger.warning(f"{self.label} returned {response.status_code}: {message}")
            raise ProviderError(self.name, message, response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                self.name, f"{self.label} returned an invalid response", response.status_code
            ) from e
