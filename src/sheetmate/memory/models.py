"""Data models for the settings and history stores."""

from typing import Optional
from pydantic import BaseModel


class ChatSettings(BaseModel):
    """Per-request provider configuration."""

    api_key: Optional[str] = None
    provider: str = "openrouter"
    model: str = ""

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)
