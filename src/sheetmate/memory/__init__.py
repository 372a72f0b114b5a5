"""Persistence for provider settings and conversation history."""

from .store import MemoryStore
from .models import ChatSettings

__all__ = ["MemoryStore", "ChatSettings"]
