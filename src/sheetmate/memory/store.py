"""SQLite-based store for settings and conversation history."""

import base64
import binascii
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import aiosqlite

from ..config import Settings, settings as default_settings
from ..llm.base import ConversationTurn
from ..llm.registry import PROVIDERS, default_model
from .models import ChatSettings

logger = logging.getLogger(__name__)

API_KEY = "api_key"
PROVIDER = "provider"
MODEL_PREFIX = "model:"


def _encode_key(key: str) -> str:
    # Obscured, not encrypted
    return base64.b64encode(key.encode("utf-8")).decode("ascii")


def _decode_key(encoded: str) -> Optional[str]:
    try:
        return base64.b64decode(encoded.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        logger.error(f"Failed to decode stored API key: {e}")
        return None


class MemoryStore:
    """Persistent storage for provider settings and chat history."""

    def __init__(self, db_path: Optional[Path] = None, config: Optional[Settings] = None):
        self.config = config or default_settings
        self.db_path = Path(db_path or self.config.database_path)
        self.max_messages = self.config.max_history_messages
        self._connection: Optional[aiosqlite.Connection] = None

    async def initialize(self):
        """Initialize the database and create tables."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(str(self.db_path))

        await self._connection.executescript(
            """
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS messages (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                role TEXT NOT NULL,
                content TEXT NOT NULL,
                created_at TEXT NOT NULL
            );
            """
        )
        await self._connection.commit()

    async def close(self):
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    # Settings
    async def _get(self, key: str) -> Optional[str]:
        async with self._connection.execute(
            "SELECT value FROM settings WHERE key = ?", (key,)
        ) as cursor:
            row = await cursor.fetchone()
            return row[0] if row else None

    async def _set(self, key: str, value: str):
        await self._connection.execute(
            "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)", (key, value)
        )
        await self._connection.commit()

    async def _delete(self, key: str):
        await self._connection.execute("DELETE FROM settings WHERE key = ?", (key,))
        await self._connection.commit()

    async def save_api_key(self, key: str):
        """Save the API key (base64 obscured)."""
        await self._set(API_KEY, _encode_key(key))

    async def get_api_key(self) -> Optional[str]:
        encoded = await self._get(API_KEY)
        return _decode_key(encoded) if encoded else None

    async def clear_api_key(self):
        await self._delete(API_KEY)

    async def has_api_key(self) -> bool:
        return await self._get(API_KEY) is not None

    async def save_provider(self, provider: str):
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown provider: {provider}")
        await self._set(PROVIDER, provider)

    async def get_provider(self) -> str:
        return await self._get(PROVIDER) or self.config.llm_provider

    async def save_model(self, model: str, provider: Optional[str] = None):
        """Save the model for a provider, the current one by default."""
        provider = provider or await self.get_provider()
        await self._set(MODEL_PREFIX + provider, model)

    async def get_model(self, provider: Optional[str] = None) -> str:
        provider = provider or await self.get_provider()
        return await self._get(MODEL_PREFIX + provider) or default_model(provider, self.config)

    async def get_settings(self) -> ChatSettings:
        """Settings for the next request; environment keys fill in unsaved values."""
        provider = await self.get_provider()
        api_key = await self.get_api_key() or self.config.env_api_key(provider)
        return ChatSettings(api_key=api_key, provider=provider, model=await self.get_model(provider))

    # History
    async def get_messages(self) -> list[ConversationTurn]:
        """Get stored messages in conversation order."""
        async with self._connection.execute(
            "SELECT role, content FROM messages ORDER BY id"
        ) as cursor:
            rows = await cursor.fetchall()
            return [ConversationTurn(role=row[0], content=row[1]) for row in rows]

    async def save_messages(self, messages: list[ConversationTurn]):
        """Replace the stored history, keeping only the most recent messages."""
        recent = [m for m in messages if m.role != "system"][-self.max_messages :]
        now = datetime.now(timezone.utc).isoformat()

        await self._connection.execute("DELETE FROM messages")
        await self._connection.executemany(
            "INSERT INTO messages (role, content, created_at) VALUES (?, ?, ?)",
            [(m.role, m.content, now) for m in recent],
        )
        await self._connection.commit()

    async def clear_messages(self):
        await self._connection.execute("DELETE FROM messages")
        await self._connection.commit()
