"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from sheetmate.config import Settings
from sheetmate.memory import MemoryStore


@pytest.fixture
def mock_settings(tmp_path: Path) -> Settings:
    """Create settings with test values and no environment keys."""
    return Settings(
        llm_provider="openrouter",
        openrouter_api_key=None,
        anthropic_api_key=None,
        gemini_api_key=None,
        huggingface_api_key=None,
        model_name="meta-llama/llama-3.1-8b-instruct:free",
        spreadsheet_host="simulated",
        google_credentials_path=tmp_path / "credentials.json",
        google_token_path=tmp_path / "token.json",
        database_path=tmp_path / "test.db",
        host="127.0.0.1",
        port=8000,
        debug=False,
        cors_allow_origins=["*"],
    )


@pytest_asyncio.fixture
async def memory_store(mock_settings: Settings) -> AsyncGenerator[MemoryStore, None]:
    """A store backed by a temporary database."""
    store = MemoryStore(config=mock_settings)
    await store.initialize()
    yield store
    await store.close()

