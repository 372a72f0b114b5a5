"""Configuration management for SheetMate."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _parse_cors_origins() -> list[str]:
    """Parse CORS origins from environment variable."""
    cors_env = os.getenv("CORS_ALLOW_ORIGINS")
    if cors_env:
        return cors_env.split(",")
    return ["*"]


class Settings(BaseModel):
    """Application settings."""

    # LLM provider ('openrouter', 'anthropic', 'gemini' or 'huggingface')
    llm_provider: str = os.getenv("LLM_PROVIDER", "openrouter")

    # Provider API keys, used when no key has been saved in the settings store
    openrouter_api_key: Optional[str] = os.getenv("OPENROUTER_API_KEY")
    anthropic_api_key: Optional[str] = os.getenv("ANTHROPIC_API_KEY")
    gemini_api_key: Optional[str] = os.getenv("GEMINI_API_KEY")
    huggingface_api_key: Optional[str] = os.getenv("HUGGINGFACE_API_KEY")

    # Model selection
    model_name: str = os.getenv("MODEL_NAME", "meta-llama/llama-3.1-8b-instruct:free")
    anthropic_model: str = os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-20250514")
    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-3-flash-preview")
    huggingface_model: str = os.getenv("HUGGINGFACE_MODEL", "meta-llama/Llama-3.2-1B-Instruct")

    # Generation parameters
    temperature: float = float(os.getenv("TEMPERATURE", "0.7"))
    max_tokens: int = int(os.getenv("MAX_TOKENS", "2000"))
    huggingface_max_new_tokens: int = int(os.getenv("HUGGINGFACE_MAX_NEW_TOKENS", "1000"))
    request_timeout: float = float(os.getenv("REQUEST_TIMEOUT", "60"))

    # Send the operation vocabulary to OpenRouter as native tools
    openrouter_use_tools: bool = os.getenv("OPENROUTER_USE_TOOLS", "true").lower() == "true"

    # Spreadsheet host ('simulated' or 'gsheets')
    spreadsheet_host: str = os.getenv("SPREADSHEET_HOST", "simulated")
    spreadsheet_id: Optional[str] = os.getenv("SPREADSHEET_ID")

    # Google Sheets API credentials
    google_credentials_path: Path = Path(os.getenv("GOOGLE_CREDENTIALS_PATH", "credentials.json"))
    google_token_path: Path = Path(os.getenv("GOOGLE_TOKEN_PATH", "token.json"))

    # Database path for settings and conversation history
    database_path: Path = Path(os.getenv("DATABASE_PATH", "data/sheetmate.db"))

    # Context limits
    max_preview_rows: int = int(os.getenv("MAX_PREVIEW_ROWS", "20"))
    max_preview_formulas: int = int(os.getenv("MAX_PREVIEW_FORMULAS", "20"))
    max_history_messages: int = int(os.getenv("MAX_HISTORY_MESSAGES", "50"))
    # Prior messages sent to the provider with each turn
    history_window: int = int(os.getenv("HISTORY_WINDOW", "10"))

    # Server settings
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"

    # CORS settings (comma-separated list of allowed origins, or * for all)
    cors_allow_origins: list[str] = _parse_cors_origins()

    def env_api_key(self, provider: str) -> Optional[str]:
        """Return the API key configured in the environment for a provider."""
        return {
            "openrouter": self.openrouter_api_key,
            "anthropic": self.anthropic_api_key,
            "gemini": self.gemini_api_key,
            "huggingface": self.huggingface_api_key,
        }.get(provider)


settings = Settings()
