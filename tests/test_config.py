"""Tests for the config module."""

from pathlib import Path

from sheetmate.config import Settings, _parse_cors_origins


class TestParseCorsOrigins:
    """Test CORS origins parsing."""

    def test_parse_cors_origins_with_value(self, monkeypatch):
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://localhost:3000,http://localhost:8080")
        assert _parse_cors_origins() == ["http://localhost:3000", "http://localhost:8080"]

    def test_parse_cors_origins_without_value(self, monkeypatch):
        monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
        assert _parse_cors_origins() == ["*"]

    def test_parse_cors_origins_empty_string(self, monkeypatch):
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "")
        assert _parse_cors_origins() == ["*"]


class TestSettings:
    """Test Settings configuration."""

    def test_explicit_values(self, tmp_path):
        settings = Settings(
            llm_provider="gemini",
            database_path=tmp_path / "test.db",
            max_preview_rows=5,
            spreadsheet_host="gsheets",
            spreadsheet_id="sheet-123",
        )

        assert settings.llm_provider == "gemini"
        assert settings.database_path == tmp_path / "test.db"
        assert settings.max_preview_rows == 5
        assert settings.spreadsheet_host == "gsheets"
        assert settings.spreadsheet_id == "sheet-123"

    def test_path_fields_accept_strings(self):
        settings = Settings(database_path="custom/path.db")
        assert settings.database_path == Path("custom/path.db")

    def test_env_api_key_per_provider(self):
        settings = Settings(
            openrouter_api_key="or-key",
            anthropic_api_key="ant-key",
            gemini_api_key="gem-key",
            huggingface_api_key=None,
        )

        assert settings.env_api_key("openrouter") == "or-key"
        assert settings.env_api_key("anthropic") == "ant-key"
        assert settings.env_api_key("gemini") == "gem-key"
        assert settings.env_api_key("huggingface") is None
        assert settings.env_api_key("unknown") is None

    def test_limits_have_sane_defaults(self, mock_settings):
        assert mock_settings.max_history_messages >= mock_settings.history_window
        assert mock_settings.max_preview_rows > 0
        assert mock_settings.max_preview_formulas > 0
