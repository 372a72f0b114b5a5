"""Tests for API routes."""

from unittest.mock import AsyncMock, Mock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from sheetmate.agent import ChatReply, TurnState
from sheetmate.errors import MissingCredentialError, ProviderError
from sheetmate.llm.base import ConversationTurn
from sheetmate.memory import ChatSettings
from sheetmate.operations import SetCellValue
from sheetmate.ops import ApplyReport
from sheetmate.api.routes import router


@pytest.fixture
def mock_assistant():
    """Create a mocked assistant."""
    assistant = Mock()
    assistant.state = TurnState.IDLE
    assistant.pending_operations = []
    assistant.host = Mock(is_live=False)
    assistant.host.name = "simulated"
    assistant.chat = AsyncMock(
        return_value=ChatReply(
            text="Setting A1.",
            operations=[{"action": "setCellValue", "address": "A1", "value": 5}],
        )
    )
    assistant.apply_pending = AsyncMock(
        return_value=ApplyReport(attempted=1, queued=1, committed=1, synced=True, simulated=True)
    )
    assistant.discard_pending = Mock(return_value=1)
    assistant.reset_conversation = AsyncMock()
    assistant.test_connection = AsyncMock(return_value=True)
    assistant.list_models = AsyncMock(return_value=[{"id": "m:free", "name": "M (Free)"}])

    store = Mock()
    store.get_settings = AsyncMock(
        return_value=ChatSettings(api_key="secret", provider="openrouter", model="m:free")
    )
    store.save_provider = AsyncMock()
    store.save_model = AsyncMock()
    store.save_api_key = AsyncMock()
    store.clear_api_key = AsyncMock()
    store.get_messages = AsyncMock(return_value=[ConversationTurn("user", "Hello")])
    assistant.memory_store = store
    return assistant


@pytest.fixture
def test_client(mock_assistant):
    """Create a test client with a mocked assistant."""
    app = FastAPI()
    app.include_router(router, prefix="/api")

    with patch("sheetmate.api.routes.get_assistant", return_value=mock_assistant):
        yield TestClient(app)


class TestChatEndpoint:
    """Test the /api/chat endpoint."""

    def test_chat_success(self, test_client, mock_assistant):
        response = test_client.post("/api/chat", json={"message": " Set A1 to 5 "})

        assert response.status_code == 200
        data = response.json()
        assert data["response"] == "Setting A1."
        assert data["operations"][0]["action"] == "setCellValue"
        assert data["superseded"] is False
        mock_assistant.chat.assert_awaited_once_with("Set A1 to 5")

    def test_empty_message(self, test_client):
        assert test_client.post("/api/chat", json={"message": "   "}).status_code == 400

    def test_missing_credential(self, test_client, mock_assistant):
        mock_assistant.chat.side_effect = MissingCredentialError("openrouter")

        response = test_client.post("/api/chat", json={"message": "Hi"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Please configure your API key in Settings"

    def test_provider_error(self, test_client, mock_assistant):
        mock_assistant.chat.side_effect = ProviderError("openrouter", "Rate limited", 429)

        response = test_client.post("/api/chat", json={"message": "Hi"})

        assert response.status_code == 502
        assert response.json()["detail"] == "Rate limited"


class TestOperationEndpoints:
    """Test pending operation endpoints."""

    def test_pending(self, test_client, mock_assistant):
        mock_assistant.state = TurnState.PENDING
        mock_assistant.pending_operations = [SetCellValue(address="A1", value=5)]

        data = test_client.get("/api/operations/pending").json()

        assert data["state"] == "pending"
        assert data["operations"] == [{"action": "setCellValue", "address": "A1", "value": 5}]

    def test_apply(self, test_client, mock_assistant):
        mock_assistant.pending_operations = [SetCellValue(address="A1", value=5)]

        response = test_client.post("/api/operations/apply")

        assert response.status_code == 200
        data = response.json()
        assert data["committed"] == 1
        assert data["success"] is True

    def test_apply_nothing_pending(self, test_client):
        assert test_client.post("/api/operations/apply").status_code == 409

    def test_discard(self, test_client):
        assert test_client.post("/api/operations/discard").json() == {
            "status": "ok",
            "discarded": 1,
        }


class TestSettingsEndpoints:
    """Test settings endpoints."""

    def test_get_settings_hides_key(self, test_client):
        data = test_client.get("/api/settings").json()

        assert data["provider"] == "openrouter"
        assert data["has_api_key"] is True
        assert "secret" not in str(data)
        assert set(data["providers"]) == {"openrouter", "anthropic", "gemini", "huggingface"}

    def test_update_settings(self, test_client, mock_assistant):
        response = test_client.put(
            "/api/settings", json={"provider": "gemini", "model": "gemini-pro", "api_key": " k "}
        )

        assert response.status_code == 200
        store = mock_assistant.memory_store
        store.save_provider.assert_awaited_once_with("gemini")
        store.save_model.assert_awaited_once_with("gemini-pro")
        store.save_api_key.assert_awaited_once_with("k")

    def test_update_unknown_provider(self, test_client, mock_assistant):
        mock_assistant.memory_store.save_provider.side_effect = ValueError("Unknown provider: x")

        response = test_client.put("/api/settings", json={"provider": "x"})

        assert response.status_code == 400

    def test_clear_api_key(self, test_client, mock_assistant):
        assert test_client.delete("/api/settings/api-key").status_code == 200
        mock_assistant.memory_store.clear_api_key.assert_awaited_once()


class TestHistoryAndProviderEndpoints:
    """Test history, models and connection endpoints."""

    def test_history(self, test_client):
        assert test_client.get("/api/history").json() == {
            "messages": [{"role": "user", "content": "Hello"}]
        }

    def test_clear_history(self, test_client, mock_assistant):
        assert test_client.delete("/api/history").status_code == 200
        mock_assistant.reset_conversation.assert_awaited_once()

    def test_models(self, test_client):
        assert test_client.get("/api/models").json()["models"][0]["id"] == "m:free"

    def test_connection_test(self, test_client):
        assert test_client.post("/api/connection-test").json() == {"ok": True}

    def test_connection_test_without_key(self, test_client, mock_assistant):
        mock_assistant.test_connection.side_effect = MissingCredentialError("openrouter")
        assert test_client.post("/api/connection-test").status_code == 401

    def test_health(self, test_client):
        data = test_client.get("/api/health").json()

        assert data["status"] == "ok"
        assert data["service"] == "sheetmate"
        assert data["config"]["spreadsheet_host"] == "simulated"
