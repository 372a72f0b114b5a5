"""Tests for the Gemini and HuggingFace adapters."""

import json

import httpx
import pytest

from sheetmate.errors import ProviderError
from sheetmate.llm.base import ConversationTurn, interpolate_history
from sheetmate.llm.gemini_client import GeminiClient
from sheetmate.llm.huggingface_client import HuggingFaceClient
from sheetmate.operations import SetCellValue, encode_block


class TestInterpolateHistory:
    """Test flattening a conversation into one prompt."""

    def test_format(self):
        prompt = interpolate_history(
            [
                ConversationTurn("user", "Hello"),
                ConversationTurn("assistant", "Hi"),
                ConversationTurn("user", "Set A1 to 5"),
            ],
            "SYSTEM",
        )

        assert prompt == (
            "SYSTEM\n\nConversation:\n"
            "User: Hello\n"
            "Assistant: Hi\n"
            "User: Set A1 to 5\n"
            "Assistant:"
        )


class TestGeminiClient:
    """Tests for GeminiClient."""

    def test_single_prompt_and_block_extraction(self):
        requests = []
        block = encode_block([SetCellValue(address="A1", value=5)])

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200,
                json={
                    "candidates": [
                        {"content": {"parts": [{"text": f"Setting A1 to 5.\n{block}"}]}}
                    ],
                    "usageMetadata": {"promptTokenCount": 50, "candidatesTokenCount": 12},
                },
            )

        client = GeminiClient(
            api_key="gem-key", model="gemini-3-flash-preview", transport=httpx.MockTransport(handler)
        )
        response = client.send([ConversationTurn("user", "Set A1 to 5")], "SYSTEM")

        assert len(requests) == 1
        request = requests[0]
        assert request.url.path == "/v1beta/models/gemini-3-flash-preview:generateContent"
        assert request.headers["x-goog-api-key"] == "gem-key"

        body = json.loads(request.content)
        assert len(body["contents"]) == 1
        prompt = body["contents"][0]["parts"][0]["text"]
        assert prompt.startswith("SYSTEM")
        assert prompt.endswith("User: Set A1 to 5\nAssistant:")
        assert body["generationConfig"] == {"temperature": 0.7, "maxOutputTokens": 2000}

        assert response.text == "Setting A1 to 5."
        assert "excel-json" not in response.text
        assert response.operations == [SetCellValue(address="A1", value=5)]
        assert response.usage == {"input_tokens": 50, "output_tokens": 12}

    def test_multiple_parts_joined(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"candidates": [{"content": {"parts": [{"text": "Hello "}, {"text": "there"}]}}]},
            )

        client = GeminiClient("k", "gemini-3-flash-preview", transport=httpx.MockTransport(handler))
        assert client.send([ConversationTurn("user", "Hi")], "SYSTEM").text == "Hello there"

    def test_no_candidates(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}})

        client = GeminiClient("k", "gemini-3-flash-preview", transport=httpx.MockTransport(handler))
        response = client.send([ConversationTurn("user", "Hi")], "SYSTEM")

        assert response.text == "No response generated"
        assert response.operations == []

    def test_error_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": {"message": "API key not valid"}})

        client = GeminiClient("k", "gemini-3-flash-preview", transport=httpx.MockTransport(handler))
        with pytest.raises(ProviderError, match="API key not valid"):
            client.send([ConversationTurn("user", "Hi")], "SYSTEM")


class TestHuggingFaceClient:
    """Tests for HuggingFaceClient."""

    def test_list_response_strips_echoed_prompt(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            captured["body"] = body
            captured["url"] = str(request.url)
            return httpx.Response(
                200, json=[{"generated_text": body["inputs"] + " The total is 450."}]
            )

        client = HuggingFaceClient(
            api_key="hf-key",
            model="meta-llama/Llama-3.2-1B-Instruct",
            transport=httpx.MockTransport(handler),
        )
        response = client.send([ConversationTurn("user", "What is the total?")], "SYSTEM")

        assert captured["url"] == (
            "https://router.huggingface.co/hf-inference/models/meta-llama/Llama-3.2-1B-Instruct"
        )
        assert captured["body"]["parameters"] == {"max_new_tokens": 1000, "temperature": 0.7}
        assert response.text == "The total is 450."

    def test_object_response(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"generated_text": "Plain answer"})

        client = HuggingFaceClient("k", "m", transport=httpx.MockTransport(handler))
        assert client.send([ConversationTurn("user", "Hi")], "SYSTEM").text == "Plain answer"

    def test_empty_generation(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[])

        client = HuggingFaceClient("k", "m", transport=httpx.MockTransport(handler))
        assert client.send([ConversationTurn("user", "Hi")], "SYSTEM").text == "No response generated"

    def test_string_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"error": "Model is currently loading"})

        client = HuggingFaceClient("k", "m", transport=httpx.MockTransport(handler))
        with pytest.raises(ProviderError, match="Model is currently loading"):
            client.send([ConversationTurn("user", "Hi")], "SYSTEM")
