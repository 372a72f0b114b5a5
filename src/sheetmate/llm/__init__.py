"""LLM provider adapters."""

from .base import ConversationTurn, ProviderAdapter, ProviderResponse, interpolate_history
from .normalize import normalize_response, normalize_tool_calls, parse_arguments
from .openrouter_client import OPENROUTER_FREE_MODELS, OpenRouterClient
from .anthropic_client import AnthropicClient
from .gemini_client import GeminiClient
from .huggingface_client import HuggingFaceClient
from .registry import PROVIDERS, AdapterFactory, create_adapter, default_model

__all__ = [
    "ConversationTurn",
    "ProviderAdapter",
    "ProviderResponse",
    "interpolate_history",
    "normalize_response",
    "normalize_tool_calls",
    "parse_arguments",
    "OPENROUTER_FREE_MODELS",
    "OpenRouterClient",
    "AnthropicClient",
    "GeminiClient",
    "HuggingFaceClient",
    "PROVIDERS",
    "AdapterFactory",
    "create_adapter",
    "default_model",
]
