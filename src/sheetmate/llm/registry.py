"""Provider tag to adapter dispatch."""

from typing import Callable, Optional

from ..config import Settings, settings as default_settings
from .anthropic_client import AnthropicClient
from .base import ProviderAdapter
from .gemini_client import GeminiClient
from .huggingface_client import HuggingFaceClient
from .openrouter_client import OpenRouterClient

PROVIDERS: dict[str, type[ProviderAdapter]] = {
    "openrouter": OpenRouterClient,
    "anthropic": AnthropicClient,
    "gemini": GeminiClient,
    "huggingface": HuggingFaceClient,
}


def default_model(provider: str, config: Optional[Settings] = None) -> str:
    """Model used when none has been saved."""
    config = config or default_settings
    return {
        "openrouter": config.model_name,
        "anthropic": config.anthropic_model,
        "gemini": config.gemini_model,
        "huggingface": config.huggingface_model,
    }.get(provider, config.model_name)


def create_adapter(
    provider: str,
    api_key: str,
    model: Optional[str] = None,
    config: Optional[Settings] = None,
) -> ProviderAdapter:
    """Build the adapter for a provider tag."""
    config = config or default_settings
    if provider not in PROVIDERS:
        raise ValueError(f"Unknown provider: {provider}")

    max_tokens = config.huggingface_max_new_tokens if provider == "huggingface" else config.max_tokens
    kwargs = {}
    if provider == "openrouter":
        kwargs["use_tools"] = config.openrouter_use_tools

    return PROVIDERS[provider](
        api_key=api_key,
        model=model or default_model(provider, config),
        temperature=config.temperature,
        max_tokens=max_tokens,
        timeout=config.request_timeout,
        **kwargs,
    )


AdapterFactory = Callable[[str, str, Optional[str]], ProviderAdapter]
