"""LLM provider abstraction layer."""

import os

from sitewright.config.models import LLMSettings
from sitewright.llm.base import LLMProvider
from sitewright.llm.claude import ClaudeProvider
from sitewright.llm.models import LLMConfig, LLMError, LLMResponse, TokenUsage
from sitewright.llm.openai_adapter import OpenAIProvider

_PROVIDER_MAP: dict[str, type[LLMProvider]] = {
    "anthropic": ClaudeProvider,
    "openai": OpenAIProvider,
}


def create_llm_provider(settings: LLMSettings) -> LLMProvider:
    """Create an LLM provider from app-level settings.

    Resolves the API key from the env var in settings.api_key_env.
    """
    cls = _PROVIDER_MAP.get(settings.provider)
    if cls is None:
        raise ValueError(
            f"Unsupported LLM provider: {settings.provider!r}. "
            f"Supported: {', '.join(_PROVIDER_MAP)}"
        )
    api_key = os.environ.get(settings.api_key_env)
    if not api_key:
        raise ValueError(
            f"Missing API key: set environment variable {settings.api_key_env!r}"
        )
    llm_config = LLMConfig(
        provider=settings.provider,
        model=settings.model,
        max_tokens=settings.max_tokens,
        timeout=settings.timeout,
        api_key=api_key,
        base_url=settings.base_url,
    )
    return cls(llm_config)


__all__ = [
    "ClaudeProvider",
    "LLMConfig",
    "LLMError",
    "LLMProvider",
    "LLMResponse",
    "OpenAIProvider",
    "TokenUsage",
    "create_llm_provider",
]
