"""Tests for the LLM subsystem: provider factory and adapters."""

import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import openai
import pytest

from sitewright.config.models import LLMSettings
from sitewright.llm import LLMConfig, LLMError, LLMResponse, TokenUsage, create_llm_provider
from sitewright.llm.claude import ClaudeProvider
from sitewright.llm.openai_adapter import OpenAIProvider


# ---------------------------------------------------------------------------
# Model smoke tests
# ---------------------------------------------------------------------------


class TestLLMModels:
    def test_llm_config_defaults(self):
        cfg = LLMConfig(provider="anthropic", model="claude-3")
        assert cfg.max_tokens == 4096
        assert cfg.temperature == 0.0
        assert cfg.api_key is None

    def test_llm_error_message(self):
        err = LLMError("openai", "rate limited")
        assert err.provider == "openai"
        assert str(err) == "openai: rate limited"


# ---------------------------------------------------------------------------
# create_llm_provider
# ---------------------------------------------------------------------------


class TestCreateLLMProvider:
    @patch.dict(os.environ, {"ANTHROPIC_API_KEY": "test-key-123"})
    def test_creates_claude_provider(self):
        provider = create_llm_provider(LLMSettings(provider="anthropic"))
        assert isinstance(provider, ClaudeProvider)
        assert provider.config.api_key == "test-key-123"

    @patch.dict(os.environ, {"OPENAI_API_KEY": "sk-test"})
    def test_creates_openai_provider(self):
        settings = LLMSettings(provider="openai", model="gpt-4o-mini", api_key_env="OPENAI_API_KEY")
        provider = create_llm_provider(settings)
        assert isinstance(provider, OpenAIProvider)
        assert provider.config.model == "gpt-4o-mini"

    def test_unsupported_provider_raises(self):
        settings = LLMSettings()
        object.__setattr__(settings, "provider", "unsupported_llm")
        with pytest.raises(ValueError, match="Unsupported LLM provider"):
            create_llm_provider(settings)

    @patch.dict(os.environ, {}, clear=True)
    def test_missing_api_key_raises(self):
        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            create_llm_provider(LLMSettings())


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------


def _request():
    return httpx.Request("POST", "https://example.invalid/v1")


class TestClaudeProvider:
    async def test_joins_text_blocks(self):
        provider = ClaudeProvider(LLMConfig(provider="anthropic", model="m", api_key="k"))
        message = SimpleNamespace(
            content=[
                SimpleNamespace(type="text", text='{"actions": '),
                SimpleNamespace(type="tool_use", text="ignored"),
                SimpleNamespace(type="text", text="[]}"),
            ],
            usage=SimpleNamespace(input_tokens=12, output_tokens=4),
            model="m",
        )
        provider._client = MagicMock()
        provider._client.messages.create = AsyncMock(return_value=message)

        resp = await provider.generate("sys", "hi")

        assert resp == LLMResponse(
            content='{"actions": []}',
            usage=TokenUsage(input_tokens=12, output_tokens=4),
            model="m",
        )
        kwargs = provider._client.messages.create.await_args.kwargs
        assert kwargs["system"] == "sys"
        assert kwargs["messages"] == [{"role": "user", "content": "hi"}]
        assert kwargs["max_tokens"] == 4096

    async def test_api_error_wrapped(self):
        provider = ClaudeProvider(LLMConfig(provider="anthropic", model="m", api_key="k"))
        provider._client = MagicMock()
        provider._client.messages.create = AsyncMock(
            side_effect=anthropic.APIConnectionError(request=_request())
        )
        with pytest.raises(LLMError) as exc_info:
            await provider.generate("sys", "hi")
        assert exc_info.value.provider == "anthropic"


class TestOpenAIProvider:
    async def test_maps_completion(self):
        provider = OpenAIProvider(LLMConfig(provider="openai", model="gpt", api_key="k"))
        completion = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="{}"))],
            usage=SimpleNamespace(prompt_tokens=7, completion_tokens=2),
            model="gpt",
        )
        provider._client = MagicMock()
        provider._client.chat.completions.create = AsyncMock(return_value=completion)

        resp = await provider.generate("sys", "hi", max_tokens=100)

        assert resp.content == "{}"
        assert resp.usage.input_tokens == 7
        kwargs = provider._client.chat.completions.create.await_args.kwargs
        assert kwargs["max_tokens"] == 100
        assert kwargs["messages"][0] == {"role": "system", "content": "sys"}

    async def test_missing_usage_and_content(self):
        provider = OpenAIProvider(LLMConfig(provider="openai", model="gpt", api_key="k"))
        completion = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=None))],
            usage=None,
            model="gpt",
        )
        provider._client = MagicMock()
        provider._client.chat.completions.create = AsyncMock(return_value=completion)

        resp = await provider.generate("sys", "hi")
        assert resp.content == ""
        assert resp.usage == TokenUsage(input_tokens=0, output_tokens=0)

    async def test_api_error_wrapped(self):
        provider = OpenAIProvider(LLMConfig(provider="openai", model="gpt", api_key="k"))
        provider._client = MagicMock()
        provider._client.chat.completions.create = AsyncMock(
            side_effect=openai.APIConnectionError(request=_request())
        )
        with pytest.raises(LLMError, match="openai"):
            await provider.generate("sys", "hi")
