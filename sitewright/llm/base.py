"""Abstract LLM interface for Sitewright."""

from __future__ import annotations

from abc import ABC, abstractmethod

from sitewright.llm.models import LLMConfig, LLMResponse


class LLMProvider(ABC):
    """Provider-agnostic interface for planning content edits.

    The assistant sends one system prompt describing the page and the
    available tools, plus the operator's instruction, and expects a single
    JSON plan back.
    """

    def __init__(self, config: LLMConfig) -> None:
        self.config = config

    @abstractmethod
    async def generate(
        self,
        system: str,
        user: str,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Generate a complete response (one-shot)."""
        ...
