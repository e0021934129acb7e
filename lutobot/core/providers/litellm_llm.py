"""LiteLLM provider — Gemini, OpenAI, Anthropic and any other litellm model string."""

from __future__ import annotations

import os
from typing import Any

import litellm
from langchain_core.messages import AIMessage
from loguru import logger

from lutobot.core.config.schema import Config
from lutobot.core.providers.base import BaseLLMProvider, ProviderError, usage_metadata

litellm.suppress_debug_info = True


class LiteLLMLLM(BaseLLMProvider):
    """LiteLLM-backed provider (default backend)."""

    name = "litellm"

    def __init__(self, config: Config) -> None:
        super().__init__(
            model=config.llm.model,
            temperature=config.llm.temperature,
            max_tokens=config.llm.max_tokens,
        )
        self.api_key = config.get_api_key()
        self.api_base = config.get_api_base()
        self._setup_keys(config)

    async def achat(
        self,
        messages: list[dict[str, Any]],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        response_format: dict[str, Any] | None = None,
    ) -> AIMessage:
        """Call LiteLLM and return a LangChain AIMessage."""
        kwargs: dict[str, Any] = {
            "model": model or self.model,
            "messages": messages,
            "temperature": self.temperature if temperature is None else temperature,
            "max_tokens": max_tokens or self.max_tokens,
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.api_base:
            kwargs["api_base"] = self.api_base
        if response_format:
            kwargs["response_format"] = response_format

        try:
            response = await litellm.acompletion(**kwargs)
        except Exception as e:
            logger.error(f"LLM error ({kwargs['model']}): {e}")
            raise ProviderError(f"LiteLLM call failed: {e}") from e
        return self._to_ai_message(response)

    @staticmethod
    def _to_ai_message(response: Any) -> AIMessage:
        """Convert litellm response to LangChain AIMessage."""
        if not getattr(response, "choices", None):
            raise ProviderError("LiteLLM response has no choices")
        choice = response.choices[0]
        msg = choice.message

        return AIMessage(
            content=msg.content or "",
            response_metadata={
                "finish_reason": choice.finish_reason or "stop",
                "usage": usage_metadata(response),
            },
        )

    @staticmethod
    def _setup_keys(config: Config) -> None:
        """Set env vars for LiteLLM from config."""
        for env, val in [
            ("GEMINI_API_KEY", config.providers.gemini.api_key),
            ("OPENAI_API_KEY", config.providers.openai.api_key),
            ("ANTHROPIC_API_KEY", config.providers.anthropic.api_key),
            ("OPENROUTER_API_KEY", config.providers.openrouter.api_key),
        ]:
            if val:
                os.environ.setdefault(env, val)
