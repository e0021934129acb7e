"""LLM providers — factory that picks one of the interchangeable backends."""

from __future__ import annotations

import os

from loguru import logger

from lutobot.core.config.schema import Config
from lutobot.core.providers.base import BaseLLMProvider, ProviderError
from lutobot.core.providers.json_repair import extract_json


def create_provider(config: Config) -> BaseLLMProvider:
    """Build the completion backend named by ``config.llm.provider``.

    OpenRouter needs an API key (config or ``OPENROUTER_API_KEY``); without
    one the LiteLLM backend is used instead.
    """
    from lutobot.core.providers.litellm_llm import LiteLLMLLM

    if config.llm.provider == "openrouter":
        api_key = config.get_api_key("openrouter") or os.environ.get(
            "OPENROUTER_API_KEY", ""
        )
        if api_key:
            from lutobot.core.providers.openrouter_llm import OpenRouterLLM

            logger.info(f"LLM provider: openrouter ({config.llm.model})")
            return OpenRouterLLM(
                api_key=api_key,
                model=config.llm.model,
                temperature=config.llm.temperature,
                max_tokens=config.llm.max_tokens,
            )
        logger.warning("OpenRouter selected but no API key set, falling back to LiteLLM")

    logger.info(f"LLM provider: litellm ({config.llm.model})")
    return LiteLLMLLM(config)


__all__ = ["BaseLLMProvider", "ProviderError", "create_provider", "extract_json"]
