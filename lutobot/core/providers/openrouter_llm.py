"""OpenRouter provider — direct SDK, no LiteLLM adapter."""

from __future__ import annotations

from typing import Any

from langchain_core.messages import AIMessage
from loguru import logger
from openrouter import OpenRouter

from lutobot.core.providers.base import BaseLLMProvider, ProviderError, usage_metadata


class OpenRouterLLM(BaseLLMProvider):
    """Direct OpenRouter SDK provider.

    Accepts ``openrouter/<vendor>/<model>`` or bare ``<vendor>/<model>``
    model names; the ``openrouter/`` prefix is stripped before sending.
    """

    name = "openrouter"

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 2048,
    ) -> None:
        super().__init__(model=model, temperature=temperature, max_tokens=max_tokens)
        self._client = OpenRouter(api_key=api_key)

    async def achat(
        self,
        messages: list[dict[str, Any]],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        response_format: dict[str, Any] | None = None,
    ) -> AIMessage:
        """Send chat completion via OpenRouter SDK."""
        sdk_model = (model or self.model).removeprefix("openrouter/")

        kwargs: dict[str, Any] = {
            "model": sdk_model,
            "messages": messages,
            "temperature": self.temperature if temperature is None else temperature,
            "max_tokens": max_tokens or self.max_tokens,
        }
        if response_format:
            kwargs["response_format"] = response_format

        try:
            response = await self._client.chat.send_async(**kwargs)
        except Exception as e:
            logger.error(f"OpenRouter LLM error ({sdk_model}): {e}")
            raise ProviderError(f"OpenRouter call failed: {e}") from e
        return self._to_ai_message(response)

    @staticmethod
    def _to_ai_message(response: Any) -> AIMessage:
        """Convert OpenRouter SDK response to LangChain AIMessage."""
        if not getattr(response, "choices", None):
            raise ProviderError("OpenRouter response has no choices")
        choice = response.choices[0]
        msg = choice.message

        return AIMessage(
            content=msg.content or "",
            response_metadata={
                "finish_reason": getattr(choice, "finish_reason", "stop") or "stop",
                "usage": usage_metadata(response),
            },
        )
