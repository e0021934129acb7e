"""Base LLM provider — strategy pattern interface."""

from __future__ import annotations

import abc
from typing import Any

from langchain_core.messages import AIMessage


class ProviderError(RuntimeError):
    """Raised when a completion backend fails or returns nothing usable."""


class BaseLLMProvider(abc.ABC):
    """Abstract base for LLM providers.

    Subclasses implement ``achat``; agents normally go through
    ``acomplete``, which wraps a single prompt (plus optional system
    instruction) and returns plain text.
    """

    name: str = "base"

    def __init__(
        self,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 2048,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    @abc.abstractmethod
    async def achat(
        self,
        messages: list[dict[str, Any]],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        response_format: dict[str, Any] | None = None,
    ) -> AIMessage:
        """Send a chat completion request and return an AIMessage."""
        ...

    async def acomplete(
        self,
        prompt: str,
        system: str | None = None,
        json_mode: bool = False,
    ) -> str:
        """Single-prompt completion returning the reply text.

        Raises
        ------
        ProviderError
            If the backend fails or the reply is empty.
        """
        messages: list[dict[str, Any]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response_format = {"type": "json_object"} if json_mode else None
        reply = await self.achat(messages, response_format=response_format)
        text = reply.content if isinstance(reply.content, str) else str(reply.content)
        if not text.strip():
            raise ProviderError(f"{self.name} returned an empty completion")
        return text


def usage_metadata(response: Any) -> dict[str, int]:
    """Token usage block shared by both providers' AIMessage conversion."""
    usage = getattr(response, "usage", None)
    return {
        "prompt_tokens": getattr(usage, "prompt_tokens", 0) or 0,
        "completion_tokens": getattr(usage, "completion_tokens", 0) or 0,
        "total_tokens": getattr(usage, "total_tokens", 0) or 0,
    }
