"""Shared fixtures: fake LLM backend, stub agents and a seeded in-memory recipe store."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from langchain_core.messages import AIMessage

from lutobot.agent.base import BaseAgent
from lutobot.agent.models import AgentContext, AgentResponse
from lutobot.core.providers.base import BaseLLMProvider, ProviderError
from lutobot.store.documents import InMemoryDocumentStore
from lutobot.store.recipes import RecipeRepository

SEED_FILE = Path(__file__).resolve().parent.parent / "data" / "recipes.json"


class FakeLLM(BaseLLMProvider):
    """Canned-reply provider; records every message list it receives."""

    name = "fake"

    def __init__(self, reply: str = "Fake answer.", error: Exception | None = None) -> None:
        super().__init__(model="fake/model")
        self.reply = reply
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def achat(
        self,
        messages,
        model=None,
        temperature=None,
        max_tokens=None,
        response_format=None,
    ) -> AIMessage:
        self.calls.append({"messages": messages, "response_format": response_format})
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.reply)


@pytest.fixture
def make_llm():
    """Factory for FakeLLM instances with a chosen reply or error."""
    return FakeLLM


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def failing_llm():
    return FakeLLM(error=ProviderError("backend down"))


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
async def recipes(store):
    """Repository seeded with data/recipes.json."""
    repo = RecipeRepository(store)
    await repo.seed_from_file(SEED_FILE)
    return repo


class StubAgent(BaseAgent):
    """Agent double: returns a fixed reply, raises, or runs ``behavior``."""

    def __init__(self, name: str, reply: str | None = None, behavior=None) -> None:
        self.name = name
        self.reply = reply or f"{name} says hi"
        self.behavior = behavior
        self.calls: list[tuple[str, AgentContext | None]] = []

    async def handle(self, utterance, context=None):
        self.calls.append((utterance, context))
        if self.behavior is not None:
            return await self.behavior(utterance, context)
        return AgentResponse(message=self.reply, success=True)


@pytest.fixture
def make_agent():
    """Factory for StubAgent instances."""
    return StubAgent
