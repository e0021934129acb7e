"""Concrete conversational agents."""

from __future__ import annotations

from lutobot.agent.agents.chat_support import ChatSupportAgent
from lutobot.agent.agents.cooking_assistant import CookingAssistantAgent
from lutobot.agent.agents.recipe_discovery import RecipeDiscoveryAgent
from lutobot.agent.agents.user_preference import UserPreferenceAgent
from lutobot.agent.base import BaseAgent
from lutobot.core.config.schema import Config
from lutobot.core.providers.base import BaseLLMProvider
from lutobot.store.recipes import RecipeRepository


def make_agents(
    config: Config, recipes: RecipeRepository, llm: BaseLLMProvider
) -> list[BaseAgent]:
    """The default agent set, in registration order.

    The first entry is the router's fallback when no rule resolves to a
    registered agent.
    """
    cuisine = config.assistant.cuisine
    return [
        RecipeDiscoveryAgent(recipes, llm, cuisine=cuisine),
        CookingAssistantAgent(recipes, cuisine=cuisine),
        UserPreferenceAgent(recipes),
        ChatSupportAgent(llm, cuisine=cuisine, history_window=config.assistant.history_window),
    ]


__all__ = [
    "ChatSupportAgent",
    "CookingAssistantAgent",
    "RecipeDiscoveryAgent",
    "UserPreferenceAgent",
    "make_agents",
]
