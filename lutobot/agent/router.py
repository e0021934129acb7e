"""Keyword router — picks the agent for an utterance.

Rules are checked in order; the first rule that matches and whose agent
is registered wins:

    1. recipe in context + cooking words   -> CookingAssistant
    2. recipe search phrasing              -> RecipeDiscovery
    3. preference words                    -> UserPreference
    4. anything else                       -> ChatSupport

A rule whose agent is not registered is skipped. When no rule resolves,
the first registered agent answers. Matching is plain case-insensitive
substring search.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Container

from loguru import logger

from lutobot.agent.base import BaseAgent
from lutobot.agent.models import AgentContext
from lutobot.agent.registry import AgentRegistry

COOKING_ASSISTANT = "CookingAssistant"
RECIPE_DISCOVERY = "RecipeDiscovery"
USER_PREFERENCE = "UserPreference"
CHAT_SUPPORT = "ChatSupport"


class NoAgentsRegisteredError(RuntimeError):
    """Routing was attempted with an empty registry."""


@dataclass(frozen=True)
class RoutingRule:
    """One ordered routing rule."""

    agent_name: str
    keywords: tuple[str, ...] = ()
    requires_recipe: bool = False

    def matches(self, text: str, context: AgentContext) -> bool:
        if self.requires_recipe and not context.current_recipe_id:
            return False
        if not self.keywords:
            return True
        return any(k in text for k in self.keywords)


ROUTING_RULES: tuple[RoutingRule, ...] = (
    RoutingRule(
        COOKING_ASSISTANT,
        ("step", "how do i", "what should i", "timer", "next"),
        requires_recipe=True,
    ),
    RoutingRule(RECIPE_DISCOVERY, ("recipe for", "how to make", "find me a", "search for")),
    RoutingRule(USER_PREFERENCE, ("prefer", "like", "favorite", "dietary", "allergic")),
    RoutingRule(CHAT_SUPPORT),
)


def match_rule(
    utterance: str,
    context: AgentContext | None = None,
    rules: tuple[RoutingRule, ...] = ROUTING_RULES,
    registered: Container[str] | None = None,
) -> RoutingRule | None:
    """Return the first rule matching ``utterance``.

    With ``registered``, rules naming other agents are skipped and None
    means no rule resolved. Without it the last rule always matches.
    """
    context = context or AgentContext()
    text = utterance.lower()
    for rule in rules:
        if registered is not None and rule.agent_name not in registered:
            continue
        if rule.matches(text, context):
            return rule
    return None


def select_agent(
    utterance: str,
    context: AgentContext | None,
    registry: AgentRegistry,
    rules: tuple[RoutingRule, ...] = ROUTING_RULES,
) -> BaseAgent:
    """Pick the agent for ``utterance``.

    Raises
    ------
    NoAgentsRegisteredError
        If the registry is empty.
    """
    agents = registry.list()
    if not agents:
        raise NoAgentsRegisteredError("No agents registered; register agents at startup")

    rule = match_rule(utterance, context, rules, registered=registry)
    agent = registry.get(rule.agent_name) if rule is not None else None
    if agent is None:
        agent = agents[0]
        logger.debug(f"No routing rule resolved, falling back to {agent.identify()}")
    return agent


Router = Callable[[str, AgentContext | None, AgentRegistry], BaseAgent]
