"""Tests for the keyword router."""

import pytest

from lutobot.agent.models import AgentContext
from lutobot.agent.registry import AgentRegistry
from lutobot.agent.router import (
    CHAT_SUPPORT,
    COOKING_ASSISTANT,
    RECIPE_DISCOVERY,
    USER_PREFERENCE,
    NoAgentsRegisteredError,
    match_rule,
    select_agent,
)

COOKING = AgentContext(current_recipe_id="chicken-adobo")


@pytest.fixture
def registry(make_agent):
    reg = AgentRegistry()
    for name in (RECIPE_DISCOVERY, COOKING_ASSISTANT, USER_PREFERENCE, CHAT_SUPPORT):
        reg.register(make_agent(name))
    return reg


def _route(utterance, context, registry):
    return select_agent(utterance, context, registry).identify()


# ── Rule 1: cooking assistant ────────────────────────────


@pytest.mark.parametrize(
    "utterance",
    ["What's the next step?", "How do I fold lumpia?", "What should I do now",
     "Start a TIMER", "NEXT"],
)
def test_cooking_words_with_recipe(utterance, registry):
    assert _route(utterance, COOKING, registry) == COOKING_ASSISTANT


def test_cooking_words_without_recipe_skip_rule(registry):
    assert _route("what's the next step?", AgentContext(), registry) == CHAT_SUPPORT
    assert _route("what's the next step?", None, registry) == CHAT_SUPPORT


def test_recipe_without_cooking_words_skip_rule(registry):
    assert _route("tell me about tamarind", COOKING, registry) == CHAT_SUPPORT


# ── Rule 2: recipe discovery ─────────────────────────────


@pytest.mark.parametrize(
    "utterance",
    ["Recipe for adobo please", "how to make sinigang", "Find me a dessert",
     "search for pancit"],
)
def test_recipe_search_phrases(utterance, registry):
    assert _route(utterance, None, registry) == RECIPE_DISCOVERY


def test_cooking_rule_wins_over_discovery(registry):
    # both rule 1 and rule 2 phrases present; rule 1 is checked first
    assert _route("next, find me a recipe for halo-halo", COOKING, registry) == COOKING_ASSISTANT


def test_discovery_with_recipe_but_no_cooking_words(registry):
    assert _route("how to make leche flan", COOKING, registry) == RECIPE_DISCOVERY


# ── Rule 3: user preference ──────────────────────────────


@pytest.mark.parametrize(
    "utterance",
    ["I prefer less salt", "I like spicy food", "my FAVORITE dish",
     "dietary needs", "I'm allergic to shrimp"],
)
def test_preference_words(utterance, registry):
    assert _route(utterance, None, registry) == USER_PREFERENCE


def test_discovery_wins_over_preference(registry):
    assert _route("search for something I like", None, registry) == RECIPE_DISCOVERY


# ── Rule 4: default ──────────────────────────────────────


def test_default_is_chat_support(registry):
    assert _route("What is calamansi?", None, registry) == CHAT_SUPPORT


def test_match_rule_always_returns_a_rule():
    assert match_rule("").agent_name == CHAT_SUPPORT


# ── Fallback ─────────────────────────────────────────────


def test_unregistered_rule_is_skipped_for_later_rules(make_agent):
    reg = AgentRegistry()
    reg.register(make_agent(RECIPE_DISCOVERY))
    preference = make_agent(USER_PREFERENCE)
    reg.register(preference)

    # rule 1 matches but CookingAssistant is absent; rule 3 still applies
    assert select_agent("next step, I like it", COOKING, reg) is preference


def test_unregistered_rule_falls_through_to_chat_support(make_agent):
    reg = AgentRegistry()
    reg.register(make_agent(USER_PREFERENCE))
    chat = make_agent(CHAT_SUPPORT)
    reg.register(chat)

    assert select_agent("recipe for adobo", None, reg) is chat


def test_first_registered_only_when_no_rule_resolves(make_agent):
    reg = AgentRegistry()
    first = make_agent(RECIPE_DISCOVERY)
    reg.register(first)
    reg.register(make_agent(USER_PREFERENCE))

    # no keyword rule matches and ChatSupport is not registered
    assert select_agent("what is adobo?", None, reg) is first


def test_only_chat_support_registered(make_agent):
    reg = AgentRegistry()
    chat = make_agent(CHAT_SUPPORT)
    reg.register(chat)

    assert select_agent("tell me about garlic", None, reg) is chat
    assert select_agent("I like garlic", None, reg) is chat


def test_match_rule_skips_unregistered_names():
    rule = match_rule("recipe for adobo", registered={USER_PREFERENCE, CHAT_SUPPORT})
    assert rule.agent_name == CHAT_SUPPORT
    assert match_rule("recipe for adobo", registered={USER_PREFERENCE}) is None


def test_empty_registry_raises():
    with pytest.raises(NoAgentsRegisteredError):
        select_agent("hello", None, AgentRegistry())
