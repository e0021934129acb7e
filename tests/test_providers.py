"""Tests for the LLM provider backends and factory."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from lutobot.core.config import Config
from lutobot.core.providers import ProviderError, create_provider
from lutobot.core.providers.litellm_llm import LiteLLMLLM
from lutobot.core.providers.openrouter_llm import OpenRouterLLM


def _make_response(content="hello", finish_reason="stop"):
    """Build an SDK-style chat completion response."""
    msg = SimpleNamespace(content=content)
    choice = SimpleNamespace(finish_reason=finish_reason, message=msg)
    usage = SimpleNamespace(prompt_tokens=10, completion_tokens=5, total_tokens=15)
    return SimpleNamespace(choices=[choice], usage=usage)


# ── Factory ───────────────────────────────────────────────


def test_create_provider_default_is_litellm():
    provider = create_provider(Config(llm={"model": "openai/gpt-4o-mini"}))
    assert isinstance(provider, LiteLLMLLM)
    assert provider.model == "openai/gpt-4o-mini"


def test_create_provider_openrouter_with_key():
    cfg = Config(
        llm={"provider": "openrouter", "model": "openrouter/google/gemini-2.5-flash"},
        providers={"openrouter": {"api_key": "sk-or-test"}},
    )
    assert isinstance(create_provider(cfg), OpenRouterLLM)


def test_create_provider_openrouter_without_key_falls_back(monkeypatch):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    cfg = Config(llm={"provider": "openrouter"})
    assert isinstance(create_provider(cfg), LiteLLMLLM)


# ── Response conversion ───────────────────────────────────


def test_openrouter_to_ai_message_basic():
    msg = OpenRouterLLM._to_ai_message(_make_response(content="Kain tayo!"))
    assert msg.content == "Kain tayo!"
    assert msg.response_metadata["usage"]["total_tokens"] == 15
    assert msg.response_metadata["finish_reason"] == "stop"


def test_openrouter_to_ai_message_empty_content():
    msg = OpenRouterLLM._to_ai_message(_make_response(content=None))
    assert msg.content == ""


def test_to_ai_message_without_choices_raises():
    with pytest.raises(ProviderError):
        LiteLLMLLM._to_ai_message(SimpleNamespace(choices=[], usage=None))
    with pytest.raises(ProviderError):
        OpenRouterLLM._to_ai_message(SimpleNamespace(choices=None))


# ── achat ─────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_openrouter_achat_strips_prefix_and_passes_format():
    provider = OpenRouterLLM(api_key="test", model="openrouter/google/gemini-2.5-flash")
    with patch.object(
        provider._client.chat, "send_async", new_callable=AsyncMock,
        return_value=_make_response(content='{"a": 1}'),
    ) as mock_send:
        result = await provider.achat(
            messages=[{"role": "user", "content": "test"}],
            response_format={"type": "json_object"},
        )
        kwargs = mock_send.call_args.kwargs
        assert kwargs["model"] == "google/gemini-2.5-flash"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert result.content == '{"a": 1}'


@pytest.mark.asyncio
async def test_openrouter_achat_error_raises_provider_error():
    provider = OpenRouterLLM(api_key="test", model="openrouter/test")
    with patch.object(
        provider._client.chat, "send_async", new_callable=AsyncMock,
        side_effect=Exception("connection failed"),
    ):
        with pytest.raises(ProviderError, match="connection failed"):
            await provider.achat(messages=[{"role": "user", "content": "test"}])


@pytest.mark.asyncio
async def test_litellm_achat():
    provider = LiteLLMLLM(Config(llm={"model": "openai/gpt-4o-mini", "temperature": 0.2}))
    with patch(
        "lutobot.core.providers.litellm_llm.litellm.acompletion",
        new_callable=AsyncMock,
    ) as mock_llm:
        choice = MagicMock()
        choice.message.content = "from litellm"
        choice.finish_reason = "stop"
        mock_llm.return_value = MagicMock(choices=[choice], usage=None)

        result = await provider.achat(messages=[{"role": "user", "content": "hi"}])

        assert result.content == "from litellm"
        kwargs = mock_llm.call_args.kwargs
        assert kwargs["model"] == "openai/gpt-4o-mini"
        assert kwargs["temperature"] == 0.2
        assert "response_format" not in kwargs


@pytest.mark.asyncio
async def test_litellm_achat_error_raises_provider_error():
    provider = LiteLLMLLM(Config())
    with patch(
        "lutobot.core.providers.litellm_llm.litellm.acompletion",
        new_callable=AsyncMock,
        side_effect=RuntimeError("quota exceeded"),
    ):
        with pytest.raises(ProviderError):
            await provider.achat(messages=[{"role": "user", "content": "hi"}])


# ── acomplete ─────────────────────────────────────────────


@pytest.mark.asyncio
async def test_acomplete_builds_messages_and_json_mode(make_llm):
    llm = make_llm(reply='{"ok": true}')
    text = await llm.acomplete("recipe please", system="be terse", json_mode=True)

    assert text == '{"ok": true}'
    call = llm.calls[0]
    assert call["messages"] == [
        {"role": "system", "content": "be terse"},
        {"role": "user", "content": "recipe please"},
    ]
    assert call["response_format"] == {"type": "json_object"}


@pytest.mark.asyncio
async def test_acomplete_empty_reply_raises(make_llm):
    with pytest.raises(ProviderError):
        await make_llm(reply="   ").acomplete("anything")
