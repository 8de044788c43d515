# Tests for llm/client.py
# Created: 2026-10-12

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from notebookchat.config import Settings
from notebookchat.errors import CompletionFailed, ConfigMissing
from notebookchat.llm.client import ChatTurn, LLMClient, resolve_llm_client


def _settings(**overrides):
    values = {"llm_provider": "auto", "gemini_api_key": None, "anthropic_api_key": None}
    values.update(overrides)
    return Settings(_env_file=None, **values)


HISTORY = [ChatTurn("user", "hi"), ChatTurn("assistant", "hello")]


class TestResolveLLMClient:
    def test_auto_prefers_gemini(self):
        llm = resolve_llm_client(_settings(gemini_api_key="g", anthropic_api_key="a"))
        assert llm.provider == "gemini"
        assert llm.api_key == "g"

    def test_auto_uses_anthropic_when_only_key(self):
        llm = resolve_llm_client(_settings(anthropic_api_key="a"))
        assert llm.provider == "anthropic"
        assert llm.model == "claude-sonnet-4-5"

    def test_auto_without_keys_defaults_to_gemini(self):
        llm = resolve_llm_client(_settings())
        assert llm.provider == "gemini"
        assert llm.api_key is None

    def test_explicit_provider(self):
        llm = resolve_llm_client(_settings(llm_provider="anthropic", gemini_api_key="g"))
        assert llm.provider == "anthropic"

    def test_force_provider(self):
        llm = resolve_llm_client(_settings(anthropic_api_key="a"), force_provider="gemini")
        assert llm.provider == "gemini"

    def test_is_frozen(self):
        llm = resolve_llm_client(_settings())
        with pytest.raises(AttributeError):
            llm.model = "other"


async def test_complete_without_key():
    with pytest.raises(ConfigMissing, match="GEMINI_API_KEY"):
        await LLMClient(provider="gemini", model="m", api_key=None).complete("sys", [], "q")


async def test_complete_gemini():
    chat = MagicMock()
    chat.send_message_async = AsyncMock(return_value=MagicMock(text="answer"))
    model = MagicMock()
    model.start_chat.return_value = chat

    with (
        patch("google.generativeai.configure") as configure,
        patch("google.generativeai.GenerativeModel", return_value=model) as model_cls,
    ):
        llm = LLMClient(provider="gemini", model="gemini-2.5-flash", api_key="g")
        result = await llm.complete("be helpful", HISTORY, "question")

    assert result == "answer"
    configure.assert_called_once_with(api_key="g")
    assert model_cls.call_args.args[0] == "gemini-2.5-flash"
    assert model_cls.call_args.kwargs["system_instruction"] == "be helpful"
    assert model.start_chat.call_args.kwargs["history"] == [
        {"role": "user", "parts": ["hi"]},
        {"role": "model", "parts": ["hello"]},
    ]
    assert chat.send_message_async.call_args.args[0] == "question"


async def test_complete_anthropic():
    client = MagicMock()
    client.messages.create = AsyncMock(
        return_value=MagicMock(content=[MagicMock(type="text", text="answer")])
    )

    with patch("anthropic.AsyncAnthropic", return_value=client):
        llm = LLMClient(provider="anthropic", model="claude-sonnet-4-5", api_key="a")
        result = await llm.complete("be helpful", HISTORY, "question")

    assert result == "answer"
    kwargs = client.messages.create.call_args.kwargs
    assert kwargs["system"] == "be helpful"
    assert kwargs["messages"] == [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
        {"role": "user", "content": "question"},
    ]


async def test_sdk_error_becomes_completion_failed():
    client = MagicMock()
    client.messages.create = AsyncMock(side_effect=RuntimeError("rate limited"))

    with patch("anthropic.AsyncAnthropic", return_value=client):
        llm = LLMClient(provider="anthropic", model="m", api_key="a")
        with pytest.raises(CompletionFailed) as exc_info:
            await llm.complete("sys", [], "q")

    assert "rate limited" not in exc_info.value.message
    assert isinstance(exc_info.value.__cause__, RuntimeError)
