"""
Tests for chat-completions stream parsing.
"""

import asyncio

import pytest

from ai_image_canvas.providers.base import (
    AuthenticationError,
    ChatMessage,
    GenerationError,
    ProviderConfig,
    RateLimitError,
)
from ai_image_canvas.providers.openai import (
    DEFAULT_CHAT_MODEL,
    OpenAIChatProvider,
    delta_text,
    parse_sse_line,
)


def test_parse_sse_line():
    assert parse_sse_line('data: {"a": 1}\n') == {"a": 1}
    assert parse_sse_line("data: [DONE]") is None
    assert parse_sse_line(": keep-alive") is None
    assert parse_sse_line("") is None


def test_delta_text():
    assert delta_text({"choices": [{"delta": {"content": "hi"}}]}) == "hi"
    assert delta_text({"choices": [{"delta": {"role": "assistant"}}]}) == ""
    assert delta_text({"choices": []}) == ""


def test_defaults():
    provider = OpenAIChatProvider(ProviderConfig(api_key="k"))
    assert provider.default_model == DEFAULT_CHAT_MODEL == "openai/gpt-4o"
    assert provider.base_url == "https://ai-gateway.vercel.sh/v1"
    assert provider.get_headers()["Authorization"] == "Bearer k"


def test_base_url_override():
    provider = OpenAIChatProvider(ProviderConfig(api_key="k", base_url="http://localhost:9999/v1"))
    assert provider.base_url == "http://localhost:9999/v1"


def test_missing_key():
    provider = OpenAIChatProvider(ProviderConfig())

    async def consume():
        return [d async for d in provider.stream_chat([ChatMessage("user", "hi")])]

    with pytest.raises(AuthenticationError):
        asyncio.run(consume())


@pytest.mark.parametrize(
    "status, error",
    [(401, AuthenticationError), (429, RateLimitError), (502, GenerationError)],
)
def test_check_error(status, error):
    provider = OpenAIChatProvider(ProviderConfig(api_key="k"))
    with pytest.raises(error):
        provider._check_error(status, {"error": {"message": "nope"}})
