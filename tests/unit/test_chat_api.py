"""
Tests for the /api/chat route and the chat transports.
"""

import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from ai_image_canvas.api.chat import get_chat_provider
from ai_image_canvas.api.main import create_app
from ai_image_canvas.api.transport import DirectChatTransport, user_message
from ai_image_canvas.core.config import CanvasSettings
from ai_image_canvas.providers import get_registry
from ai_image_canvas.providers.base import ChatProvider, GenerationError, ProviderConfig


class ScriptedChatProvider(ChatProvider):
    id = "openai"
    name = "Scripted"

    def __init__(self, deltas=("Hel", "lo"), error=None):
        super().__init__(ProviderConfig(api_key="k"))
        self.deltas = deltas
        self.error = error
        self.received = []

    async def stream_chat(self, messages, model=None):
        self.received.append(messages)
        for delta in self.deltas:
            yield delta
        if self.error is not None:
            raise self.error


def parse_sse(lines) -> list:
    events = []
    for line in lines:
        if isinstance(line, bytes):
            line = line.decode("utf-8")
        if not line.startswith("data:"):
            continue
        data_str = line.split(":", 1)[1].strip()
        events.append(data_str if data_str == "[DONE]" else json.loads(data_str))
    return events


def chat_body(*parts, role="user"):
    return {"id": "chat-1", "message": {"id": "m-1", "role": role, "parts": list(parts)}}


@pytest.fixture
def provider():
    return ScriptedChatProvider()


@pytest.fixture
def client(provider):
    app = create_app(CanvasSettings(_env_file=None, api_key="g", gateway_api_key="o"))
    app.dependency_overrides[get_chat_provider] = lambda: provider
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
        get_registry().reset()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_get_chat_stub(client):
    response = client.get("/api/chat")
    assert response.status_code == 200
    assert response.json() == {"message": "Hello World"}


def test_stream_event_order(client, provider):
    body = chat_body({"type": "text", "text": "hi"})
    with client.stream("POST", "/api/chat", json=body) as response:
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["x-vercel-ai-ui-message-stream"] == "v1"
        events = parse_sse(response.iter_lines())

    types = [e if e == "[DONE]" else e["type"] for e in events]
    assert types == ["start", "text-start", "text-delta", "text-delta", "text-end", "finish", "[DONE]"]
    assert "".join(e["delta"] for e in events[2:4]) == "Hello"
    assert events[1]["id"] == events[2]["id"] == events[4]["id"]


def test_parts_become_openai_content(client, provider):
    body = chat_body(
        {"type": "text", "text": "what is this?"},
        {"type": "file", "mediaType": "image/png", "name": "a.png", "url": "data:image/png;base64,QQ=="},
    )
    with client.stream("POST", "/api/chat", json=body) as response:
        parse_sse(response.iter_lines())

    [[message]] = provider.received
    assert message.role == "user"
    assert message.content == [
        {"type": "text", "text": "what is this?"},
        {"type": "image_url", "image_url": {"url": "data:image/png;base64,QQ=="}},
    ]


def test_openai_alias_route(client):
    with client.stream("POST", "/api/chat/openai", json=chat_body({"type": "text", "text": "x"})) as response:
        assert response.status_code == 200
        assert parse_sse(response.iter_lines())[-1] == "[DONE]"


def test_provider_error_becomes_error_event(client, provider):
    provider.error = GenerationError("upstream down")
    with client.stream("POST", "/api/chat", json=chat_body({"type": "text", "text": "hi"})) as response:
        events = parse_sse(response.iter_lines())

    assert events[-2] == {"type": "error", "errorText": "upstream down"}
    assert events[-1] == "[DONE]"
    assert all(e == "[DONE]" or e["type"] != "finish" for e in events)


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"id": "chat-1"},
        chat_body(),
        chat_body({"type": "text", "text": "hi"}, role="assistant"),
        chat_body({"type": "text", "text": ""}),
        chat_body({"type": "text", "text": "x" * 2001}),
        chat_body({"type": "file", "mediaType": "image/gif", "url": "data:image/gif;base64,QQ=="}),
        chat_body({"type": "audio", "text": "hi"}),
    ],
)
def test_invalid_body_is_bad_request(client, provider, payload):
    response = client.post("/api/chat", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": "bad_request"}
    assert provider.received == []


def test_malformed_json_is_bad_request(client):
    response = client.post(
        "/api/chat", content=b"{not json", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "bad_request"}


def test_user_message_shape():
    message = user_message("hello")
    assert message["role"] == "user"
    assert message["parts"] == [{"type": "text", "text": "hello"}]


def test_direct_transport_streams_from_registry():
    registry = get_registry()
    provider = ScriptedChatProvider(deltas=("a", "b", "c"))
    registry.set_provider_instance(provider)
    try:
        async def consume():
            return [d async for d in DirectChatTransport(registry).stream("hello")]

        assert asyncio.run(consume()) == ["a", "b", "c"]
    finally:
        registry.reset()
