"""
Tests for the generate/chat service boundary.
"""

import asyncio
import logging

import pytest

from ai_image_canvas.core.config import CanvasSettings
from ai_image_canvas.providers import get_registry, load_config_from_settings
from ai_image_canvas.providers.base import (
    ChatProvider,
    GenerationError,
    GenerationMode,
    GenerationResult,
    ImageProvider,
    ModelCard,
    ProviderConfig,
)
from ai_image_canvas.providers.service import chat, generate, generate_video, mode_for_images


class FakeImageProvider(ImageProvider):
    id = "gemini"
    name = "Fake Gemini"

    def __init__(self, config):
        super().__init__(config)
        self.requests = []

    async def generate(self, request):
        self.requests.append(request)
        return GenerationResult(url="data:image/png;base64,T1VU", model_id=request.model.id, prompt=request.prompt)

    async def generate_video(self, request):
        self.requests.append(request)
        return GenerationResult(url="https://v.example/1", model_id=request.model.id, prompt=request.prompt)

    async def validate_credentials(self):
        return True


class FakeChatProvider(ChatProvider):
    id = "openai"
    name = "Fake chat"

    def __init__(self, config):
        super().__init__(config)
        self.messages = []

    async def stream_chat(self, messages, model=None):
        self.messages.append(messages)
        for chunk in ("a", "b"):
            yield chunk


@pytest.fixture
def registry():
    registry = get_registry()
    yield registry
    registry.reset()


@pytest.fixture
def image_provider(registry):
    provider = FakeImageProvider(ProviderConfig(api_key="k"))
    registry.set_provider_instance(provider)
    return provider


@pytest.mark.parametrize(
    "count, mode",
    [(0, GenerationMode.TEXT_TO_IMAGE), (1, GenerationMode.IMAGE_EDIT), (3, GenerationMode.IMAGE_COMBINE)],
)
def test_mode_for_images(count, mode):
    assert mode_for_images(count) is mode


def test_text_to_image(image_provider):
    url = asyncio.run(generate("a fox"))

    [request] = image_provider.requests
    assert url == "data:image/png;base64,T1VU"
    assert request.mode is GenerationMode.TEXT_TO_IMAGE
    assert request.model.id == "imagen-4.0-generate-001"
    assert request.images == []


def test_combine_splits_data_urls(image_provider):
    asyncio.run(generate("merge", ["data:image/png;base64,QQ==", "data:image/jpeg;base64,Qg=="]))

    [request] = image_provider.requests
    assert request.mode is GenerationMode.IMAGE_COMBINE
    assert request.model.id == "gemini-2.5-flash-image"
    assert [(p.mime_type, p.data) for p in request.images] == [
        ("image/png", "QQ=="),
        ("image/jpeg", "Qg=="),
    ]


def test_generate_video(image_provider):
    url = asyncio.run(generate_video("pan", "data:image/png;base64,QQ=="))

    [request] = image_provider.requests
    assert url == "https://v.example/1"
    assert request.mode is GenerationMode.IMAGE_TO_VIDEO
    assert request.model.id == "veo-3.1-fast-generate-preview"


def test_chat_streams_from_chat_provider(registry):
    provider = FakeChatProvider(ProviderConfig(api_key="k"))
    registry.set_provider_instance(provider)

    async def consume():
        return [d async for d in chat("hello")]

    assert asyncio.run(consume()) == ["a", "b"]
    [[message]] = provider.messages
    assert message.to_dict() == {"role": "user", "content": "hello"}


def test_load_config_from_settings(registry, caplog):
    settings = CanvasSettings(
        _env_file=None,
        api_key="google-key",
        gateway_api_key="",
        video_poll_interval=2.5,
        debug_delay=0,
    )

    with caplog.at_level(logging.WARNING):
        load_config_from_settings(settings)

    assert registry.get_config("gemini").api_key == "google-key"
    assert registry.get_config("gemini").extra["poll_interval"] == 2.5
    assert registry.get_provider("debug").delay == 0
    assert registry.get_provider("openai").default_model == "openai/gpt-4o"
    assert "chat gateway API key" in caplog.text


def test_too_many_images_rejected_before_call(image_provider):
    images = ["data:image/png;base64,QQ=="] * 17
    with pytest.raises(GenerationError, match="at most 16"):
        asyncio.run(generate("merge", images))
    assert image_provider.requests == []


def test_registered_model_takes_over_mode(registry, image_provider):
    registry.register_model(ModelCard(
        id="imagen-4.0-ultra-generate-001",
        provider="gemini",
        name="Imagen 4 Ultra",
        modes={GenerationMode.TEXT_TO_IMAGE},
    ))

    asyncio.run(generate("a fox"))

    assert image_provider.requests[0].model.id == "imagen-4.0-ultra-generate-001"
    registry.reset()
    assert registry.model_for_mode(GenerationMode.TEXT_TO_IMAGE).id == "imagen-4.0-generate-001"


def test_registered_providers(registry):
    assert registry.list_providers() == ["debug", "gemini", "openai"]
