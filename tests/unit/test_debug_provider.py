"""
Tests for placeholder generation in debug mode.
"""

import asyncio
import random
import re

import pytest

from ai_image_canvas.providers import get_registry, generate
from ai_image_canvas.providers.base import GenerationRequest, ProviderConfig
from ai_image_canvas.providers.debug import (
    PLACEHOLDER_RESOLUTIONS,
    DebugImageProvider,
    random_placeholder_url,
)
from ai_image_canvas.providers.registry import BUILTIN_MODEL_CARDS, TEXT_TO_IMAGE_MODEL

PLACEHOLDER = re.compile(r"^https://picsum\.photos/(\d+)/(\d+)/\?random=\w+$")


@pytest.fixture
def registry():
    registry = get_registry()
    registry.set_config("debug", ProviderConfig(extra={"delay": 0}))
    yield registry
    registry.reset()


def test_placeholder_url_pattern():
    rng = random.Random(1)
    for _ in range(50):
        match = PLACEHOLDER.match(random_placeholder_url(rng))
        assert match
        assert (int(match.group(1)), int(match.group(2))) in PLACEHOLDER_RESOLUTIONS


def test_provider_returns_placeholder():
    provider = DebugImageProvider(ProviderConfig(extra={"delay": 0}))
    request = GenerationRequest(model=BUILTIN_MODEL_CARDS[TEXT_TO_IMAGE_MODEL], prompt="fox")

    result = asyncio.run(provider.generate(request))

    assert PLACEHOLDER.match(result.url)
    assert result.prompt == "fox"
    assert provider.is_configured


def test_default_delay():
    assert DebugImageProvider().delay == 3.0


def test_debug_generate_skips_image_resolution(registry):
    # Remote sources are never fetched in debug mode
    url = asyncio.run(generate("edit", ["https://unreachable.invalid/a.png"], debug=True))
    assert PLACEHOLDER.match(url)
