"""
Generation Service - The single entry points nodes use to reach providers.

``generate(prompt, images)`` picks the mode from the number of input images:
none is text-to-image, one is an edit, several is a combine. With
``debug=True`` every image call is answered by the placeholder provider.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Sequence

from ai_image_canvas.core.data_types import ImagePart, resolve_image_part
from ai_image_canvas.providers.base import (
    ChatMessage,
    ChatProvider,
    GenerationError,
    GenerationMode,
    GenerationRequest,
    ImageProvider,
)
from ai_image_canvas.providers.registry import ProviderRegistry, get_registry


logger = logging.getLogger(__name__)

DEBUG_PROVIDER_ID = "debug"


def mode_for_images(count: int) -> GenerationMode:
    """Map the number of input images to a generation mode."""
    if count == 0:
        return GenerationMode.TEXT_TO_IMAGE
    if count == 1:
        return GenerationMode.IMAGE_EDIT
    return GenerationMode.IMAGE_COMBINE


def image_provider(registry: ProviderRegistry, provider_id: str) -> ImageProvider:
    provider = registry.get_provider(provider_id)
    if not isinstance(provider, ImageProvider):
        raise GenerationError(f"Image provider not available: {provider_id}")
    return provider


def chat_provider(registry: ProviderRegistry) -> ChatProvider:
    card = registry.model_for_mode(GenerationMode.CHAT)
    provider = registry.get_provider(card.provider)
    if not isinstance(provider, ChatProvider):
        raise GenerationError(f"Chat provider not available: {card.provider}")
    return provider


async def _resolve_all(images: Sequence[str]) -> list[ImagePart]:
    return list(await asyncio.gather(*(resolve_image_part(src) for src in images)))


async def generate(
    prompt: str,
    images: Sequence[str] = (),
    debug: bool = False,
    registry: ProviderRegistry | None = None,
) -> str:
    """
    Generate one image and return it as a URL.

    Args:
        prompt: Text instruction
        images: Input image sources (data-URLs or remote URLs), in order
        debug: Return a placeholder image instead of calling the API
        registry: Provider registry (defaults to the global one)

    Returns:
        A data-URL from the real providers, or a remote placeholder URL
        in debug mode
    """
    registry = registry or get_registry()
    mode = mode_for_images(len(images))
    card = registry.model_for_mode(mode)
    if len(images) > card.max_reference_images:
        raise GenerationError(
            f"{card.name} accepts at most {card.max_reference_images} input images, got {len(images)}"
        )

    if debug:
        provider = image_provider(registry, DEBUG_PROVIDER_ID)
        parts: list[ImagePart] = []
    else:
        provider = image_provider(registry, card.provider)
        parts = await _resolve_all(images)

    logger.info("Generating image: mode=%s model=%s debug=%s", mode.value, card.id, debug)
    result = await provider.generate(GenerationRequest(
        model=card,
        prompt=prompt,
        mode=mode,
        images=parts,
    ))
    logger.debug("Image generated in %.1fs", result.generation_time)
    return result.url


async def generate_video(
    prompt: str,
    image: str,
    registry: ProviderRegistry | None = None,
) -> str:
    """Animate one image from a prompt. Returns the downloadable video URL."""
    registry = registry or get_registry()
    card = registry.model_for_mode(GenerationMode.IMAGE_TO_VIDEO)
    provider = image_provider(registry, card.provider)
    part = await resolve_image_part(image)

    logger.info("Generating video: model=%s", card.id)
    result = await provider.generate_video(GenerationRequest(
        model=card,
        prompt=prompt,
        mode=GenerationMode.IMAGE_TO_VIDEO,
        images=[part],
    ))
    return result.url


def chat_messages(
    messages: Sequence[ChatMessage],
    registry: ProviderRegistry | None = None,
) -> AsyncIterator[str]:
    """Stream the assistant reply to a full message history."""
    registry = registry or get_registry()
    provider = chat_provider(registry)
    return provider.stream_chat(list(messages))


def chat(prompt: str, registry: ProviderRegistry | None = None) -> AsyncIterator[str]:
    """Stream the assistant reply to a single user prompt."""
    return chat_messages([ChatMessage(role="user", content=prompt)], registry)
