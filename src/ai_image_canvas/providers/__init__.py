"""
Remote collaborators.

This package provides integrations with the AI services the canvas calls:
- Google Gemini: Imagen 4, Gemini 2.5 Flash Image, Veo 3.1
- OpenAI-compatible chat gateway: streamed chat completions
- Debug: placeholder images without API cost

Usage:
    from ai_image_canvas.providers import get_registry, generate

    get_registry().load_config_from_settings(settings)
    url = await generate("a red fox", images=[])
"""

from ai_image_canvas.providers.base import (
    AuthenticationError,
    ChatMessage,
    ChatProvider,
    GenerationError,
    GenerationMode,
    GenerationRequest,
    GenerationResult,
    ImageProvider,
    ModelCard,
    ProviderConfig,
    ProviderError,
    RateLimitError,
)

from ai_image_canvas.providers.registry import (
    BUILTIN_MODEL_CARDS,
    ProviderRegistry,
    get_registry,
    load_config_from_settings,
)

# Import providers to register them
from ai_image_canvas.providers.gemini import GeminiProvider
from ai_image_canvas.providers.debug import DebugImageProvider
from ai_image_canvas.providers.openai import OpenAIChatProvider

from ai_image_canvas.providers.service import (
    chat,
    chat_messages,
    generate,
    generate_video,
)


# Auto-register providers
def _register_providers():
    registry = get_registry()
    registry.register_provider(GeminiProvider)
    registry.register_provider(DebugImageProvider)
    registry.register_provider(OpenAIChatProvider)

_register_providers()


__all__ = [
    # Base classes
    "ImageProvider",
    "ChatProvider",
    "ChatMessage",
    "ModelCard",
    "ProviderConfig",
    "GenerationMode",
    "GenerationRequest",
    "GenerationResult",
    # Exceptions
    "ProviderError",
    "AuthenticationError",
    "RateLimitError",
    "GenerationError",
    # Registry
    "ProviderRegistry",
    "get_registry",
    "load_config_from_settings",
    "BUILTIN_MODEL_CARDS",
    # Providers
    "GeminiProvider",
    "DebugImageProvider",
    "OpenAIChatProvider",
    # Service
    "generate",
    "generate_video",
    "chat",
    "chat_messages",
]
