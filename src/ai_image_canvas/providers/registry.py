"""
Provider Registry - Which service answers which request.

Holds the provider classes the package registers at import time, the
config each one is built with, and the model cards that map a generation
mode (text-to-image, edit, combine, video, chat) to a concrete model.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Union

from ai_image_canvas.providers.base import (
    ChatProvider,
    ModelCard,
    GenerationMode,
    ImageProvider,
    ProviderConfig,
)

if TYPE_CHECKING:
    from ai_image_canvas.core.config import CanvasSettings


logger = logging.getLogger(__name__)

AnyProvider = Union[ImageProvider, ChatProvider]


# ============================================================================
# Models the canvas calls by default
# ============================================================================

TEXT_TO_IMAGE_MODEL = "imagen-4.0-generate-001"
IMAGE_EDIT_MODEL = "gemini-2.5-flash-image"
IMAGE_TO_VIDEO_MODEL = "veo-3.1-fast-generate-preview"
CHAT_MODEL = "openai/gpt-4o"

BUILTIN_MODEL_CARDS: dict[str, ModelCard] = {
    # -------------------------------------------------------------------------
    # Google Imagen / Gemini / Veo
    # Source: https://ai.google.dev/gemini-api/docs
    # -------------------------------------------------------------------------
    TEXT_TO_IMAGE_MODEL: ModelCard(
        id=TEXT_TO_IMAGE_MODEL,
        provider="gemini",
        name="Imagen 4",
        description="Google's text-to-image model",
        modes={GenerationMode.TEXT_TO_IMAGE},
        aspect_ratios=["1:1"],
        param_defaults={"outputMimeType": "image/png", "aspectRatio": "1:1"},
    ),

    IMAGE_EDIT_MODEL: ModelCard(
        id=IMAGE_EDIT_MODEL,
        provider="gemini",
        name="Gemini 2.5 Flash Image",
        description="Edits one image or combines several from a text instruction",
        modes={GenerationMode.IMAGE_EDIT, GenerationMode.IMAGE_COMBINE},
        max_reference_images=16,
    ),

    IMAGE_TO_VIDEO_MODEL: ModelCard(
        id=IMAGE_TO_VIDEO_MODEL,
        provider="gemini",
        name="Veo 3.1 Fast",
        description="Animates a still image from a text prompt",
        modes={GenerationMode.IMAGE_TO_VIDEO},
        aspect_ratios=["1:1"],
        max_reference_images=1,
        param_defaults={"resolution": "720p", "aspectRatio": "1:1"},
    ),

    # -------------------------------------------------------------------------
    # Chat (OpenAI-compatible gateway)
    # -------------------------------------------------------------------------
    CHAT_MODEL: ModelCard(
        id=CHAT_MODEL,
        provider="openai",
        name="GPT-4o",
        description="Streamed assistant replies via the AI gateway",
        modes={GenerationMode.CHAT},
    ),
}


class ProviderRegistry:
    """
    Process-wide lookup of provider classes, their configs and model cards.

    Providers are built lazily on first lookup and cached until their
    config changes. Each generation mode is answered by the most recently
    registered model card that supports it.
    """

    _instance: ProviderRegistry | None = None

    def __new__(cls) -> ProviderRegistry:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._init()
        return cls._instance

    @classmethod
    def instance(cls) -> ProviderRegistry:
        return cls()

    def _init(self) -> None:
        self._providers: dict[str, type[AnyProvider]] = {}
        self._provider_instances: dict[str, AnyProvider] = {}
        self._model_cards: dict[str, ModelCard] = dict(BUILTIN_MODEL_CARDS)
        self._configs: dict[str, ProviderConfig] = {}

    # -------------------------------------------------------------------------
    # Providers
    # -------------------------------------------------------------------------

    def register_provider(self, provider_class: type[AnyProvider]) -> None:
        self._providers[provider_class.id] = provider_class

    def get_provider(self, provider_id: str) -> AnyProvider | None:
        """Return the provider for `provider_id`, building it on first use."""
        cached = self._provider_instances.get(provider_id)
        if cached is not None:
            return cached

        provider_class = self._providers.get(provider_id)
        if provider_class is None:
            return None

        provider = provider_class(self.get_config(provider_id))
        self._provider_instances[provider_id] = provider
        return provider

    def set_provider_instance(self, provider: AnyProvider) -> None:
        """Install a ready-made provider instance, e.g. a test double."""
        self._provider_instances[provider.id] = provider

    def list_providers(self) -> list[str]:
        return sorted(self._providers)

    # -------------------------------------------------------------------------
    # Models
    # -------------------------------------------------------------------------

    def register_model(self, card: ModelCard) -> None:
        """Add or replace a card. It takes precedence for the modes it supports."""
        self._model_cards.pop(card.id, None)
        self._model_cards[card.id] = card

    def get_model(self, model_id: str) -> ModelCard | None:
        return self._model_cards.get(model_id)

    def model_for_mode(self, mode: GenerationMode) -> ModelCard:
        """Return the newest model card supporting `mode`."""
        for card in reversed(list(self._model_cards.values())):
            if card.supports(mode):
                return card
        raise KeyError(f"No model registered for {mode.value}")

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def set_config(self, provider_id: str, config: ProviderConfig) -> None:
        """Replace a provider's config; the next lookup rebuilds it."""
        self._configs[provider_id] = config
        self._provider_instances.pop(provider_id, None)

    def get_config(self, provider_id: str) -> ProviderConfig:
        return self._configs.get(provider_id, ProviderConfig())

    def reset(self) -> None:
        """Drop configs, instances and custom model cards."""
        self._provider_instances.clear()
        self._configs.clear()
        self._model_cards = dict(BUILTIN_MODEL_CARDS)

    def load_config_from_settings(self, settings: CanvasSettings) -> None:
        """Configure every built-in provider from application settings."""
        if not settings.api_key:
            logger.warning("No Google API key configured; image and video calls will fail")
        if not settings.gateway_api_key:
            logger.warning("No chat gateway API key configured; chat calls will fail")

        self.set_config("gemini", ProviderConfig(
            api_key=settings.api_key,
            extra={"poll_interval": settings.video_poll_interval},
        ))
        self.set_config("debug", ProviderConfig(
            extra={"delay": settings.debug_delay},
        ))
        self.set_config("openai", ProviderConfig(
            api_key=settings.gateway_api_key,
            base_url=settings.chat_base_url,
            default_model=settings.chat_model,
        ))


def get_registry() -> ProviderRegistry:
    return ProviderRegistry.instance()


def load_config_from_settings(settings: CanvasSettings) -> ProviderRegistry:
    """Configure the global registry and return it."""
    registry = get_registry()
    registry.load_config_from_settings(settings)
    return registry
