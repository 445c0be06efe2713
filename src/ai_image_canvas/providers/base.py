"""
Provider Base - Abstract base classes and model card definitions.

This module provides the foundation for the remote collaborators:
- ModelCard: What a model can do and which provider serves it
- ImageProvider: Abstract base class for image/video providers
- ChatProvider: Abstract base class for streamed text chat
- GenerationRequest/Result: Request/response data structures
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, TYPE_CHECKING

if TYPE_CHECKING:
    from ai_image_canvas.core.data_types import ImagePart


class GenerationMode(Enum):
    """Supported generation modes."""
    TEXT_TO_IMAGE = "text_to_image"
    IMAGE_EDIT = "image_edit"
    IMAGE_COMBINE = "image_combine"
    IMAGE_TO_VIDEO = "image_to_video"
    CHAT = "chat"


@dataclass
class ModelCard:
    """
    What a remote model can do and which provider serves it.

    Attributes:
        id: Model identifier sent to the API (e.g., "imagen-4.0-generate-001")
        provider: Provider ID this model belongs to (e.g., "gemini")
        name: Human-readable display name
        description: Brief description of the model
        modes: Supported generation modes
        aspect_ratios: Aspect ratio options (e.g., ["1:1", "16:9"])
        max_reference_images: Max input images (0 = text-only)
        param_defaults: Default values for provider-specific parameters
    """
    id: str
    provider: str
    name: str
    description: str = ""

    modes: set[GenerationMode] = field(default_factory=lambda: {GenerationMode.TEXT_TO_IMAGE})
    aspect_ratios: list[str] | None = None
    max_reference_images: int = 0
    param_defaults: dict[str, Any] = field(default_factory=dict)

    def supports(self, mode: GenerationMode) -> bool:
        return mode in self.modes


@dataclass
class GenerationRequest:
    """Request for image or video generation."""
    model: ModelCard
    prompt: str
    mode: GenerationMode = GenerationMode.TEXT_TO_IMAGE

    # Input images for edit / combine / video
    images: list[ImagePart] = field(default_factory=list)

    # Provider-specific extra parameters
    extra_params: dict[str, Any] = field(default_factory=dict)

    def param(self, name: str, default: Any = None) -> Any:
        """Look up a parameter, falling back to the model card's default."""
        if name in self.extra_params:
            return self.extra_params[name]
        return self.model.param_defaults.get(name, default)


@dataclass
class GenerationResult:
    """Result from a generation call."""
    url: str  # data-URL for images, remote URL for videos and placeholders
    model_id: str
    prompt: str

    generation_time: float = 0.0  # Seconds
    text: str | None = None  # Text returned alongside an image


@dataclass
class ProviderConfig:
    """Credentials and overrides handed to a provider when it is built."""
    api_key: str = ""
    base_url: str | None = None  # Replaces the provider's endpoint
    default_model: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


class ProviderError(Exception):
    """A remote collaborator refused or failed a request."""


class AuthenticationError(ProviderError):
    """No API key, or the service rejected the one we sent."""


class RateLimitError(ProviderError):
    """HTTP 429 from the service."""
    retry_after: float | None = None


class GenerationError(ProviderError):
    """The service answered, but without a usable image, video or reply."""


class ImageProvider(ABC):
    """
    A service that turns prompts and input images into images or videos.

    Subclasses speak one vendor's HTTP API. Which model answers which
    generation mode is decided by the registry's model cards, so a
    provider only has to honour ``request.model.id``.
    """

    id: str = ""
    name: str = ""
    base_url: str = ""

    def __init__(self, config: ProviderConfig):
        self.config = config
        if config.base_url:
            self.base_url = config.base_url

    @property
    def api_key(self) -> str:
        return self.config.api_key

    @property
    def is_configured(self) -> bool:
        return bool(self.config.api_key)

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """
        Produce one image.

        Args:
            request: `request.images` is empty for text-to-image, holds one
                image for an edit and several for a combine

        Returns:
            GenerationResult whose `url` is the image

        Raises:
            AuthenticationError: Missing or rejected key
            RateLimitError: Too many requests
            GenerationError: No image in the response
        """
        ...

    async def generate_video(self, request: GenerationRequest) -> GenerationResult:
        """Animate ``request.images[0]``. Returns a downloadable URL."""
        raise GenerationError(f"{self.name} does not support video generation")

    @abstractmethod
    async def validate_credentials(self) -> bool:
        """Cheap authenticated call; True when the key is accepted."""
        ...


@dataclass
class ChatMessage:
    """One message in OpenAI chat-completions shape."""
    role: str
    content: str | list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content}


class ChatProvider(ABC):
    """Abstract base class for streamed text chat providers."""

    id: str = ""
    name: str = ""
    base_url: str = ""

    def __init__(self, config: ProviderConfig):
        self.config = config
        if config.base_url:
            self.base_url = config.base_url

    @property
    def api_key(self) -> str:
        return self.config.api_key

    @property
    def is_configured(self) -> bool:
        return bool(self.config.api_key)

    @abstractmethod
    def stream_chat(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
    ) -> AsyncIterator[str]:
        """Yield text deltas of the assistant's reply as they arrive."""
        ...
