"""Configuration for AI Image Canvas.

Settings are loaded with Pydantic Settings in this order:
1. Environment variables (``CANVAS_*`` prefix, plus the aliases below)
2. A ``.env`` file in the working directory
3. Defaults defined in CanvasSettings

The API keys also accept the unprefixed names the hosted services document:
``API_KEY`` for the Google generative-language key, ``AI_GATEWAY_API_KEY``
or ``OPENAI_API_KEY`` for the chat gateway.

Example .env file:
    CANVAS_API_KEY=...
    AI_GATEWAY_API_KEY=...
    CANVAS_DEBUG=true
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CanvasSettings(BaseSettings):
    """Application settings.

    Attributes
    ----------
    api_key : str
        Google generative-language key used for Imagen, Gemini and Veo
    gateway_api_key : str
        Bearer token for the OpenAI-compatible chat gateway
    chat_base_url : str
        Base URL of the chat gateway
    chat_model : str
        Chat model id routed by the gateway
    debug : bool
        Answer every image call with a placeholder instead of the API
    video_poll_interval : float
        Seconds between polls of a running video operation
    debug_delay : float
        Simulated latency of placeholder generation
    spawn_offset : float
        Horizontal distance between a node and the node it spawns
    host, port : str, int
        Bind address of the API server
    cors_origins : list[str]
        Origins allowed to call the API from a browser
    log_level : str
        Root logging level
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CANVAS_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    api_key: str = Field(
        default="",
        validation_alias=AliasChoices("CANVAS_API_KEY", "API_KEY", "api_key"),
        description="Google generative-language API key",
    )
    gateway_api_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "CANVAS_GATEWAY_API_KEY",
            "AI_GATEWAY_API_KEY",
            "OPENAI_API_KEY",
            "gateway_api_key",
        ),
        description="API key for the chat gateway",
    )
    chat_base_url: str = Field(
        default="https://ai-gateway.vercel.sh/v1",
        description="OpenAI-compatible chat completions base URL",
    )
    chat_model: str = Field(default="openai/gpt-4o")

    debug: bool = Field(
        default=False,
        description="Return placeholder images instead of calling the image API",
    )
    video_poll_interval: float = Field(default=10.0, gt=0)
    debug_delay: float = Field(default=3.0, ge=0)
    spawn_offset: float = Field(default=400.0)

    host: str = Field(default="127.0.0.1", description="Server bind address")
    port: int = Field(default=8000, ge=1, le=65535)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


@lru_cache
def get_settings() -> CanvasSettings:
    """Return the process-wide settings, loaded on first use."""
    return CanvasSettings()
