"""
Debug Provider - Placeholder images for local testing without API cost.

Instead of calling a remote service, waits a fixed delay and returns a
randomly sized placeholder image URL from picsum.photos.
"""

from __future__ import annotations

import asyncio
import random
import string
import time

from ai_image_canvas.providers.base import (
    ImageProvider,
    GenerationRequest,
    GenerationResult,
    ProviderConfig,
)


# Width x Height
PLACEHOLDER_RESOLUTIONS: list[tuple[int, int]] = [
    (300, 300),    # 1:1 Square
    (800, 450),    # 16:9 Landscape
    (400, 600),    # 2:3 Portrait
    (1200, 800),   # 3:2 Landscape (High-res)
    (700, 700),    # 1:1 Square
    (900, 300),    # 3:1 Wide Banner
]

PLACEHOLDER_URL = "https://picsum.photos/{width}/{height}/?random={token}"

DEFAULT_DELAY = 3.0


def random_placeholder_url(rng: random.Random | None = None) -> str:
    """Pick one of the fixed resolutions and add a cache-busting token."""
    rng = rng or random.Random()
    width, height = rng.choice(PLACEHOLDER_RESOLUTIONS)
    token = "".join(rng.choices(string.ascii_lowercase + string.digits, k=6))
    return PLACEHOLDER_URL.format(width=width, height=height, token=token)


class DebugImageProvider(ImageProvider):
    """Stands in for every image provider when debug mode is on."""

    id = "debug"
    name = "Debug Placeholder"
    base_url = "https://picsum.photos"

    def __init__(self, config: ProviderConfig | None = None):
        super().__init__(config or ProviderConfig())
        self.delay = float(self.config.extra.get("delay", DEFAULT_DELAY))

    @property
    def is_configured(self) -> bool:
        return True

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        started = time.monotonic()
        await asyncio.sleep(self.delay)
        return GenerationResult(
            url=random_placeholder_url(),
            model_id=request.model.id,
            prompt=request.prompt,
            generation_time=time.monotonic() - started,
        )

    async def validate_credentials(self) -> bool:
        return True
