"""
Generate-Video Node - Animates one upstream image from a text prompt.

Video calls always go to the real provider; the debug flag only covers
image generation. The resulting URL is stored on the node itself.
"""

from __future__ import annotations

import logging
from typing import Any

from ai_image_canvas.core.graph import NodeKind
from ai_image_canvas.core.node_types import (
    MissingInputError,
    NodeCategory,
    NodeType,
)


logger = logging.getLogger(__name__)

MISSING_INPUT_MESSAGE = "Please provide a prompt and connect an image source."
FAILURE_MESSAGE = "Failed to generate video."


def check_generate_video_inputs(inputs: dict[str, Any], parameters: dict[str, Any]) -> None:
    if not parameters.get("prompt") or len(inputs.get("images", [])) != 1:
        raise MissingInputError(MISSING_INPUT_MESSAGE)


async def generate_video_executor(
    inputs: dict[str, Any],
    parameters: dict[str, Any],
    context: Any,
) -> dict[str, Any]:
    """Execute image-to-video generation."""
    check_generate_video_inputs(inputs, parameters)
    if context.debug:
        logger.info("Debug mode does not cover video generation; calling the API")
    video_url = await context.generate_video(parameters["prompt"], inputs["images"][0])
    return {"video_url": video_url}


GENERATE_VIDEO_NODE = NodeType(
    kind=NodeKind.GENERATE_VIDEO,
    name="Generate Video",
    category=NodeCategory.GENERATION,
    description="Turn a connected image into a short video",
    max_inputs=1,
    executor=generate_video_executor,
    check_inputs=check_generate_video_inputs,
    spawns_result=False,
    failure_message=FAILURE_MESSAGE,
)
