"""
Prompt-to-Image Node - Generates an image from a text prompt.

A successful run spawns a display node holding the generated image,
wired from this node.
"""

from __future__ import annotations

from typing import Any

from ai_image_canvas.core.graph import NodeKind
from ai_image_canvas.core.node_types import (
    MissingInputError,
    NodeCategory,
    NodeType,
)


MISSING_PROMPT_MESSAGE = "Please enter a prompt."
FAILURE_MESSAGE = "Failed to generate image."


def check_prompt_to_image_inputs(inputs: dict[str, Any], parameters: dict[str, Any]) -> None:
    if not parameters.get("prompt"):
        raise MissingInputError(MISSING_PROMPT_MESSAGE)


async def prompt_to_image_executor(
    inputs: dict[str, Any],
    parameters: dict[str, Any],
    context: Any,
) -> dict[str, Any]:
    """Execute text-to-image generation."""
    check_prompt_to_image_inputs(inputs, parameters)
    image_url = await context.generate(parameters["prompt"])
    return {"image": image_url}


PROMPT_TO_IMAGE_NODE = NodeType(
    kind=NodeKind.PROMPT_TO_IMAGE,
    name="Generate Image",
    category=NodeCategory.GENERATION,
    description="Generate an image from a text prompt",
    max_inputs=0,
    executor=prompt_to_image_executor,
    check_inputs=check_prompt_to_image_inputs,
    spawns_result=True,
    failure_message=FAILURE_MESSAGE,
)
