"""
Combine-Image Node - Merges every upstream image under one instruction.

Accepts any number of inbound connections; images are sent in the order
their edges were created.
"""

from __future__ import annotations

from typing import Any

from ai_image_canvas.core.graph import NodeKind
from ai_image_canvas.core.node_types import (
    MissingInputError,
    NodeCategory,
    NodeType,
)


MISSING_INPUT_MESSAGE = "Please provide a prompt and connect at least one image source."
FAILURE_MESSAGE = "Failed to combine images."


def check_combine_image_inputs(inputs: dict[str, Any], parameters: dict[str, Any]) -> None:
    if not parameters.get("prompt") or not inputs.get("images"):
        raise MissingInputError(MISSING_INPUT_MESSAGE)


async def combine_image_executor(
    inputs: dict[str, Any],
    parameters: dict[str, Any],
    context: Any,
) -> dict[str, Any]:
    """Execute an image combine."""
    check_combine_image_inputs(inputs, parameters)
    image_url = await context.generate(parameters["prompt"], inputs["images"])
    return {"image": image_url}


COMBINE_IMAGE_NODE = NodeType(
    kind=NodeKind.COMBINE_IMAGE,
    name="Combine Images",
    category=NodeCategory.EDIT,
    description="Combine all connected images into one",
    max_inputs=None,
    executor=combine_image_executor,
    check_inputs=check_combine_image_inputs,
    spawns_result=True,
    failure_message=FAILURE_MESSAGE,
)
