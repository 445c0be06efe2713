"""
Edit-Image Node - Applies a text instruction to one upstream image.

Accepts exactly one inbound connection. A successful run spawns a display
node holding the edited image.
"""

from __future__ import annotations

from typing import Any

from ai_image_canvas.core.graph import NodeKind
from ai_image_canvas.core.node_types import (
    MissingInputError,
    NodeCategory,
    NodeType,
)


MISSING_INPUT_MESSAGE = "Please provide a prompt and connect an image source."
FAILURE_MESSAGE = "Failed to edit image."


def check_edit_image_inputs(inputs: dict[str, Any], parameters: dict[str, Any]) -> None:
    if not parameters.get("prompt") or len(inputs.get("images", [])) != 1:
        raise MissingInputError(MISSING_INPUT_MESSAGE)


async def edit_image_executor(
    inputs: dict[str, Any],
    parameters: dict[str, Any],
    context: Any,
) -> dict[str, Any]:
    """Execute an image edit."""
    check_edit_image_inputs(inputs, parameters)
    image_url = await context.generate(parameters["prompt"], inputs["images"])
    return {"image": image_url}


EDIT_IMAGE_NODE = NodeType(
    kind=NodeKind.EDIT_IMAGE,
    name="Edit Image",
    category=NodeCategory.EDIT,
    description="Edit a connected image with a text instruction",
    max_inputs=1,
    executor=edit_image_executor,
    check_inputs=check_edit_image_inputs,
    spawns_result=True,
    failure_message=FAILURE_MESSAGE,
)
