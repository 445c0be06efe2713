"""
Chat Node - Streams an assistant reply to a prompt.

The reply is accumulated as it arrives; ``on_delta`` receives the text so
far after every chunk so the canvas can show partial output.
"""

from __future__ import annotations

from typing import Any, Callable

from ai_image_canvas.core.graph import NodeKind
from ai_image_canvas.core.node_types import (
    MissingInputError,
    NodeCategory,
    NodeType,
)


def check_chat_inputs(inputs: dict[str, Any], parameters: dict[str, Any]) -> None:
    # Empty prompts are ignored without telling the user
    if not parameters.get("prompt"):
        raise MissingInputError("")


async def chat_executor(
    inputs: dict[str, Any],
    parameters: dict[str, Any],
    context: Any,
    on_delta: Callable[[str], None] | None = None,
) -> dict[str, Any]:
    """Send the prompt through the chat transport and collect the reply."""
    check_chat_inputs(inputs, parameters)
    output_text = ""
    async for delta in context.chat_transport.stream(parameters["prompt"]):
        output_text += delta
        if on_delta is not None:
            on_delta(output_text)
    return {"output_text": output_text}


CHAT_NODE = NodeType(
    kind=NodeKind.CHAT,
    name="Chat",
    category=NodeCategory.CHAT,
    description="Ask the chat model and show its streamed reply",
    max_inputs=0,
    executor=chat_executor,
    check_inputs=check_chat_inputs,
    spawns_result=False,
)
