"""
Nodes package - All node implementations.

This package contains node implementations organized by category:
- generation: Prompt-to-image, Generate video
- edit: Edit image, Combine images
- output: Simple image display
- chat: Streamed chat
"""

from __future__ import annotations

from ai_image_canvas.core.node_types import NodeRegistry, NodeType
from ai_image_canvas.nodes.chat import CHAT_NODE, register_chat_nodes
from ai_image_canvas.nodes.edit import COMBINE_IMAGE_NODE, EDIT_IMAGE_NODE, register_edit_nodes
from ai_image_canvas.nodes.generation import (
    GENERATE_VIDEO_NODE,
    PROMPT_TO_IMAGE_NODE,
    register_generation_nodes,
)
from ai_image_canvas.nodes.output import SIMPLE_IMAGE_NODE, register_output_nodes


BUILTIN_NODES: tuple[NodeType, ...] = (
    PROMPT_TO_IMAGE_NODE,
    GENERATE_VIDEO_NODE,
    EDIT_IMAGE_NODE,
    COMBINE_IMAGE_NODE,
    SIMPLE_IMAGE_NODE,
    CHAT_NODE,
)


def register_all_nodes() -> None:
    """Register all built-in nodes."""
    register_generation_nodes()
    register_edit_nodes()
    register_output_nodes()
    register_chat_nodes()


def register_missing_nodes(registry: NodeRegistry | None = None) -> None:
    """Register each built-in node whose kind has no type yet; custom types stay."""
    registry = registry if registry is not None else NodeRegistry.instance()
    for node_type in BUILTIN_NODES:
        if node_type.kind not in registry:
            registry.register(node_type)


__all__ = [
    "BUILTIN_NODES",
    "register_all_nodes",
    "register_missing_nodes",
]
