"""
Simple-Image Node - Displays one image.

Display nodes come from two places: a user upload, which has no upstream
and accepts no connection, or a successful generation, which keeps exactly
one inbound edge and disappears when that edge is removed.
"""

from __future__ import annotations

from ai_image_canvas.core.graph import NodeKind
from ai_image_canvas.core.node_types import NodeCategory, NodeType, register_node


SIMPLE_IMAGE_NODE = NodeType(
    kind=NodeKind.SIMPLE_IMAGE,
    name="Image",
    category=NodeCategory.OUTPUT,
    description="Display an uploaded or generated image",
    max_inputs=1,
)


def register_output_nodes() -> None:
    """Register all output nodes."""
    register_node(SIMPLE_IMAGE_NODE)
