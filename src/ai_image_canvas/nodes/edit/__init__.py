"""
Edit Nodes package.

Nodes that transform upstream images.
"""

from ai_image_canvas.core.node_types import register_node
from ai_image_canvas.nodes.edit.edit_image import EDIT_IMAGE_NODE, edit_image_executor
from ai_image_canvas.nodes.edit.combine_image import COMBINE_IMAGE_NODE, combine_image_executor


def register_edit_nodes() -> None:
    """Register all edit nodes."""
    register_node(EDIT_IMAGE_NODE)
    register_node(COMBINE_IMAGE_NODE)


__all__ = [
    "EDIT_IMAGE_NODE",
    "COMBINE_IMAGE_NODE",
    "edit_image_executor",
    "combine_image_executor",
    "register_edit_nodes",
]
