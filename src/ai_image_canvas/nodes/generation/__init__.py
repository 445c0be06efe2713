"""
Generation Nodes package.

Nodes that create new media from a prompt.
"""

from ai_image_canvas.core.node_types import register_node
from ai_image_canvas.nodes.generation.prompt_to_image import (
    PROMPT_TO_IMAGE_NODE,
    prompt_to_image_executor,
)
from ai_image_canvas.nodes.generation.generate_video import (
    GENERATE_VIDEO_NODE,
    generate_video_executor,
)


def register_generation_nodes() -> None:
    """Register all generation nodes."""
    register_node(PROMPT_TO_IMAGE_NODE)
    register_node(GENERATE_VIDEO_NODE)


__all__ = [
    "PROMPT_TO_IMAGE_NODE",
    "GENERATE_VIDEO_NODE",
    "prompt_to_image_executor",
    "generate_video_executor",
    "register_generation_nodes",
]
