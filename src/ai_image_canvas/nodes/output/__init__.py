"""
Output Nodes package.

Nodes that display results.
"""

from ai_image_canvas.nodes.output.simple_image import (
    SIMPLE_IMAGE_NODE,
    register_output_nodes,
)

__all__ = [
    "SIMPLE_IMAGE_NODE",
    "register_output_nodes",
]
