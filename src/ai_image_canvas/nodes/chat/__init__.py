"""
Chat Nodes package.
"""

from ai_image_canvas.core.node_types import register_node
from ai_image_canvas.nodes.chat.openai_chat import CHAT_NODE, chat_executor


def register_chat_nodes() -> None:
    """Register all chat nodes."""
    register_node(CHAT_NODE)


__all__ = [
    "CHAT_NODE",
    "chat_executor",
    "register_chat_nodes",
]
