"""
HTTP interface - The chat route and the transports chat nodes use.
"""

from ai_image_canvas.api.main import create_app
from ai_image_canvas.api.transport import DirectChatTransport, HttpChatTransport

__all__ = [
    "create_app",
    "DirectChatTransport",
    "HttpChatTransport",
]
