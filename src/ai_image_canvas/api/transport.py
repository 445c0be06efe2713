"""
Chat Transports - How chat nodes reach the chat model.

- HttpChatTransport posts to ``/api/chat`` and reads the UI message stream,
  the way a browser front end does.
- DirectChatTransport calls the chat provider in-process.
"""

from __future__ import annotations

import logging
import uuid
from typing import AsyncIterator

import aiohttp

from ai_image_canvas.providers.base import GenerationError, ProviderError
from ai_image_canvas.providers.openai import parse_sse_line
from ai_image_canvas.providers.registry import ProviderRegistry, get_registry
from ai_image_canvas.providers.service import chat


logger = logging.getLogger(__name__)


def user_message(prompt: str) -> dict:
    """Build a UI message holding one text part."""
    return {
        "id": str(uuid.uuid4()),
        "role": "user",
        "parts": [{"type": "text", "text": prompt}],
    }


class HttpChatTransport:
    """Streams replies from a running canvas API server."""

    def __init__(self, base_url: str = "http://127.0.0.1:8000", chat_id: str | None = None):
        self.base_url = base_url.rstrip("/")
        self.chat_id = chat_id or str(uuid.uuid4())

    async def stream(self, prompt: str) -> AsyncIterator[str]:
        url = f"{self.base_url}/api/chat"
        body = {"id": self.chat_id, "message": user_message(prompt)}

        async with aiohttp.ClientSession() as session:
            async with session.post(url, json=body) as resp:
                if resp.status >= 400:
                    data = await resp.json(content_type=None)
                    raise ProviderError(
                        f"Chat request rejected: HTTP {resp.status} {(data or {}).get('error', '')}"
                    )

                async for raw_line in resp.content:
                    event = parse_sse_line(raw_line.decode("utf-8"))
                    if event is None:
                        continue
                    if event.get("type") == "text-delta":
                        yield event.get("delta", "")
                    elif event.get("type") == "error":
                        raise GenerationError(event.get("errorText", "Chat stream failed"))


class DirectChatTransport:
    """Streams replies straight from the registered chat provider."""

    def __init__(self, registry: ProviderRegistry | None = None):
        self.registry = registry or get_registry()

    def stream(self, prompt: str) -> AsyncIterator[str]:
        return chat(prompt, self.registry)
