"""
OpenAI-compatible Chat Provider - Streamed chat completions.

Talks to any endpoint that implements the OpenAI chat-completions API with
``stream: true``. The default points at the AI gateway, which routes
``provider/model`` ids such as ``openai/gpt-4o``.

API Reference: https://platform.openai.com/docs/api-reference/chat/streaming
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator

import aiohttp

from ai_image_canvas.providers.base import (
    ChatMessage,
    ChatProvider,
    ProviderConfig,
    GenerationError,
    AuthenticationError,
    RateLimitError,
)


logger = logging.getLogger(__name__)

DEFAULT_CHAT_MODEL = "openai/gpt-4o"


def parse_sse_line(line: str) -> dict[str, Any] | None:
    """
    Parse one server-sent-events line of a chat-completions stream.

    Returns the decoded JSON payload, or None for comments, blank lines,
    other fields and the terminating ``[DONE]`` marker.
    """
    line = line.strip()
    if not line.startswith("data:"):
        return None
    payload = line[len("data:"):].strip()
    if not payload or payload == "[DONE]":
        return None
    return json.loads(payload)


def delta_text(chunk: dict[str, Any]) -> str:
    """Extract the text delta from a chat-completions chunk."""
    choices = chunk.get("choices") or []
    if not choices:
        return ""
    content = choices[0].get("delta", {}).get("content")
    return content if isinstance(content, str) else ""


class OpenAIChatProvider(ChatProvider):
    """Streams assistant replies from an OpenAI-compatible gateway."""

    id = "openai"
    name = "OpenAI (AI Gateway)"
    base_url = "https://ai-gateway.vercel.sh/v1"

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        self.default_model = config.default_model or DEFAULT_CHAT_MODEL

    def get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
        }

    async def stream_chat(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
    ) -> AsyncIterator[str]:
        """Yield text deltas of the assistant's reply."""
        if not self.is_configured:
            raise AuthenticationError("Chat gateway API key is not configured")

        url = f"{self.base_url}/chat/completions"
        body = {
            "model": model or self.default_model,
            "messages": [m.to_dict() for m in messages],
            "stream": True,
        }

        async with aiohttp.ClientSession() as session:
            async with session.post(url, json=body, headers=self.get_headers()) as resp:
                if resp.status >= 400:
                    data = await resp.json(content_type=None)
                    self._check_error(resp.status, data)

                async for raw_line in resp.content:
                    chunk = parse_sse_line(raw_line.decode("utf-8"))
                    if chunk is None:
                        continue
                    if "error" in chunk:
                        raise GenerationError(
                            f"Chat stream error: {chunk['error'].get('message', 'Unknown error')}"
                        )
                    text = delta_text(chunk)
                    if text:
                        yield text

    def _check_error(self, status: int, data: dict) -> None:
        """Check for API errors."""
        if status == 401 or status == 403:
            raise AuthenticationError("Invalid chat gateway API key")
        elif status == 429:
            error = RateLimitError("Chat gateway rate limit exceeded")
            error.retry_after = 60
            raise error
        elif status >= 400:
            error = (data or {}).get("error", {})
            error_msg = error.get("message", "Unknown error") if isinstance(error, dict) else str(error)
            raise GenerationError(f"Chat gateway error: {error_msg}")
