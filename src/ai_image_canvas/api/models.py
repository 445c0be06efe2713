"""
Request schema and event helpers for the chat route.

The body mirrors what a UI chat client sends: a conversation id plus the
last user message, whose parts are text or attached images.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from ai_image_canvas.providers.base import ChatMessage


class TextPart(BaseModel):
    model_config = ConfigDict(extra="ignore")
    type: Literal["text"]
    text: str = Field(min_length=1, max_length=2000)


class FilePart(BaseModel):
    model_config = ConfigDict(extra="ignore")
    type: Literal["file"]
    mediaType: Literal["image/jpeg", "image/png"]
    name: str = ""
    url: str = Field(min_length=1)


MessagePart = Annotated[Union[TextPart, FilePart], Field(discriminator="type")]


class UIMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: str
    role: Literal["user"]
    parts: list[MessagePart] = Field(min_length=1)

    def to_chat_message(self) -> ChatMessage:
        """Convert to the OpenAI chat-completions content format."""
        content: list[dict[str, Any]] = []
        for part in self.parts:
            if isinstance(part, TextPart):
                content.append({"type": "text", "text": part.text})
            else:
                content.append({"type": "image_url", "image_url": {"url": part.url}})
        return ChatMessage(role=self.role, content=content)


class ChatRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: str
    message: UIMessage


def sse_data(data: dict) -> str:
    return f"data: {json.dumps(data)}\n\n"


SSE_DONE = "data: [DONE]\n\n"
