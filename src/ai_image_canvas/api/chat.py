import logging
import time
import uuid
from typing import AsyncGenerator

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse

from ai_image_canvas.api.models import ChatRequest, SSE_DONE, sse_data
from ai_image_canvas.providers.base import ChatMessage, ChatProvider
from ai_image_canvas.providers.registry import get_registry
from ai_image_canvas.providers.service import chat_provider

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)

UI_STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
    "x-vercel-ai-ui-message-stream": "v1",
}


def get_chat_provider() -> ChatProvider:
    return chat_provider(get_registry())


async def stream_ui_message(
    provider: ChatProvider,
    messages: list[ChatMessage],
    request_id: str,
) -> AsyncGenerator[str, None]:
    """Relay provider deltas as a UI message stream."""
    start_time = time.time()
    delta_count = 0
    text_id = uuid.uuid4().hex

    yield sse_data({"type": "start", "messageId": f"msg-{uuid.uuid4().hex}"})
    try:
        yield sse_data({"type": "text-start", "id": text_id})
        async for delta in provider.stream_chat(messages):
            delta_count += 1
            yield sse_data({"type": "text-delta", "id": text_id, "delta": delta})
        yield sse_data({"type": "text-end", "id": text_id})
        yield sse_data({"type": "finish"})
        logger.info(
            "[%s] complete | elapsed=%.2fs | deltas=%d",
            request_id, time.time() - start_time, delta_count,
        )
    except Exception as e:
        logger.exception("[%s] chat stream failed", request_id)
        yield sse_data({"type": "error", "errorText": str(e)})
    yield SSE_DONE


@router.post("/chat")
@router.post("/chat/openai")
async def post_chat(req: Request, provider: ChatProvider = Depends(get_chat_provider)):
    try:
        body = ChatRequest.model_validate(await req.json())
    except ValueError:
        # Malformed JSON and schema violations alike
        return JSONResponse({"error": "bad_request"}, status_code=400)

    request_id = str(uuid.uuid4())[:8]
    logger.info("[%s] request | chat_id=%s parts=%d", request_id, body.id, len(body.message.parts))
    return StreamingResponse(
        stream_ui_message(provider, [body.message.to_chat_message()], request_id),
        media_type="text/event-stream",
        headers=UI_STREAM_HEADERS,
    )


@router.get("/chat")
@router.get("/chat/openai")
def get_chat():
    return {"message": "Hello World"}
