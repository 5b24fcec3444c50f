"""
Streaming service mapping completion events onto the OpenAI wire format.
Handles chunk construction, SSE formatting and non-streaming aggregation.
"""
import json
import time
import uuid
from typing import AsyncIterator
from fastapi.responses import StreamingResponse
from starlette.types import Receive, Scope, Send
from models.api_models import (
    ChatCompletionChunk,
    ChatCompletionResponse,
    ChatMessage,
    ChunkChoice,
    CompletionChoice,
    Delta,
)
from models.chat_models import (
    ChatCompletionEvent,
    ChatModel,
    ErrorEvent,
    FinishEvent,
    MessageEvent,
    MessageKind,
)
from services.completion_service import CompletionStream
from utils.logger import app_logger


class CompletionStreamingResponse(StreamingResponse):
    """
    SSE response that owns its completion stream.

    The stream is released once the response has been handled, whether the
    body was sent in full, the client disconnected, or sending failed before
    the body iterator was ever started.
    """

    def __init__(self, stream: CompletionStream, model: ChatModel):
        super().__init__(
            StreamService.stream_chunks(stream, model),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no"
            }
        )
        self.completion_stream = stream

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await self.completion_stream.aclose()


class StreamService:
    """Service for delivering completion events to OpenAI-compatible clients."""

    DONE_SENTINEL = "[DONE]"

    @staticmethod
    def send_sse_data(data: dict | str) -> str:
        """Format data as a Server-Sent Events (SSE) `data:` frame."""
        if not isinstance(data, str):
            data = json.dumps(data, separators=(',', ':'), ensure_ascii=False)
        return f"data: {data}\n\n"

    @staticmethod
    def new_completion_id() -> str:
        return f"chatcmpl-{uuid.uuid4()}"

    @staticmethod
    def build_chunk(
        event: ChatCompletionEvent,
        completion_id: str,
        created: int,
        model: ChatModel
    ) -> ChatCompletionChunk:
        """
        Map one event to a chunk.

        Message events fill `content` or `reasoning_content`; error and finish
        events carry an empty delta with the error text or stop reason in
        `finish_reason`.
        """
        delta = Delta()
        finish_reason = None

        if isinstance(event, MessageEvent):
            if event.kind == MessageKind.THINK:
                delta = Delta(reasoning_content=event.text)
            else:
                delta = Delta(content=event.text)
        elif isinstance(event, ErrorEvent):
            finish_reason = event.cause
        elif isinstance(event, FinishEvent):
            finish_reason = event.reason

        return ChatCompletionChunk(
            id=completion_id,
            created=created,
            model=model.public_id,
            choices=[ChunkChoice(delta=delta, finish_reason=finish_reason)]
        )

    @staticmethod
    async def stream_chunks(stream: CompletionStream, model: ChatModel) -> AsyncIterator[str]:
        """
        Relay a completion as SSE chunks, ending with `data: [DONE]`.

        The stream is closed when this generator finishes or is closed early
        (client disconnect), which cancels the upstream read.
        """
        completion_id = StreamService.new_completion_id()
        created = int(time.time())
        chunk_count = 0

        async with stream:
            async for event in stream:
                chunk = StreamService.build_chunk(event, completion_id, created, model)
                yield StreamService.send_sse_data(chunk.model_dump(exclude_none=False))
                chunk_count += 1

                if isinstance(event, FinishEvent):
                    app_logger.info(
                        f"Completion {completion_id} finished ({event.reason}) after {chunk_count} chunks"
                    )
                    yield StreamService.send_sse_data(StreamService.DONE_SENTINEL)

    @staticmethod
    async def collect_completion(stream: CompletionStream, model: ChatModel) -> ChatCompletionResponse:
        """Drain a completion into a single `chat.completion` object."""
        content_parts: list[str] = []
        reasoning_parts: list[str] = []
        finish_reason = None

        async with stream:
            async for event in stream:
                if isinstance(event, MessageEvent):
                    if event.kind == MessageKind.THINK:
                        reasoning_parts.append(event.text)
                    else:
                        content_parts.append(event.text)
                elif isinstance(event, ErrorEvent):
                    app_logger.warning(f"Dropping in-band error from non-streaming completion: {event.cause}")
                elif isinstance(event, FinishEvent):
                    finish_reason = event.reason

        message = ChatMessage(
            role="assistant",
            content="".join(content_parts),
            reasoning_content="".join(reasoning_parts) or None
        )
        app_logger.info(
            f"Non-streaming completion done: {len(message.content)} answer chars, "
            f"{len(reasoning_parts)} reasoning fragments"
        )

        return ChatCompletionResponse(
            id=StreamService.new_completion_id(),
            created=int(time.time()),
            model=model.public_id,
            choices=[CompletionChoice(message=message, finish_reason=finish_reason)]
        )
