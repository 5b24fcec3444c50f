"""
Completion pipeline.
Sets up an upstream conversation, opens its event stream and pumps classified
events to the consumer from a background task.
"""
import asyncio
from contextlib import suppress
from typing import AsyncIterator, Awaitable, Callable, Optional

import httpx

from models.chat_models import ChatCompletionEvent, ChatCompletionRequest, SseFrame
from services.event_classifier import EventClassifier
from services.prompt_service import PromptService
from services.upstream_client import UpstreamClient
from utils.cancellation import CancellationToken
from utils.exceptions import SetupStage, StreamFrameError, UpstreamError
from utils.logger import app_logger
from utils.sse_parser import aiter_sse_frames

_END_OF_STREAM = object()


class CompletionStream:
    """
    Consumer handle for one completion.

    Iterate it to receive events. Closing it (explicitly, or by leaving an
    `async with` block) fires the cancellation token so the producer stops
    reading upstream and releases the connection.
    """

    def __init__(self, queue: asyncio.Queue, task: asyncio.Task, cancel: CancellationToken):
        self._queue = queue
        self._task = task
        self._cancel = cancel
        self._exhausted = False

    def __aiter__(self) -> "CompletionStream":
        return self

    async def __anext__(self) -> ChatCompletionEvent:
        if self._exhausted:
            raise StopAsyncIteration

        item = await self._queue.get()
        if item is _END_OF_STREAM:
            self._exhausted = True
            raise StopAsyncIteration
        return item

    async def __aenter__(self) -> "CompletionStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the stream. Cancels the producer if it is still running."""
        self._exhausted = True
        # Fire before awaiting anything so the producer stops even if we are
        # being cancelled ourselves.
        self._cancel.cancel()
        await asyncio.wait({self._task})

    @property
    def producer_done(self) -> bool:
        return self._task.done()


class CompletionService:
    """Service for running completions against the upstream."""

    def __init__(self, upstream: UpstreamClient | None = None):
        self._upstream = upstream or UpstreamClient()

    async def create_completion(
        self,
        request: ChatCompletionRequest,
        cancel: CancellationToken
    ) -> CompletionStream:
        """
        Start a completion.

        Setup (prompt, conversation, stream open) runs here and raises on
        failure, before any event is produced. Streaming then continues in a
        background task feeding the returned CompletionStream.

        Raises:
            EmptyConversationError: request has no messages
            UpstreamError: conversation or stream could not be set up; `stage`
                tells which
        """
        prompt = PromptService.compose(request.messages)

        app_logger.info("Creating conversation")
        try:
            conversation_id = await self._upstream.create_conversation()
        except UpstreamError as e:
            app_logger.error(f"Conversation create failed: {e.message}")
            raise e.at_stage(SetupStage.CREATE_CONVERSATION)
        app_logger.info(f"Conversation id: {conversation_id}")

        body = self._upstream.build_chat_body(prompt, request.chat_model)
        try:
            response = await self._upstream.open_chat_stream(conversation_id, body)
        except UpstreamError as e:
            app_logger.error(f"Chat stream open failed: {e.message}")
            raise e.at_stage(SetupStage.OPEN_STREAM)

        frames = aiter_sse_frames(response.aiter_lines())
        return self.start_stream(frames, cancel, on_close=response.aclose)

    @staticmethod
    def start_stream(
        frames: AsyncIterator[SseFrame],
        cancel: CancellationToken,
        on_close: Optional[Callable[[], Awaitable[None]]] = None
    ) -> CompletionStream:
        """Spawn the streaming task over an already-open frame source."""
        queue: asyncio.Queue = asyncio.Queue()
        task = asyncio.create_task(
            CompletionService._pump_frames(frames, queue, cancel, on_close)
        )
        return CompletionStream(queue, task, cancel)

    @staticmethod
    async def _pump_frames(
        frames: AsyncIterator[SseFrame],
        queue: asyncio.Queue,
        cancel: CancellationToken,
        on_close: Optional[Callable[[], Awaitable[None]]]
    ) -> None:
        """
        Streaming loop. Each iteration races the next frame against the
        cancellation token. Ends with exactly one FinishEvent unless cancelled.
        """
        classifier = EventClassifier()
        cancelled = asyncio.ensure_future(cancel.wait())
        next_frame: Optional[asyncio.Future] = None
        frame_count = 0

        try:
            while not cancel.cancelled:
                next_frame = asyncio.ensure_future(frames.__anext__())
                done, _ = await asyncio.wait(
                    {next_frame, cancelled},
                    return_when=asyncio.FIRST_COMPLETED
                )

                if next_frame not in done:
                    break

                try:
                    frame = next_frame.result()
                except StopAsyncIteration:
                    app_logger.info(f"Stream ended after {frame_count} frames")
                    queue.put_nowait(classifier.finish())
                    return
                except (httpx.HTTPError, StreamFrameError) as e:
                    app_logger.warning(f"Error on stream: {e}")
                    queue.put_nowait(classifier.transport_error(e))
                    continue
                except Exception as e:
                    app_logger.error(f"Unexpected stream failure: {e}")
                    queue.put_nowait(classifier.transport_error(e))
                    queue.put_nowait(classifier.finish())
                    return
                finally:
                    next_frame = None

                frame_count += 1
                event = classifier.classify(frame)
                if event is not None:
                    queue.put_nowait(event)

            app_logger.info(f"Stream cancelled after {frame_count} frames")

        finally:
            try:
                cancelled.cancel()
                if next_frame is not None:
                    next_frame.cancel()
                    with suppress(asyncio.CancelledError, StopAsyncIteration, httpx.HTTPError):
                        await next_frame

                aclose = getattr(frames, "aclose", None)
                if aclose is not None:
                    await aclose()
                if on_close is not None:
                    await on_close()
            finally:
                queue.put_nowait(_END_OF_STREAM)
