import asyncio
import json

import httpx

from models.chat_models import SseFrame
from utils.http_client import HTTPClientManager


class ScriptedUpstream:
    """Fake upstream served through httpx.MockTransport.

    Answers the conversation-create endpoint with a configurable status/body
    and the chat endpoint with a scripted SSE body. Every request is recorded.
    """

    def __init__(self, conversation_id="abc123"):
        self.conversation_status = 200
        self.conversation_body = {"id": conversation_id}
        self.conversation_error = None
        self.chat_status = 200
        self.chat_error = None
        self.frames = []
        self.requests = []

    def with_conversation(self, status=200, body=None, error=None):
        """Configure the conversation-create response (body may be raw text)."""
        self.conversation_status = status
        if body is not None:
            self.conversation_body = body
        self.conversation_error = error
        return self

    def with_chat_status(self, status, error=None):
        self.chat_status = status
        self.chat_error = error
        return self

    def add_frame(self, data, event="message"):
        """Append one SSE frame; dict data is JSON-encoded."""
        if not isinstance(data, str):
            data = json.dumps(data, ensure_ascii=False)
        self.frames.append(f"event: {event}\ndata: {data}\n\n")
        return self

    def think(self, content):
        return self.add_frame({"type": "think", "content": content})

    def text(self, msg):
        return self.add_frame({"type": "text", "msg": msg})

    def status(self, stop_reason):
        return self.add_frame({"stopReason": stop_reason})

    def sse_body(self) -> bytes:
        return "".join(self.frames).encode("utf-8")

    @property
    def create_requests(self):
        return [r for r in self.requests if r.url.path.endswith("/conversation/create")]

    @property
    def chat_requests(self):
        return [r for r in self.requests if r.url.path.startswith("/api/chat/")]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.path.endswith("/conversation/create"):
            if self.conversation_error is not None:
                raise self.conversation_error
            body = self.conversation_body
            if isinstance(body, (dict, list)):
                return httpx.Response(self.conversation_status, json=body)
            return httpx.Response(self.conversation_status, text=body)

        if request.url.path.startswith("/api/chat/"):
            if self.chat_error is not None:
                raise self.chat_error
            return httpx.Response(
                self.chat_status,
                content=self.sse_body(),
                headers={"Content-Type": "text/event-stream"}
            )

        return httpx.Response(404)

    def build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.MockTransport(self.handler),
            headers=HTTPClientManager.build_upstream_headers()
        )


class ScriptedFrameSource:
    """Async iterator over scripted frames for driving the streaming loop directly.

    Exception instances in the script are raised in place of a frame. With
    hang=True the source blocks forever once the script is used up, like an
    upstream that has gone quiet.
    """

    def __init__(self, items, hang=False):
        self._items = list(items)
        self._hang = hang
        self.consumed = 0
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self._items:
            item = self._items.pop(0)
            self.consumed += 1
            if isinstance(item, Exception):
                raise item
            return item
        if self._hang:
            await asyncio.Event().wait()
        raise StopAsyncIteration

    async def aclose(self):
        self.closed = True


def frame(data, event="message") -> SseFrame:
    """Build an SseFrame; dict data is JSON-encoded."""
    if not isinstance(data, str):
        data = json.dumps(data)
    return SseFrame(event=event, data=data)
