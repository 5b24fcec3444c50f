"""
Incremental Server-Sent-Events parser.
Turns the line stream of an httpx response into SseFrame objects.
"""
from typing import AsyncIterable, AsyncIterator, List, Optional
from models.chat_models import SseFrame

DEFAULT_EVENT = "message"


class SseDecoder:
    """
    Line-oriented SSE decoder following the WHATWG event-stream rules:
    - `event:` sets the frame name (defaults to "message")
    - repeated `data:` lines are joined with a newline
    - lines starting with ':' are comments
    - a blank line dispatches the frame; frames with no data are dropped
    """

    def __init__(self) -> None:
        self._event: Optional[str] = None
        self._data: List[str] = []
        self._last_id: Optional[str] = None

    def decode(self, line: str) -> Optional[SseFrame]:
        """Feed one line (without its terminator). Returns a frame on dispatch."""
        if not line:
            return self._dispatch()

        if line.startswith(":"):
            return None

        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if field == "event":
            self._event = value
        elif field == "data":
            self._data.append(value)
        elif field == "id":
            if "\0" not in value:
                self._last_id = value
        # "retry" and unknown fields are ignored

        return None

    def flush(self) -> Optional[SseFrame]:
        """Dispatch whatever is buffered when the stream ends without a blank line."""
        return self._dispatch()

    def _dispatch(self) -> Optional[SseFrame]:
        if not self._data:
            self._event = None
            return None

        frame = SseFrame(
            event=self._event or DEFAULT_EVENT,
            data="\n".join(self._data),
            id=self._last_id,
        )
        self._event = None
        self._data = []
        return frame


async def aiter_sse_frames(lines: AsyncIterable[str]) -> AsyncIterator[SseFrame]:
    """Parse an async line stream (e.g. `httpx.Response.aiter_lines()`) into frames."""
    decoder = SseDecoder()
    async for line in lines:
        frame = decoder.decode(line)
        if frame is not None:
            yield frame
    frame = decoder.flush()
    if frame is not None:
        yield frame
