"""
Classification of upstream stream frames into completion events.
"""
import json
from typing import Optional
from models.chat_models import (
    ChatCompletionEvent,
    ErrorEvent,
    FinishEvent,
    MessageEvent,
    MessageKind,
    SseFrame,
)
from utils.exceptions import StreamFrameError
from utils.logger import app_logger


class EventClassifier:
    """
    Per-stream frame classifier.

    Holds the finish reason reported so far so the closing FinishEvent can
    carry it. One instance per completion, used only by its streaming task.
    """

    MESSAGE_EVENT = "message"
    DEFAULT_FINISH_REASON = "stop"

    def __init__(self) -> None:
        self.finish_reason = self.DEFAULT_FINISH_REASON
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    def classify(self, frame: SseFrame) -> Optional[ChatCompletionEvent]:
        """
        Map one frame to an event, or None when the frame carries nothing to deliver.

        - frames not named "message" are heartbeats/control frames and dropped
        - unparseable JSON is upstream noise and dropped
        - "think" frames become THINK messages unless empty
        - "text" frames always become ANSWER messages, empty ones included
        - anything else is a status frame that may update the finish reason
        """
        if self._finished:
            raise RuntimeError("classify() called after the stream finished")

        if frame.event != self.MESSAGE_EVENT:
            return None

        try:
            value = json.loads(frame.data)
        except ValueError:
            return None

        if not isinstance(value, dict):
            return None

        app_logger.debug(f"Event message: {frame.data[:200]}")

        frame_type = value.get("type")

        if frame_type == "think":
            content = self._string_field(value, "content")
            if not content:
                return None
            return MessageEvent(kind=MessageKind.THINK, text=content)

        if frame_type == "text":
            return MessageEvent(kind=MessageKind.ANSWER, text=self._string_field(value, "msg"))

        stop_reason = self._string_field(value, "stopReason")
        if stop_reason:
            self.finish_reason = stop_reason
        return None

    def transport_error(self, error: Exception) -> ErrorEvent:
        """Wrap a mid-stream transport problem as an in-band error event."""
        return ErrorEvent(cause=StreamFrameError(str(error) or type(error).__name__).message)

    def finish(self) -> FinishEvent:
        """Produce the single terminal event for this stream."""
        if self._finished:
            raise RuntimeError("stream already finished")
        self._finished = True
        return FinishEvent(reason=self.finish_reason)

    @staticmethod
    def _string_field(value: dict, key: str) -> str:
        field = value.get(key)
        return field if isinstance(field, str) else ""
