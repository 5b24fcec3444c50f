"""
Data models for completion processing.
Contains the model catalog, the pipeline request and the events it produces.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union
from models.api_models import ChatMessage
from utils.exceptions import InvalidModelError


class ChatModel(Enum):
    """
    Chat models the bridge can serve.
    Each member carries its public identifier and the upstream's identifier.
    """
    DEEPSEEK_V3 = ("deepseek-v3", "deep_seek_v3")
    DEEPSEEK_R1 = ("deepseek-r1", "deep_seek")

    def __init__(self, public_id: str, upstream_id: str):
        self.public_id = public_id
        self.upstream_id = upstream_id

    @classmethod
    def parse(cls, public_id: str) -> "ChatModel":
        """Look up a model by its public identifier."""
        for model in cls:
            if model.public_id == public_id:
                return model
        raise InvalidModelError(public_id)


@dataclass(frozen=True)
class ChatCompletionRequest:
    """A completion request as the pipeline sees it."""
    messages: Tuple[ChatMessage, ...]
    chat_model: ChatModel


class MessageKind(Enum):
    """Content kinds the upstream distinguishes."""
    THINK = "think"
    ANSWER = "answer"


@dataclass(frozen=True)
class MessageEvent:
    """A content fragment."""
    kind: MessageKind
    text: str


@dataclass(frozen=True)
class ErrorEvent:
    """A mid-stream problem, surfaced without ending the stream."""
    cause: str


@dataclass(frozen=True)
class FinishEvent:
    """Terminal signal; exactly one per completion."""
    reason: str


ChatCompletionEvent = Union[MessageEvent, ErrorEvent, FinishEvent]


@dataclass(frozen=True)
class SseFrame:
    """One Server-Sent-Event frame as read off the wire."""
    event: str
    data: str
    id: Optional[str] = None
