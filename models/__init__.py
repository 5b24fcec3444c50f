"""
Models package exports.
"""
from models.api_models import (
    ChatMessage,
    ChatCompletionBody,
    ChatCompletionChunk,
    ChatCompletionResponse,
    ModelCard,
    ModelList,
)
from models.chat_models import (
    ChatModel,
    ChatCompletionRequest,
    ChatCompletionEvent,
    MessageKind,
    MessageEvent,
    ErrorEvent,
    FinishEvent,
    SseFrame,
)

__all__ = [
    'ChatMessage',
    'ChatCompletionBody',
    'ChatCompletionChunk',
    'ChatCompletionResponse',
    'ModelCard',
    'ModelList',
    'ChatModel',
    'ChatCompletionRequest',
    'ChatCompletionEvent',
    'MessageKind',
    'MessageEvent',
    'ErrorEvent',
    'FinishEvent',
    'SseFrame',
]
