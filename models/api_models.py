"""
Pydantic data models for the OpenAI-compatible API surface.
"""
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """One chat turn. Either text field may be absent."""
    model_config = ConfigDict(frozen=True)

    role: str  # "system", "user" or "assistant"
    content: Optional[str] = None
    reasoning_content: Optional[str] = None


class ChatCompletionBody(BaseModel):
    """Body of POST /v1/chat/completions."""
    messages: List[ChatMessage]
    model: str
    stream: bool = False


class Delta(BaseModel):
    """Incremental message carried by a streamed chunk."""
    role: str = "assistant"
    content: Optional[str] = None
    reasoning_content: Optional[str] = None


class ChunkChoice(BaseModel):
    index: int = 0
    delta: Delta
    finish_reason: Optional[str] = None


class ChatCompletionChunk(BaseModel):
    """Single `chat.completion.chunk` SSE payload."""
    id: str
    object: Literal["chat.completion.chunk"] = "chat.completion.chunk"
    created: int
    model: str
    choices: List[ChunkChoice]


class CompletionChoice(BaseModel):
    index: int = 0
    message: ChatMessage
    finish_reason: Optional[str] = None


class ChatCompletionResponse(BaseModel):
    """Aggregated non-streaming completion."""
    id: str
    object: Literal["chat.completion"] = "chat.completion"
    created: int
    model: str
    choices: List[CompletionChoice]


class ModelCard(BaseModel):
    id: str
    object: Literal["model"] = "model"
    owned_by: str = "deepseek"


class ModelList(BaseModel):
    object: Literal["list"] = "list"
    data: List[ModelCard] = Field(default_factory=list)
