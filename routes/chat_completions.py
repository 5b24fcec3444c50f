"""
Route handlers for the OpenAI-compatible chat completion endpoint.
Handles /v1/chat/completions in both streaming and non-streaming mode.
"""
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from models.api_models import ChatCompletionBody
from models.chat_models import ChatCompletionRequest, ChatModel
from services.completion_service import CompletionService
from services.stream_service import CompletionStreamingResponse, StreamService
from utils.cancellation import CancellationToken
from utils.exceptions import BridgeError
from utils.logger import app_logger

router = APIRouter()


def send_bridge_error(e: BridgeError) -> JSONResponse:
    """Translate a setup failure into an OpenAI-style error response."""
    return JSONResponse(status_code=e.status_code, content=e.to_dict())


@router.post("/v1/chat/completions")
async def chat_completions(body: ChatCompletionBody):
    """
    Chat completion backed by a fresh upstream conversation.
    """
    try:
        chat_model = ChatModel.parse(body.model)
        request = ChatCompletionRequest(messages=tuple(body.messages), chat_model=chat_model)

        app_logger.info(
            f"Completion request: model={chat_model.public_id}, "
            f"messages={len(request.messages)}, stream={body.stream}"
        )

        cancel = CancellationToken()
        stream = await CompletionService().create_completion(request, cancel)

    except BridgeError as e:
        app_logger.error(f"Completion setup failed: {e.message}")
        return send_bridge_error(e)

    if not body.stream:
        return await StreamService.collect_completion(stream, chat_model)

    return CompletionStreamingResponse(stream, chat_model)
