"""
Client for the upstream conversational service.
Creates conversations and opens the streaming chat endpoint.
"""
import httpx
from config import Config
from models.chat_models import ChatModel
from utils.exceptions import (
    UpstreamFormatError,
    UpstreamStatusError,
    UpstreamTransportError,
)
from utils.http_client import HTTPClientManager
from utils.logger import app_logger


class UpstreamClient:
    """Thin wrapper over the upstream's web API."""

    def __init__(self, client: httpx.AsyncClient | None = None, agent_id: str | None = None):
        self._client = client or HTTPClientManager.get_upstream_client()
        self.agent_id = agent_id or Config.AGENT_ID

    async def create_conversation(self) -> str:
        """
        Open a new upstream conversation.

        Returns:
            The conversation id

        Raises:
            UpstreamTransportError: request never got a usable response
                (connection failure, timeout, redirect loop)
            UpstreamStatusError: response status was not 2xx
            UpstreamFormatError: body was not JSON or had no string `id`
        """
        try:
            response = await self._client.post(
                Config.UPSTREAM_CREATE_URL,
                json={"agentId": self.agent_id}
            )
        except httpx.RequestError as e:
            raise UpstreamTransportError(f"cannot send request: {e}") from e

        if not response.is_success:
            raise UpstreamStatusError(
                f"error status code: {response.status_code}",
                upstream_status=response.status_code
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamFormatError(f"cannot parse json: {e}") from e

        conversation_id = payload.get("id") if isinstance(payload, dict) else None
        if not isinstance(conversation_id, str):
            raise UpstreamFormatError("id not in json")

        return conversation_id

    def build_chat_body(self, prompt: str, chat_model: ChatModel) -> dict:
        """Request body the upstream web client sends for one chat turn."""
        return {
            "model": Config.UPSTREAM_BACKEND_MODEL,
            "prompt": prompt,
            "plugin": Config.UPSTREAM_PLUGIN,
            "displayPrompt": prompt,
            "displayPromptType": 1,
            "options": {
                "imageIntention": {
                    "needIntentionModel": True,
                    "backendUpdateFlag": 2,
                    "intentionStatus": True
                }
            },
            "multimedia": [],
            "agentId": self.agent_id,
            "supportHint": 1,
            "version": Config.UPSTREAM_PROTOCOL_VERSION,
            "chatModelId": chat_model.upstream_id,
        }

    async def open_chat_stream(self, conversation_id: str, body: dict) -> httpx.Response:
        """
        POST the chat body and return the response with its body unread.
        The caller owns the response and must `aclose()` it.

        Raises:
            UpstreamTransportError: request never got a usable response
                (connection failure, timeout, redirect loop)
            UpstreamStatusError: response status was not 2xx
        """
        request = self._client.build_request(
            "POST",
            Config.chat_url(conversation_id),
            json=body,
            headers={"Accept": "text/event-stream"}
        )

        try:
            response = await self._client.send(request, stream=True)
        except httpx.RequestError as e:
            raise UpstreamTransportError(f"cannot send request: {e}") from e

        if not response.is_success:
            await response.aclose()
            raise UpstreamStatusError(
                f"error status code: {response.status_code}",
                upstream_status=response.status_code
            )

        app_logger.debug(f"Chat stream opened for conversation {conversation_id}")
        return response
