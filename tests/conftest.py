import pytest


@pytest.fixture
def anyio_backend():
    """Run anyio-marked tests on asyncio, the event loop the code targets."""
    return "asyncio"


@pytest.fixture
def upstream():
    """Scripted upstream that hands out conversation id 'abc123'."""
    from tests.fixtures.mock_clients import ScriptedUpstream
    return ScriptedUpstream(conversation_id="abc123")


@pytest.fixture
def upstream_credentials(monkeypatch):
    """Deterministic upstream credentials."""
    from config import Config
    monkeypatch.setattr(Config, "HY_USER", "user-1")
    monkeypatch.setattr(Config, "HY_TOKEN", "token-1")
    monkeypatch.setattr(Config, "AGENT_ID", "agent-1")


@pytest.fixture
async def upstream_client(upstream, upstream_credentials):
    """UpstreamClient wired to the scripted upstream."""
    from services.upstream_client import UpstreamClient
    http_client = upstream.build_client()
    yield UpstreamClient(client=http_client)
    await http_client.aclose()


@pytest.fixture
def chat_request():
    """Single-message deepseek-r1 request."""
    from models.api_models import ChatMessage
    from models.chat_models import ChatCompletionRequest, ChatModel
    return ChatCompletionRequest(
        messages=(ChatMessage(role="user", content="What is the answer?"),),
        chat_model=ChatModel.DEEPSEEK_R1
    )


@pytest.fixture
def auth_headers():
    """Authentication headers for API requests."""
    return {"Authorization": "Bearer test-key"}


@pytest.fixture
def configured_app(monkeypatch, upstream, upstream_credentials):
    """App with auth configured and the shared upstream client pointed at the scripted upstream."""
    from fastapi import FastAPI
    from fastapi.exceptions import RequestValidationError
    from fastapi.testclient import TestClient
    from auth import APIKeyMiddleware
    from main import validation_exception_handler
    from routes import chat_completions, models_route
    from utils.http_client import HTTPClientManager

    monkeypatch.setattr(APIKeyMiddleware, "API_KEY", "test-key")
    monkeypatch.setattr(HTTPClientManager, "_upstream_client", upstream.build_client())

    app = FastAPI()
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_middleware(APIKeyMiddleware)
    app.include_router(models_route.router)
    app.include_router(chat_completions.router)

    with TestClient(app) as client:
        yield client
