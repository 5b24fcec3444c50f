"""
Configuration module for the Yuanbao Bridge application.
Handles environment variables, upstream credentials and protocol constants.
"""
import os
from urllib.parse import quote
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration class."""

    # Gateway key clients must present
    API_KEY: str = os.getenv("API_KEY", "")

    # Upstream credentials (taken from a logged-in browser session)
    HY_USER: str = os.getenv("YUANBAO_HY_USER", "")
    HY_TOKEN: str = os.getenv("YUANBAO_HY_TOKEN", "")
    AGENT_ID: str = os.getenv("YUANBAO_AGENT_ID", "naQivTmsDa")

    # Upstream endpoints
    UPSTREAM_ORIGIN: str = "https://yuanbao.tencent.com"
    UPSTREAM_CREATE_URL: str = f"{UPSTREAM_ORIGIN}/api/user/agent/conversation/create"
    UPSTREAM_CHAT_URL: str = f"{UPSTREAM_ORIGIN}/api/chat/{{conversation_id}}"
    UPSTREAM_USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/134.0.0.0 Safari/537.36"
    )

    # Upstream chat protocol constants
    UPSTREAM_BACKEND_MODEL: str = "gpt_175B_0404"
    UPSTREAM_PLUGIN: str = "Adaptive"
    UPSTREAM_PROTOCOL_VERSION: str = "v2"

    # Application Settings
    APP_TITLE: str = "Yuanbao Bridge"
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "7555"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Timeouts (in seconds)
    UPSTREAM_TIMEOUT: float = float(os.getenv("UPSTREAM_TIMEOUT", "30.0"))

    # Connection pool
    MAX_UPSTREAM_CONNECTIONS: int = 20

    @classmethod
    def chat_url(cls, conversation_id: str) -> str:
        """Build the streaming chat URL for a conversation."""
        return cls.UPSTREAM_CHAT_URL.format(conversation_id=quote(conversation_id, safe=""))

    @classmethod
    def referer(cls) -> str:
        """Referer the upstream web client sends for the configured agent."""
        return f"{cls.UPSTREAM_ORIGIN}/chat/{cls.AGENT_ID}"

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and print warnings for missing credentials."""
        if not cls.API_KEY:
            print("   WARNING: API_KEY not found in .env file")
            print("   Every request will be rejected until a gateway key is configured.")

        if not cls.HY_USER or not cls.HY_TOKEN:
            print("   WARNING: YUANBAO_HY_USER / YUANBAO_HY_TOKEN not found in .env file")
            print("   Copy the hy_user and hy_token cookies from a logged-in browser session.")


Config.validate()
