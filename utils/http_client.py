"""
HTTP client utilities with connection pooling.
Provides the shared httpx client used for every upstream call.
"""
import httpx
from config import Config


class HTTPClientManager:
    """Manages the shared upstream httpx client."""

    _upstream_client: httpx.AsyncClient | None = None

    @staticmethod
    def build_upstream_headers() -> dict[str, str]:
        """Headers the upstream web client sends on every request."""
        return {
            "Cookie": f"hy_source=web; hy_user={Config.HY_USER}; hy_token={Config.HY_TOKEN}",
            "Origin": Config.UPSTREAM_ORIGIN,
            "Referer": Config.referer(),
            "X-Agentid": Config.AGENT_ID,
            "User-Agent": Config.UPSTREAM_USER_AGENT,
        }

    @classmethod
    def get_upstream_client(cls) -> httpx.AsyncClient:
        """
        Get or create the shared httpx client for upstream calls.

        Features:
        - Connection pooling (reuses TCP connections across completions)
        - Upstream session cookie and browser headers on every request
        - No read timeout, so long generations are not cut off mid-stream

        Returns:
            Configured httpx.AsyncClient for upstream operations
        """
        if cls._upstream_client is None:
            limits = httpx.Limits(
                max_connections=Config.MAX_UPSTREAM_CONNECTIONS,
                max_keepalive_connections=5,
                keepalive_expiry=30.0
            )

            cls._upstream_client = httpx.AsyncClient(
                headers=cls.build_upstream_headers(),
                timeout=httpx.Timeout(Config.UPSTREAM_TIMEOUT, read=None),
                follow_redirects=True,
                limits=limits,
                http2=True
            )

        return cls._upstream_client

    @classmethod
    async def close_all(cls) -> None:
        """
        Close all managed clients and clean up connections.
        """
        if cls._upstream_client is not None:
            await cls._upstream_client.aclose()
            cls._upstream_client = None
