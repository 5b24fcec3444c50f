"""
Authentication middleware for gateway key verification.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from config import Config
from utils.logger import app_logger


class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Checks the bearer token (or X-API-Key header) against the configured gateway key.
    """

    EXCLUDED_PATHS = {"/", "/docs", "/openapi.json", "/redoc"}
    API_KEY: str = Config.API_KEY

    @staticmethod
    def extract_key(request: Request) -> str:
        """Read the key from `Authorization: Bearer <key>` or `X-API-Key`."""
        authorization = request.headers.get("Authorization", "")
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()

        return request.headers.get("X-API-Key", "").strip()

    async def dispatch(self, request: Request, call_next):
        """
        Process each request and verify the gateway key.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/handler in chain

        Returns:
            Response from next handler or error response
        """
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        if not self.API_KEY:
            app_logger.error("CRITICAL: API_KEY not set in .env file!")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "detail": "Server misconfiguration: API_KEY not set. Please configure API_KEY in .env file.",
                    "error": "server_error"
                },
            )

        api_key = self.extract_key(request)
        client_host = request.client.host if request.client else "unknown"

        if not api_key:
            app_logger.warning(
                f"Unauthorized request from {client_host} - Missing API key"
            )
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={
                    "detail": "Missing API key. Include an 'Authorization: Bearer' header in your request.",
                    "error": "unauthorized"
                },
                headers={"WWW-Authenticate": "Bearer"},
            )

        if api_key != self.API_KEY:
            app_logger.warning(
                f"Forbidden request from {client_host} - Invalid API key"
            )
            return JSONResponse(
                status_code=status.HTTP_403_FORBIDDEN,
                content={
                    "detail": "Invalid API key",
                    "error": "forbidden"
                },
            )

        response = await call_next(request)
        return response
