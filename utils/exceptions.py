"""
Exception hierarchy for the completion pipeline.

Caller errors (bad model, no messages) map to 400; anything that goes wrong
while talking to the upstream before streaming starts maps to 502 and records
the setup stage it failed in.
"""
from typing import Any, Dict, Optional


class BridgeError(Exception):
    """Base exception for the bridge."""

    error_type: str = "server_error"

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """OpenAI-style error body."""
        return {
            "error": {
                "message": self.message,
                "type": self.error_type,
                "code": self.__class__.__name__,
                **self.details,
            }
        }


class InvalidModelError(BridgeError):
    """Model identifier is not in the catalog."""

    error_type = "invalid_request_error"

    def __init__(self, model: str) -> None:
        super().__init__(f"invalid model: {model!r}", status_code=400, details={"model": model})


class EmptyConversationError(BridgeError):
    """No messages were supplied, so there is nothing to prompt with."""

    error_type = "invalid_request_error"

    def __init__(self, message: str = "messages must not be empty") -> None:
        super().__init__(message, status_code=400)


class SetupStage:
    """Setup steps a completion can fail in before streaming starts."""
    CREATE_CONVERSATION, OPEN_STREAM = "create_conversation", "open_stream"

    DESCRIPTIONS = {
        CREATE_CONVERSATION: "cannot create conversation",
        OPEN_STREAM: "cannot open stream",
    }


class UpstreamError(BridgeError):
    """Base class for failures talking to the upstream service."""

    error_type = "upstream_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, status_code=502, details=details)
        self.stage: Optional[str] = None

    def at_stage(self, stage: str) -> "UpstreamError":
        """Record which setup step failed and prefix the message with it."""
        self.stage = stage
        self.details["stage"] = stage
        self.message = f"{SetupStage.DESCRIPTIONS[stage]}: {self.message}"
        self.args = (self.message,)
        return self


class UpstreamTransportError(UpstreamError):
    """Connect, DNS or timeout failure."""


class UpstreamStatusError(UpstreamError):
    """Upstream answered with a non-2xx status."""

    def __init__(self, message: str, upstream_status: int) -> None:
        super().__init__(message, details={"upstream_status": upstream_status})
        self.upstream_status = upstream_status


class UpstreamFormatError(UpstreamError):
    """Upstream body was not JSON or lacked a required field."""


class StreamFrameError(BridgeError):
    """Malformed frame or transport error in the middle of a stream.

    Never propagated to callers: it is turned into an in-band error event.
    """

    def __init__(self, message: str) -> None:
        super().__init__(f"Error on stream: {message}", status_code=502)
