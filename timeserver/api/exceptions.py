"""API exceptions and error handlers.

Errors raised here stop a request before it reaches the dispatcher.
"""

import logging
import math

from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse

from timeserver.rpc.errors import ErrorCode
from timeserver.rpc.models import JsonRpcResponse

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base class for transport-level errors rendered as a JSON-RPC error with a null id."""

    def __init__(self, message: str, status_code: int = 500, code: ErrorCode = ErrorCode.INTERNAL_ERROR):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class OriginNotAllowedError(APIError):
    """Raised when the Origin header names a host outside the allow-list."""

    def __init__(self, origin: str):
        self.origin = origin
        super().__init__("Invalid origin", status_code=403, code=ErrorCode.INVALID_REQUEST)


class UnsupportedProtocolVersionError(APIError):
    """Raised when the MCP-Protocol-Version header names an unknown version."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(
            f"Unsupported protocol version: {version}",
            status_code=400,
            code=ErrorCode.INVALID_REQUEST,
        )


def _describe_window(window_ms: int) -> str:
    """Render a window length for messages, e.g. "minute", "5 minutes" or "30 seconds"."""
    if window_ms % 60_000 == 0:
        minutes = window_ms // 60_000
        return "minute" if minutes == 1 else f"{minutes} minutes"
    seconds = math.ceil(window_ms / 1000)
    return "second" if seconds == 1 else f"{seconds} seconds"


class RateLimitExceededError(APIError):
    """Raised when a client has used up its rate-limit window."""

    def __init__(self, limit: int, retry_after: int, client_id: str, window_ms: int = 60_000):
        self.limit = limit
        self.retry_after = retry_after
        self.client_id = client_id
        self.window_ms = window_ms
        super().__init__(
            f"Too Many Requests - Rate limit exceeded ({limit} requests per {_describe_window(window_ms)})",
            status_code=429,
        )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=JsonRpcResponse.failure(None, exc.code, exc.message).to_payload(),
    )


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceededError) -> PlainTextResponse:
    """Handle RateLimitExceededError with a plain-text 429, outside the JSON-RPC envelope."""
    return PlainTextResponse(
        exc.message,
        status_code=exc.status_code,
        headers={"Retry-After": str(exc.retry_after)},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle generic exceptions."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=JsonRpcResponse.failure(None, ErrorCode.INTERNAL_ERROR, "Internal server error").to_payload(),
    )
