"""FastAPI dependency injection.

Shared objects live on ``app.state`` and are created once by the app factory.
The guard dependencies raise APIError subclasses that the registered
exception handlers turn into responses.
"""

import logging
from typing import Annotated

from fastapi import Depends, Header, Request

from timeserver.config import Config
from timeserver.ratelimit import FixedWindowRateLimiter, client_identifier
from timeserver.rpc import RpcDispatcher
from timeserver.security import is_supported_protocol_version, is_valid_origin
from timeserver.tools import ToolRegistry
from timeserver.utils.logging_utils import log_request_rejected

from .exceptions import OriginNotAllowedError, RateLimitExceededError, UnsupportedProtocolVersionError

logger = logging.getLogger(__name__)


def get_config(request: Request) -> Config:
    """Get the configuration the application was built with."""
    return request.app.state.config


def get_registry(request: Request) -> ToolRegistry:
    return request.app.state.registry


def get_dispatcher(request: Request) -> RpcDispatcher:
    return request.app.state.dispatcher


def get_rate_limiter(request: Request) -> FixedWindowRateLimiter:
    return request.app.state.rate_limiter


def verify_origin(
    config: Annotated[Config, Depends(get_config)],
    origin: Annotated[str | None, Header()] = None,
) -> None:
    """Reject requests whose Origin header is not allowed. A missing or empty header is accepted.

    Raises:
        OriginNotAllowedError: If the origin is malformed or not allow-listed.
    """
    if not origin:
        return

    if not is_valid_origin(origin, config.data.security.allowed_hosts):
        log_request_rejected(logger, "invalid_origin", 403, detail=origin)
        raise OriginNotAllowedError(origin)


def verify_protocol_version(
    config: Annotated[Config, Depends(get_config)],
    mcp_protocol_version: Annotated[str | None, Header()] = None,
) -> str | None:
    """Validate the MCP-Protocol-Version header when present and non-empty.

    Raises:
        UnsupportedProtocolVersionError: If the header names an unknown version.
    """
    if not mcp_protocol_version:
        return None

    if not is_supported_protocol_version(mcp_protocol_version, config.data.protocol.supported_versions):
        log_request_rejected(logger, "unsupported_protocol_version", 400, detail=mcp_protocol_version)
        raise UnsupportedProtocolVersionError(mcp_protocol_version)

    return mcp_protocol_version


def enforce_rate_limit(
    request: Request,
    config: Annotated[Config, Depends(get_config)],
    limiter: Annotated[FixedWindowRateLimiter, Depends(get_rate_limiter)],
) -> str:
    """Admit the request against the client's rate-limit window.

    Returns:
        The client identifier the request was counted against.

    Raises:
        RateLimitExceededError: If the client has exhausted its window.
    """
    client_id = client_identifier(request.headers, config.data.security.client_ip_headers)

    if not limiter.admit(client_id):
        log_request_rejected(logger, "rate_limited", 429, client_id=client_id)
        raise RateLimitExceededError(limiter.limit, limiter.retry_after_seconds, client_id, limiter.window_ms)

    return client_id
