"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from timeserver.config import Config
from timeserver.ratelimit import FixedWindowRateLimiter
from timeserver.rpc import RpcDispatcher, ServerInfo
from timeserver.tools import TimeToolbox, ToolExecutor, build_time_registry

from .exceptions import (
    APIError,
    RateLimitExceededError,
    api_error_handler,
    generic_exception_handler,
    rate_limit_exceeded_handler,
)
from .routes import health_router, mcp_router

logger = logging.getLogger(__name__)

CORS_METHODS = ["GET", "POST", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "MCP-Protocol-Version", "Mcp-Session-Id", "Origin"]


def create_api_app(config: Config | None = None, toolbox: TimeToolbox | None = None) -> FastAPI:
    """Factory function to create the FastAPI application.

    Args:
        config: Configuration instance. If None, creates a new Config.
        toolbox: Time tool handlers. If None, builds one from the time configuration.

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = Config()

    if toolbox is None:
        toolbox = TimeToolbox(
            default_timezone=config.data.time.default_timezone,
            default_format=config.data.time.default_format,
        )

    registry = build_time_registry(toolbox)
    server = config.data.server

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(f"{server.name} v{server.version} starting...")
        logger.info(f"Workspace: {config.workspace_path}")
        logger.info(f"Registered tools: {registry.names()}")
        logger.info(
            f"Rate limit: {config.data.rate_limit.requests_per_window} requests "
            f"per {config.data.rate_limit.window_ms}ms"
        )
        yield
        logger.info(f"{server.name} shutting down...")

    app = FastAPI(
        title="Timeserver",
        description="Date/time tools over JSON-RPC (MCP tool convention)",
        version=server.version,
        docs_url="/docs" if config.data.api.debug else None,
        redoc_url="/redoc" if config.data.api.debug else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.data.api.cors_origins,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )

    app.state.config = config
    app.state.registry = registry
    app.state.rate_limiter = FixedWindowRateLimiter(
        limit=config.data.rate_limit.requests_per_window,
        window_ms=config.data.rate_limit.window_ms,
    )
    app.state.dispatcher = RpcDispatcher(
        registry=registry,
        executor=ToolExecutor(),
        server_info=ServerInfo(name=server.name, version=server.version),
        supported_versions=config.data.protocol.supported_versions,
        instructions=server.instructions,
    )

    # Exception handlers
    app.add_exception_handler(RateLimitExceededError, rate_limit_exceeded_handler)
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Include routers
    app.include_router(health_router)
    app.include_router(mcp_router)

    return app
