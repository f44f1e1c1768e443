"""Logging utilities for RPC dispatch and tool execution with structured context."""

import logging
from typing import Any


def log_rpc_call(
    logger: logging.Logger,
    method: str | None,
    request_id: Any,
    success: bool,
    duration_ms: float,
    error_code: int | None = None,
    error: str | None = None,
) -> None:
    """Log a dispatched JSON-RPC call.

    Args:
        logger: Logger instance.
        method: JSON-RPC method name, or None if the envelope was invalid.
        request_id: The request id echoed in the response.
        success: Whether a result (rather than an error) was returned.
        duration_ms: Dispatch duration in milliseconds.
        error_code: JSON-RPC error code if failed.
        error: Error message if failed.
    """
    context: dict[str, Any] = {
        "event": "rpc_call",
        "method": method,
        "request_id": request_id,
        "success": success,
        "duration_ms": round(duration_ms, 2),
    }

    if error_code is not None:
        context["error_code"] = error_code
    if error:
        context["error"] = error[:500]

    if success:
        logger.info(f"[rpc] {method} completed in {duration_ms:.2f}ms", extra={"rpc_context": context})
    else:
        logger.warning(f"[rpc] {method} failed with {error_code}", extra={"rpc_context": context})


def log_tool_call(
    logger: logging.Logger,
    tool_name: str,
    input_keys: list[str],
    success: bool,
    duration_ms: float,
    error: str | None = None,
) -> None:
    """Log a tool invocation.

    Args:
        logger: Logger instance.
        tool_name: Tool name.
        input_keys: Keys of the validated arguments.
        success: Whether the tool returned a non-error result.
        duration_ms: Duration in milliseconds.
        error: Error message if failed.
    """
    context: dict[str, Any] = {
        "event": "tool_call",
        "tool": tool_name,
        "input_keys": input_keys,
        "success": success,
        "duration_ms": round(duration_ms, 2),
    }

    if error:
        context["error"] = error[:500]

    if success:
        logger.info(f"[executor] Tool {tool_name} succeeded", extra={"rpc_context": context})
    else:
        logger.warning(f"[executor] Tool {tool_name} failed", extra={"rpc_context": context})


def log_request_rejected(
    logger: logging.Logger,
    reason: str,
    status_code: int,
    client_id: str | None = None,
    detail: str | None = None,
) -> None:
    """Log a request turned away before dispatch (origin, protocol version, rate limit, parse)."""
    context: dict[str, Any] = {
        "event": "request_rejected",
        "reason": reason,
        "status_code": status_code,
    }

    if client_id:
        context["client_id"] = client_id
    if detail:
        context["detail"] = detail[:500]

    logger.warning(f"[http] Rejected request ({reason}): {status_code}", extra={"rpc_context": context})
