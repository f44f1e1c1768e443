"""JSON-RPC dispatcher for the MCP tool methods.

Stateless: every payload is classified on its own. Protocol problems (bad
envelope, unknown method or tool, invalid params) become JSON-RPC error
responses; failures reported by a tool travel inside a successful result with
``isError`` set.
"""

import logging
import time
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from timeserver.tools.errors import ToolExecutionError
from timeserver.tools.executor import ToolExecutor
from timeserver.tools.registry import ToolRegistry
from timeserver.tools.validation import Invalid, validate
from timeserver.utils.logging_utils import log_rpc_call

from .errors import ErrorCode, RpcError
from .models import InitializeResult, JsonRpcRequest, JsonRpcResponse, ServerInfo, ToolInfo

logger = logging.getLogger(__name__)

NOTIFICATION_METHODS = frozenset({"initialized", "notifications/initialized"})


def _recover_id(payload: Any) -> Any:
    """Best-effort id extraction for responses to malformed envelopes."""
    if isinstance(payload, dict):
        request_id = payload.get("id")
        if isinstance(request_id, str) or (isinstance(request_id, int) and not isinstance(request_id, bool)):
            return request_id
    return None


class RpcDispatcher:
    """Routes JSON-RPC requests to the initialize / tools handlers."""

    def __init__(
        self,
        registry: ToolRegistry,
        executor: ToolExecutor,
        server_info: ServerInfo,
        supported_versions: list[str],
        instructions: str = "",
    ) -> None:
        """Initialize the dispatcher.

        Args:
            registry: Tools available to ``tools/list`` and ``tools/call``.
            executor: Runs validated tool calls.
            server_info: Name and version reported by ``initialize``.
            supported_versions: Protocol versions this server can speak.
            instructions: Free-text usage hints reported by ``initialize``.
        """
        if not supported_versions:
            raise ValueError("At least one supported protocol version is required")

        self.registry = registry
        self.executor = executor
        self.server_info = server_info
        self.supported_versions = list(supported_versions)
        self.instructions = instructions

        self._methods: dict[str, Callable[[Any], dict[str, Any]]] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
        }

    @property
    def latest_version(self) -> str:
        return max(self.supported_versions)

    @property
    def fallback_version(self) -> str:
        return min(self.supported_versions)

    def negotiate_version(self, requested: Any) -> str:
        """Pick the protocol version to answer ``initialize`` with.

        A supported proposal is echoed, a missing or empty proposal gets the newest version and
        anything else degrades to the oldest supported version.
        """
        if not requested:
            return self.latest_version
        if isinstance(requested, str) and requested in self.supported_versions:
            return requested
        return self.fallback_version

    def dispatch(self, payload: Any) -> dict[str, Any] | None:
        """Handle one decoded JSON-RPC message.

        Args:
            payload: The JSON-decoded request body.

        Returns:
            The response payload, or None for notifications.
        """
        start_time = time.perf_counter()
        method: str | None = None
        request_id = _recover_id(payload)

        try:
            request = self._parse_envelope(payload)
            method = request.method
            request_id = request.id

            if method in NOTIFICATION_METHODS:
                logger.debug(f"[rpc] Notification {method} received")
                return None

            handler = self._methods.get(method)
            if handler is None:
                raise RpcError(ErrorCode.METHOD_NOT_FOUND, f"Method not found: {method}")

            response = JsonRpcResponse.success(request_id, handler(request.params))
        except RpcError as e:
            response = JsonRpcResponse.failure(request_id, e.code, e.message)
        except ToolExecutionError as e:
            logger.error(f"[rpc] {e}")
            response = JsonRpcResponse.failure(request_id, ErrorCode.SERVER_ERROR, str(e))
        except Exception as e:
            logger.error(f"[rpc] Unexpected failure handling {method}: {e}", exc_info=True)
            response = JsonRpcResponse.failure(request_id, ErrorCode.INTERNAL_ERROR, f"Internal error: {e}")

        duration_ms = (time.perf_counter() - start_time) * 1000
        error = response.error
        log_rpc_call(
            logger,
            method,
            request_id,
            success=error is None,
            duration_ms=duration_ms,
            error_code=error.code if error else None,
            error=error.message if error else None,
        )
        return response.to_payload()

    def _parse_envelope(self, payload: Any) -> JsonRpcRequest:
        if isinstance(payload, list):
            raise RpcError(ErrorCode.INVALID_REQUEST, "Invalid Request: batch requests are not supported")
        if not isinstance(payload, dict):
            raise RpcError(ErrorCode.INVALID_REQUEST, "Invalid Request: expected a JSON object")

        try:
            return JsonRpcRequest.model_validate(payload)
        except ValidationError as exc:
            fields = sorted({".".join(str(part) for part in error["loc"][:1]) for error in exc.errors()})
            raise RpcError(ErrorCode.INVALID_REQUEST, f"Invalid Request: invalid {', '.join(fields)}") from exc

    def _initialize(self, params: Any) -> dict[str, Any]:
        requested = params.get("protocolVersion") if isinstance(params, dict) else None
        result = InitializeResult(
            protocol_version=self.negotiate_version(requested),
            server_info=self.server_info,
            instructions=self.instructions,
        )
        return result.model_dump(by_alias=True)

    def _ping(self, params: Any) -> dict[str, Any]:
        return {}

    def _list_tools(self, params: Any) -> dict[str, Any]:
        tools = [
            ToolInfo(
                name=spec.name,
                title=spec.title,
                description=spec.description,
                input_schema=spec.input_schema,
            ).model_dump(by_alias=True, exclude_none=True)
            for spec in self.registry.list_tools()
        ]
        return {"tools": tools}

    def _call_tool(self, params: Any) -> dict[str, Any]:
        if not isinstance(params, dict) or not isinstance(params.get("name"), str) or not params["name"]:
            raise RpcError(ErrorCode.INVALID_PARAMS, "Invalid params: Missing tool name")

        name = params["name"]
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}

        spec = self.registry.lookup(name)
        if spec is None:
            raise RpcError(ErrorCode.METHOD_NOT_FOUND, f"Unknown tool: {name}")

        outcome = validate(spec.arguments, arguments)
        if isinstance(outcome, Invalid):
            raise RpcError(ErrorCode.INVALID_PARAMS, outcome.message)

        return self.executor.execute(spec, outcome.arguments).to_payload()
