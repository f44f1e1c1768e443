"""JSON-RPC layer: envelope models, error codes and the dispatcher."""

from .dispatcher import NOTIFICATION_METHODS, RpcDispatcher
from .errors import ErrorCode, RpcError
from .models import InitializeResult, JsonRpcError, JsonRpcRequest, JsonRpcResponse, ServerInfo, ToolInfo

__all__ = [
    "NOTIFICATION_METHODS",
    "ErrorCode",
    "InitializeResult",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "RpcDispatcher",
    "RpcError",
    "ServerInfo",
    "ToolInfo",
]
