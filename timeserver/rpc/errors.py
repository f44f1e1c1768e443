"""JSON-RPC error codes and the protocol error raised inside the dispatcher."""

from enum import IntEnum


class ErrorCode(IntEnum):
    """Standard JSON-RPC 2.0 error codes, plus the implementation-defined server error."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    SERVER_ERROR = -32000


class RpcError(Exception):
    """A protocol-level failure that becomes a JSON-RPC error response."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)
