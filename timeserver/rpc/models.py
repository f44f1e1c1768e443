"""JSON-RPC 2.0 envelope and MCP payload models."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, model_validator

from .errors import ErrorCode

RequestId = StrictInt | StrictStr | None

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request or notification. Unknown top-level fields are ignored."""

    model_config = ConfigDict(extra="ignore")

    jsonrpc: Literal["2.0"]
    method: StrictStr
    id: RequestId = None
    params: dict[str, Any] | list[Any] | None = None


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message carrying exactly one of result or error."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: RequestId = None
    result: dict[str, Any] | None = None
    error: JsonRpcError | None = None

    @model_validator(mode="after")
    def _result_xor_error(self) -> "JsonRpcResponse":
        if self.result is not None and self.error is not None:
            raise ValueError("A response carries either a result or an error, not both")
        return self

    @classmethod
    def success(cls, request_id: Any, result: dict[str, Any]) -> "JsonRpcResponse":
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: Any, code: ErrorCode, message: str) -> "JsonRpcResponse":
        return cls(id=request_id, error=JsonRpcError(code=int(code), message=message))

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the wire; ``id`` is always present, even when null."""
        payload: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            payload["error"] = self.error.model_dump()
        else:
            payload["result"] = self.result if self.result is not None else {}
        return payload


# ---------------------------------------------------------------------------
# MCP-specific payloads
# ---------------------------------------------------------------------------


class ServerInfo(BaseModel):
    """Server identity reported by ``initialize``."""

    name: str
    version: str


class InitializeResult(BaseModel):
    """Result of ``initialize``."""

    model_config = {"populate_by_name": True}

    protocol_version: str = Field(..., alias="protocolVersion")
    capabilities: dict[str, Any] = Field(default_factory=lambda: {"tools": {}})
    server_info: ServerInfo = Field(..., alias="serverInfo")
    instructions: str = ""


class ToolInfo(BaseModel):
    """A tool definition as returned by ``tools/list``."""

    model_config = {"populate_by_name": True}

    name: str
    title: str | None = None
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=dict, alias="inputSchema")
