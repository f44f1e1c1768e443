"""Pydantic models for tool results."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class TextContent(BaseModel):
    """A text block inside a tool result."""

    type: Literal["text"] = "text"
    text: str = Field(..., description="Human-readable text")


class ToolResult(BaseModel):
    """Outcome of a single tool invocation.

    ``is_error`` flags a domain failure reported by the tool itself; the RPC
    call carrying it still succeeds.
    """

    model_config = {"populate_by_name": True}

    content: list[TextContent] = Field(default_factory=list, description="Ordered content blocks")
    is_error: bool = Field(default=False, alias="isError", description="Whether the tool reported a failure")

    @classmethod
    def from_text(cls, text: str, is_error: bool = False) -> "ToolResult":
        """Build a result holding a single text block."""
        return cls(content=[TextContent(text=text)], is_error=is_error)

    def to_payload(self) -> dict[str, Any]:
        """Serialize using the wire field names."""
        return self.model_dump(by_alias=True)
