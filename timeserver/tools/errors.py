"""Error types for the tool layer."""


class ToolError(Exception):
    """Base error for all tool-layer failures."""


class DuplicateToolError(ToolError):
    """A tool with the same name is already registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool already registered: {name}")


class ToolExecutionError(ToolError):
    """A tool handler broke its contract (as opposed to reporting a domain failure)."""

    def __init__(self, name: str, detail: str = "") -> None:
        self.name = name
        self.detail = detail
        super().__init__(f"Tool execution failed: {name}" + (f": {detail}" if detail else ""))
