"""Tool registry, validation, execution and the time tools."""

from .errors import DuplicateToolError, ToolError, ToolExecutionError
from .executor import ToolExecutor
from .models import TextContent, ToolResult
from .registry import ToolHandler, ToolRegistry, ToolSpec
from .time_tools import TimeToolbox, build_time_registry
from .validation import ArgumentField, ArgumentSchema, FieldError, Invalid, Ok, validate

__all__ = [
    "ArgumentField",
    "ArgumentSchema",
    "DuplicateToolError",
    "FieldError",
    "Invalid",
    "Ok",
    "TextContent",
    "TimeToolbox",
    "ToolError",
    "ToolExecutionError",
    "ToolExecutor",
    "ToolHandler",
    "ToolRegistry",
    "ToolResult",
    "ToolSpec",
    "build_time_registry",
    "validate",
]
