"""Tool execution.

Runs a registered handler with validated arguments. Failures raised by the
handler become error results rather than transport errors.
"""

import logging
import time
from typing import Any

from timeserver.utils.logging_utils import log_tool_call

from .errors import ToolExecutionError
from .models import ToolResult
from .registry import ToolSpec


class ToolExecutor:
    """Invokes tool handlers and normalizes their outcome into a ToolResult."""

    def __init__(self) -> None:
        self._log = logging.getLogger(self.__class__.__name__)

    def execute(self, spec: ToolSpec, arguments: dict[str, Any]) -> ToolResult:
        """Execute a tool.

        Args:
            spec: The tool to run.
            arguments: Arguments already validated against ``spec.arguments``.

        Returns:
            The handler's result, or an error result carrying the failure message.

        Raises:
            ToolExecutionError: If the handler returns something other than a ToolResult.
        """
        input_keys = sorted(key for key, value in arguments.items() if value is not None)
        start_time = time.perf_counter()

        try:
            result = spec.handler(arguments)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            log_tool_call(self._log, spec.name, input_keys, success=False, duration_ms=duration_ms, error=str(e))
            return ToolResult.from_text(f"Tool execution error: {e}", is_error=True)

        duration_ms = (time.perf_counter() - start_time) * 1000

        if not isinstance(result, ToolResult):
            raise ToolExecutionError(spec.name, f"handler returned {type(result).__name__}, expected ToolResult")

        log_tool_call(self._log, spec.name, input_keys, success=not result.is_error, duration_ms=duration_ms)
        return result
