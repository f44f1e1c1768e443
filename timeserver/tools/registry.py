"""Tool registry.

Tools are registered once at startup and looked up by name for every
``tools/call``. The registry is never mutated after startup, so concurrent
reads need no locking.
"""

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

from .errors import DuplicateToolError
from .models import ToolResult
from .validation import ArgumentSchema

logger = logging.getLogger(__name__)

ToolHandler = Callable[[dict[str, Any]], ToolResult]


@dataclass(frozen=True)
class ToolSpec:
    """A named, schema-described callable exposed over RPC."""

    name: str
    description: str
    handler: ToolHandler
    arguments: ArgumentSchema = field(default_factory=ArgumentSchema)
    title: str | None = None

    @property
    def input_schema(self) -> dict[str, Any]:
        return self.arguments.to_json_schema()


class ToolRegistry:
    """Ordered, name-unique collection of tool specs."""

    def __init__(self, specs: list[ToolSpec] | None = None) -> None:
        self._tools: dict[str, ToolSpec] = {}
        for spec in specs or []:
            self.register(spec)

    def register(self, spec: ToolSpec) -> None:
        """Add a tool.

        Raises:
            DuplicateToolError: If a tool with the same name is already registered.
        """
        if spec.name in self._tools:
            raise DuplicateToolError(spec.name)
        self._tools[spec.name] = spec
        logger.debug(f"Registered tool {spec.name}")

    def lookup(self, name: str) -> ToolSpec | None:
        """Get a tool by name, or None if it is not registered."""
        return self._tools.get(name)

    def list_tools(self) -> list[ToolSpec]:
        """All tools in registration order."""
        return list(self._tools.values())

    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolSpec]:
        return iter(self.list_tools())
