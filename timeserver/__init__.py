"""Timeserver - date/time tools served over JSON-RPC (MCP tool convention)."""

__version__ = "0.3.0"
