"""Utility helpers for Timeserver."""

from .logging_utils import log_request_rejected, log_rpc_call, log_tool_call

__all__ = [
    "log_request_rejected",
    "log_rpc_call",
    "log_tool_call",
]
