"""Pydantic models for the non-RPC HTTP endpoints."""

from typing import Literal

from pydantic import BaseModel


class HealthStatus(BaseModel):
    """Health check response."""

    status: Literal["healthy", "unhealthy"]
    version: str
    tools: int
