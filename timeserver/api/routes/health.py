"""Health check endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends

from timeserver.config import Config
from timeserver.tools import ToolRegistry

from ..dependencies import get_config, get_registry
from ..models import HealthStatus

router = APIRouter()


@router.get("/health")
async def health_check(
    config: Annotated[Config, Depends(get_config)],
    registry: Annotated[ToolRegistry, Depends(get_registry)],
) -> HealthStatus:
    """Health check endpoint.

    Returns the server version and how many tools are registered.
    """
    return HealthStatus(
        status="healthy" if len(registry) else "unhealthy",
        version=config.data.server.version,
        tools=len(registry),
    )
