"""HTTP layer for Timeserver."""

from .main import create_api_app

__all__ = ["create_api_app"]
