"""Shared fixtures for Timeserver tests."""

from datetime import UTC, datetime
from pathlib import Path

import pytest
import yaml

from timeserver.config import Config
from timeserver.rpc import RpcDispatcher, ServerInfo
from timeserver.tools import TimeToolbox, ToolExecutor, build_time_registry

FIXED_NOW = datetime(2025, 3, 23, 4, 30, 0, tzinfo=UTC)

BASE_CONFIG = {
    "server": {
        "name": "mcp-server-http-time",
        "version": "0.3.0",
        "instructions": "Time tools.",
    },
    "api": {"host": "127.0.0.1", "port": 8787, "debug": False},
    "rate_limit": {"requests_per_window": 60, "window_ms": 60000},
    "time": {"default_timezone": "UTC"},
}


def write_config(workspace: Path, data: dict) -> Path:
    """Write a config.yaml into the given workspace directory."""
    config_file = workspace / "config.yaml"
    config_file.write_text(yaml.safe_dump(data))
    return config_file


@pytest.fixture
def config(tmp_path):
    """A Config singleton loaded from a temporary workspace."""
    write_config(tmp_path, BASE_CONFIG)
    Config.reset_instance()
    yield Config(str(tmp_path))
    Config.reset_instance()


@pytest.fixture
def toolbox():
    """Time tools pinned to 2025-03-23 04:30:00 UTC."""
    return TimeToolbox(default_timezone="UTC", now=lambda: FIXED_NOW)


@pytest.fixture
def registry(toolbox):
    return build_time_registry(toolbox)


@pytest.fixture
def dispatcher(registry):
    return RpcDispatcher(
        registry=registry,
        executor=ToolExecutor(),
        server_info=ServerInfo(name="mcp-server-http-time", version="0.3.0"),
        supported_versions=["2025-06-18", "2025-03-26", "2024-11-05"],
        instructions="Time tools.",
    )
