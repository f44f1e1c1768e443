"""Test the server entry point."""

import os
from unittest.mock import patch

import pytest

from timeserver import api_server
from timeserver.config import Config

from conftest import BASE_CONFIG, write_config


@pytest.fixture(autouse=True)
def reset_singleton():
    Config.reset_instance()
    yield
    Config.reset_instance()


def test_main_runs_uvicorn_with_configured_address(tmp_path, monkeypatch):
    """Test that main starts uvicorn from the workspace configuration."""
    write_config(tmp_path, BASE_CONFIG)
    monkeypatch.setenv("WORKSPACE_DIR", str(tmp_path / "elsewhere"))

    with patch.object(api_server.uvicorn, "run") as run:
        api_server.main(str(tmp_path))

    run.assert_called_once()
    args, kwargs = run.call_args
    assert args == ("timeserver.api:create_api_app",)
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 8787
    assert kwargs["factory"] is True
    assert kwargs["reload"] is False


def test_main_exports_workspace_for_the_factory(tmp_path, monkeypatch):
    """Test that the resolved workspace is handed to the app factory through WORKSPACE_DIR."""
    write_config(tmp_path, BASE_CONFIG)
    monkeypatch.setenv("WORKSPACE_DIR", str(tmp_path / "elsewhere"))

    with patch.object(api_server.uvicorn, "run"):
        api_server.main(str(tmp_path))

    assert os.environ["WORKSPACE_DIR"] == os.path.abspath(tmp_path)
