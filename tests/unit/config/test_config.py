"""Test configuration loading."""

import pytest
from pydantic import ValidationError

from timeserver.config import Config, ConfigData
from timeserver.ratelimit import DEFAULT_CLIENT_IP_HEADERS
from timeserver.security import DEFAULT_ALLOWED_HOSTS, SUPPORTED_PROTOCOL_VERSIONS

from conftest import BASE_CONFIG, write_config


@pytest.fixture(autouse=True)
def reset_singleton():
    Config.reset_instance()
    yield
    Config.reset_instance()


def test_loads_workspace_config(tmp_path):
    """Test that values are read from config.yaml."""
    write_config(tmp_path, BASE_CONFIG)

    config = Config(str(tmp_path))

    assert config.data.server.name == "mcp-server-http-time"
    assert config.data.server.instructions == "Time tools."
    assert config.data.api.port == 8787
    assert config.workspace_path == str(tmp_path)


def test_defaults_for_optional_sections(tmp_path):
    """Test the defaults applied when optional sections are omitted."""
    write_config(tmp_path, {"server": BASE_CONFIG["server"], "api": BASE_CONFIG["api"]})

    data = Config(str(tmp_path)).data

    assert data.rate_limit.requests_per_window == 60
    assert data.rate_limit.window_ms == 60_000
    assert data.protocol.supported_versions == list(SUPPORTED_PROTOCOL_VERSIONS)
    assert data.security.allowed_hosts == list(DEFAULT_ALLOWED_HOSTS)
    assert data.security.client_ip_headers == list(DEFAULT_CLIENT_IP_HEADERS)
    assert data.time.default_timezone == "UTC"
    assert data.time.default_format == "YYYY-MM-DD HH:mm:ss"
    assert data.api.cors_origins == ["*"]
    assert data.api.debug is False


def test_env_values_are_resolved(tmp_path, monkeypatch):
    """Test that 'env.' values are read from the environment."""
    monkeypatch.setenv("TIMESERVER_TEST_PORT", "9999")
    monkeypatch.setenv("TIMESERVER_TEST_ORIGIN", "example.org")
    data = {
        **BASE_CONFIG,
        "api": {"host": "127.0.0.1", "port": "env.TIMESERVER_TEST_PORT"},
        "security": {"allowed_hosts": ["env.TIMESERVER_TEST_ORIGIN"]},
    }
    write_config(tmp_path, data)

    config = Config(str(tmp_path))

    assert config.data.api.port == 9999
    assert config.data.security.allowed_hosts == ["example.org"]


def test_missing_env_value_fails_validation(tmp_path, monkeypatch):
    """Test that an unset required variable surfaces as a validation error."""
    monkeypatch.delenv("TIMESERVER_TEST_UNSET", raising=False)
    write_config(tmp_path, {**BASE_CONFIG, "api": {"host": "127.0.0.1", "port": "env.TIMESERVER_TEST_UNSET"}})

    with pytest.raises(ValidationError):
        Config(str(tmp_path))


def test_workspace_from_environment(tmp_path, monkeypatch):
    """Test WORKSPACE_DIR resolution."""
    write_config(tmp_path, BASE_CONFIG)
    monkeypatch.setenv("WORKSPACE_DIR", str(tmp_path))

    assert Config().workspace_path == str(tmp_path)


def test_missing_config_file(tmp_path):
    """Test that a workspace without config.yaml is an error."""
    with pytest.raises(FileNotFoundError):
        Config(str(tmp_path))


def test_singleton(tmp_path):
    """Test that later constructions return the first instance."""
    write_config(tmp_path, BASE_CONFIG)

    first = Config(str(tmp_path))
    second = Config("/somewhere/else")

    assert first is second
    assert second.workspace_path == str(tmp_path)


def test_reload_picks_up_changes(tmp_path):
    """Test reloading from disk."""
    write_config(tmp_path, BASE_CONFIG)
    config = Config(str(tmp_path))

    write_config(tmp_path, {**BASE_CONFIG, "rate_limit": {"requests_per_window": 5, "window_ms": 1000}})
    config.reload()

    assert config.data.rate_limit.requests_per_window == 5


@pytest.mark.parametrize(
    "section",
    [
        {"rate_limit": {"requests_per_window": 0}},
        {"rate_limit": {"window_ms": -1}},
        {"protocol": {"supported_versions": []}},
    ],
)
def test_invalid_values_are_rejected(section):
    """Test validation of the configuration model."""
    with pytest.raises(ValidationError):
        ConfigData.model_validate({**BASE_CONFIG, **section})
