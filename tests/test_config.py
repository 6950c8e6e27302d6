# Tests for configuration loading
import json

import pytest

from mcpcheck.config import (
    CAPABILITIES_TIMEOUT_RANGE,
    CHECK_DEFAULT_TIMEOUT_MS,
    CHECK_TIMEOUT_RANGE,
    CONFIG_FILE,
    RUNTIME_CACHE_DIR,
    clamp_timeout_ms,
    get_config_path,
    get_runtime_cache_dir,
    load_servers,
    parse_server_entry,
)


def test_get_config_path():
    """Test getting config file path."""
    path = get_config_path()
    assert path == CONFIG_FILE
    assert ".mcpcheck" in str(path)


def test_runtime_cache_dir_under_config_dir():
    """Test that the uv scratch dir lives under ~/.mcpcheck."""
    assert get_runtime_cache_dir() == RUNTIME_CACHE_DIR
    assert get_runtime_cache_dir().name == "runtime-cache"


def test_load_mcp_servers_json(tmp_path):
    """Test loading a Claude/Cursor style mcpServers file."""
    config_file = tmp_path / "mcp.json"
    config_file.write_text(json.dumps({
        "mcpServers": {
            "filesystem": {
                "command": "npx",
                "args": ["-y", "@modelcontextprotocol/server-filesystem", "/tmp"],
                "env": {"DEBUG": "1"},
                "cwd": "/work"
            },
            "remote": {
                "type": "sse",
                "url": "https://example.com/sse",
                "headers": {"Authorization": "Bearer abc"}
            }
        }
    }))

    servers = load_servers(config_file)

    assert list(servers) == ["filesystem", "remote"]
    fs = servers["filesystem"]
    assert fs.name == "filesystem"
    assert fs.command == "npx"
    assert fs.args == ["-y", "@modelcontextprotocol/server-filesystem", "/tmp"]
    assert fs.env == {"DEBUG": "1"}
    assert fs.cwd == "/work"
    assert fs.is_local and not fs.is_remote

    remote = servers["remote"]
    assert remote.url == "https://example.com/sse"
    assert remote.headers == {"Authorization": "Bearer abc"}
    assert remote.transport_hint == "sse"
    assert remote.is_remote


def test_load_vscode_servers_json(tmp_path):
    """Test loading a VS Code style servers file."""
    config_file = tmp_path / "mcp.json"
    config_file.write_text(json.dumps({
        "servers": {"docs": {"type": "http", "url": "https://docs.example.com/mcp"}}
    }))

    servers = load_servers(config_file)
    assert servers["docs"].transport_hint == "http"


def test_load_codex_toml(tmp_path):
    """Test loading a Codex CLI config.toml."""
    config_file = tmp_path / "config.toml"
    config_file.write_text(
        'model = "o3"\n'
        "\n"
        "[mcp_servers.fetch]\n"
        'command = "uvx"\n'
        'args = ["mcp-server-fetch"]\n'
        "\n"
        "[mcp_servers.fetch.env]\n"
        'LOG_LEVEL = "debug"\n'
    )

    servers = load_servers(config_file)
    assert servers["fetch"].command == "uvx"
    assert servers["fetch"].args == ["mcp-server-fetch"]
    assert servers["fetch"].env == {"LOG_LEVEL": "debug"}


def test_env_vars_expanded(tmp_path, monkeypatch):
    """Test ${VAR} expansion in url and headers."""
    monkeypatch.setenv("MCP_TOKEN", "t0k3n")
    config_file = tmp_path / "mcp.json"
    config_file.write_text(json.dumps({
        "mcpServers": {
            "remote": {
                "url": "https://example.com/mcp",
                "headers": {"Authorization": "Bearer ${MCP_TOKEN}"}
            }
        }
    }))

    servers = load_servers(config_file)
    assert servers["remote"].headers["Authorization"] == "Bearer t0k3n"


def test_disabled_entries_skipped(tmp_path):
    """Test that disabled servers are skipped unless requested."""
    config_file = tmp_path / "mcp.json"
    config_file.write_text(json.dumps({
        "mcpServers": {
            "on": {"command": "node"},
            "off": {"command": "node", "disabled": True}
        }
    }))

    assert list(load_servers(config_file)) == ["on"]
    assert list(load_servers(config_file, include_disabled=True)) == ["on", "off"]


def test_entry_without_command_or_url_is_kept(tmp_path):
    """Test that incomplete entries are loaded for the engine to report."""
    config_file = tmp_path / "mcp.json"
    config_file.write_text(json.dumps({"mcpServers": {"empty": {}}}))

    servers = load_servers(config_file)
    assert servers["empty"].command is None
    assert servers["empty"].url is None


def test_no_server_table(tmp_path):
    """Test a config without any server table."""
    config_file = tmp_path / "settings.json"
    config_file.write_text(json.dumps({"theme": "dark"}))
    assert load_servers(config_file) == {}


def test_file_not_found(tmp_path):
    """Test loading a missing file."""
    with pytest.raises(FileNotFoundError, match="Config file not found"):
        load_servers(tmp_path / "missing.json")


def test_invalid_json(tmp_path):
    """Test that invalid JSON raises ValueError."""
    config_file = tmp_path / "mcp.json"
    config_file.write_text('{"mcpServers": {')
    with pytest.raises(ValueError, match="Invalid JSON"):
        load_servers(config_file)


def test_invalid_toml(tmp_path):
    """Test that invalid TOML raises ValueError."""
    config_file = tmp_path / "config.toml"
    config_file.write_text("[mcp_servers\n")
    with pytest.raises(ValueError, match="Invalid TOML"):
        load_servers(config_file)


def test_bad_entry_types():
    """Test that malformed entries raise ValueError."""
    with pytest.raises(ValueError, match="must be an object"):
        parse_server_entry("x", "npx")
    with pytest.raises(ValueError, match="'args' must be a list"):
        parse_server_entry("x", {"command": "npx", "args": "-y"})
    with pytest.raises(ValueError, match="'env' must be an object"):
        parse_server_entry("x", {"command": "npx", "env": ["A=1"]})


class TestClampTimeout:
    """Tests for clamp_timeout_ms."""

    def test_within_range(self):
        assert clamp_timeout_ms(2500.7, CHECK_TIMEOUT_RANGE, CHECK_DEFAULT_TIMEOUT_MS) == 2500

    def test_clamped_low_and_high(self):
        assert clamp_timeout_ms(10, CHECK_TIMEOUT_RANGE, CHECK_DEFAULT_TIMEOUT_MS) == 500
        assert clamp_timeout_ms(99_000, CHECK_TIMEOUT_RANGE, CHECK_DEFAULT_TIMEOUT_MS) == 30_000
        assert clamp_timeout_ms(99_000, CAPABILITIES_TIMEOUT_RANGE, 10_000) == 60_000

    def test_default_for_missing_or_nan(self):
        assert clamp_timeout_ms(None, CHECK_TIMEOUT_RANGE, CHECK_DEFAULT_TIMEOUT_MS) == 6_000
        assert clamp_timeout_ms(float("nan"), CHECK_TIMEOUT_RANGE, 6_000) == 6_000
