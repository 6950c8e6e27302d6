# Configuration loading and parsing for mcpcheck
import json
import math
from pathlib import Path
from typing import Any

import tomli

from mcpcheck.models import ServerDescriptor
from mcpcheck.utils.env import expand_env_vars

# ABOUTME: Default config directory in user's home
CONFIG_DIR = Path.home() / ".mcpcheck"

# ABOUTME: Default server list checked when --config is not given
CONFIG_FILE = CONFIG_DIR / "servers.json"

# ABOUTME: Scratch space for package-manager caches of spawned servers
RUNTIME_CACHE_DIR = CONFIG_DIR / "runtime-cache"

# ABOUTME: Accepted per-target timeouts (ms) and their defaults
CHECK_TIMEOUT_RANGE = (500, 30_000)
CHECK_DEFAULT_TIMEOUT_MS = 6_000
CAPABILITIES_TIMEOUT_RANGE = (500, 60_000)
CAPABILITIES_DEFAULT_TIMEOUT_MS = 10_000

DEFAULT_CONCURRENCY = 2

# ABOUTME: Top-level keys holding the server table, in lookup order
SERVER_TABLE_KEYS = ("mcpServers", "servers", "mcp_servers")


def get_config_path() -> Path:
    """Return the path to the default server list.

    ABOUTME: Returns ~/.mcpcheck/servers.json
    ABOUTME: File may not exist; load_servers() reports that as FileNotFoundError
    """
    return CONFIG_FILE


def get_runtime_cache_dir() -> Path:
    """Return the scratch directory handed to spawned uv/uvx servers."""
    return RUNTIME_CACHE_DIR


def clamp_timeout_ms(
    value: float | None,
    bounds: tuple[int, int],
    default: int,
) -> int:
    """Clamp a caller-supplied timeout into an accepted range.

    ABOUTME: None, NaN and infinite values fall back to default

    Examples:
        >>> clamp_timeout_ms(100, CHECK_TIMEOUT_RANGE, CHECK_DEFAULT_TIMEOUT_MS)
        500
        >>> clamp_timeout_ms(None, CHECK_TIMEOUT_RANGE, CHECK_DEFAULT_TIMEOUT_MS)
        6000
    """
    if value is None or not math.isfinite(value):
        return default
    low, high = bounds
    return max(low, min(high, math.floor(value)))


def parse_server_entry(name: str, data: dict[str, Any]) -> ServerDescriptor:
    """Convert one host config entry to a ServerDescriptor.

    ABOUTME: Expands ${VAR} references in command, args, env, url and headers
    ABOUTME: Entries without command or url are kept; probing reports them

    Raises:
        ValueError: If the entry is not an object or has badly typed fields
    """
    if not isinstance(data, dict):
        raise ValueError(f"Server '{name}' must be an object, got {type(data).__name__}")

    args = data.get("args", [])
    env = data.get("env", {})
    headers = data.get("headers", {})
    if not isinstance(args, list):
        raise ValueError(f"Server '{name}' field 'args' must be a list")
    if not isinstance(env, dict):
        raise ValueError(f"Server '{name}' field 'env' must be an object")
    if not isinstance(headers, dict):
        raise ValueError(f"Server '{name}' field 'headers' must be an object")

    command = data.get("command")
    url = data.get("url")
    hint = data.get("type")
    cwd = data.get("cwd")

    return ServerDescriptor(
        name=name,
        command=expand_env_vars(str(command)) if command else None,
        args=[expand_env_vars(str(arg)) for arg in args],
        env={str(key): expand_env_vars(str(value)) for key, value in env.items()},
        cwd=str(cwd) if cwd else None,
        url=expand_env_vars(str(url)) if url else None,
        headers={str(key): expand_env_vars(str(value)) for key, value in headers.items()},
        transport_hint=str(hint) if hint else None,
    )


def _read_document(path: Path) -> dict[str, Any]:
    if path.suffix.lower() == ".toml":
        try:
            with open(path, "rb") as f:
                return tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {path}: {e}") from e

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object at the top of {path}")
    return data


def load_servers(path: Path, include_disabled: bool = False) -> dict[str, ServerDescriptor]:
    """Load MCP server descriptors from a host config file.

    ABOUTME: Accepts mcpServers/servers JSON files and Codex-style mcp_servers TOML
    ABOUTME: Skips entries marked disabled unless include_disabled is set

    Args:
        path: Path to a .json or .toml config file
        include_disabled: Keep entries with "disabled": true

    Returns:
        Mapping of server id to descriptor, in file order

    Raises:
        FileNotFoundError: If config file doesn't exist
        OSError: If the path cannot be read (a directory, no permission)
        ValueError: If the file cannot be parsed or an entry is malformed
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    document = _read_document(path)

    table: Any = None
    for key in SERVER_TABLE_KEYS:
        if key in document:
            table = document[key]
            break

    if table is None:
        return {}
    if not isinstance(table, dict):
        raise ValueError(f"Server table in {path} must be an object")

    servers: dict[str, ServerDescriptor] = {}
    for name, entry in table.items():
        if isinstance(entry, dict) and entry.get("disabled") and not include_disabled:
            continue
        servers[name] = parse_server_entry(name, entry)
    return servers
