# Transport candidate resolution for MCP servers
import logging
import tempfile
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import urlparse

import httpx
from mcp import ClientSession, StdioServerParameters
from mcp.client.sse import sse_client
from mcp.client.stdio import get_default_environment, stdio_client
from mcp.client.streamable_http import streamable_http_client
from mcp.client.websocket import websocket_client
from mcp.types import Implementation

from mcpcheck import __version__
from mcpcheck.config import get_runtime_cache_dir
from mcpcheck.diagnostics import DiagnosticsSink
from mcpcheck.errors import ConfigError
from mcpcheck.models import ServerDescriptor

logger = logging.getLogger(__name__)

# ABOUTME: Client identity sent in the MCP initialize request
MCP_CLIENT_NAME = "mcpcheck"

STDIO = "stdio"
WEBSOCKET = "websocket"
STREAMABLE_HTTP = "streamable-http"
LEGACY_SSE = "legacy-sse"

# ABOUTME: Host config 'type' values that pin HTTP servers to streamable HTTP
STREAMABLE_HINTS = ("streamable-http", "http")

UV_COMMANDS = ("uv", "uvx", "uv.exe", "uvx.exe")

# ABOUTME: Same limits the SDK applies to its own HTTP clients; phase deadlines cut in first
HTTP_TIMEOUT = httpx.Timeout(30.0, read=300.0)


class McpSession(Protocol):
    """Client-side calls the engines make on a connected server."""

    async def initialize(self) -> Any: ...

    async def send_ping(self) -> Any: ...

    async def list_tools(self) -> Any: ...

    async def list_resources(self) -> Any: ...

    async def list_prompts(self) -> Any: ...


SessionOpener = Callable[[DiagnosticsSink], AbstractAsyncContextManager[McpSession]]


@dataclass(frozen=True)
class TransportAttempt:
    """Named factory for one concrete transport.

    ABOUTME: open() yields an uninitialized session and tears everything down on exit
    ABOUTME: Equality only looks at the name
    """
    name: str
    open: SessionOpener = field(compare=False, repr=False)


def _client_session(read: Any, write: Any) -> ClientSession:
    return ClientSession(
        read,
        write,
        client_info=Implementation(name=MCP_CLIENT_NAME, version=__version__),
    )


@asynccontextmanager
async def _stdio_session(
    params: StdioServerParameters, diagnostics: DiagnosticsSink
) -> AsyncIterator[McpSession]:
    """Spawn a local server and yield its session.

    The child writes stderr to an anonymous temp file, so it never blocks on
    a full pipe. The file is read once the transport has shut the child down.
    Only its last MAX_CHUNKS * READ_CHUNK_BYTES bytes are read into the ring
    buffer. The file itself is not capped while the attempt runs. The phase
    deadlines keep that bounded in time, and the file is deleted on exit.
    """
    with tempfile.TemporaryFile() as errlog:
        try:
            async with stdio_client(params, errlog=errlog) as (read, write):
                async with _client_session(read, write) as session:
                    yield session
        finally:
            diagnostics.drain(errlog)


@asynccontextmanager
async def _streamable_http_session(
    url: str, headers: dict[str, str] | None
) -> AsyncIterator[McpSession]:
    async with httpx.AsyncClient(
        headers=headers, timeout=HTTP_TIMEOUT, follow_redirects=True
    ) as http_client:
        async with streamable_http_client(url, http_client=http_client) as (
            read, write, _session_id
        ):
            async with _client_session(read, write) as session:
                yield session


@asynccontextmanager
async def _sse_session(url: str, headers: dict[str, str] | None) -> AsyncIterator[McpSession]:
    async with sse_client(url, headers=headers) as (read, write):
        async with _client_session(read, write) as session:
            yield session


@asynccontextmanager
async def _websocket_session(url: str) -> AsyncIterator[McpSession]:
    async with websocket_client(url) as (read, write):
        async with _client_session(read, write) as session:
            yield session


def is_uv_command(command: str | None) -> bool:
    """Check whether a command runs the uv package manager."""
    if not command:
        return False
    return Path(command).name.lower() in UV_COMMANDS


def prefers_legacy_sse(url: str, transport_hint: str | None) -> bool:
    """Decide whether legacy SSE should be tried before streamable HTTP.

    ABOUTME: Many servers only expose one HTTP transport and signal it through the URL path
    ABOUTME: An explicit 'http'/'streamable-http' hint overrides the path heuristic

    Examples:
        >>> prefers_legacy_sse("https://example.com/sse", None)
        True
        >>> prefers_legacy_sse("https://example.com/sse", "http")
        False
        >>> prefers_legacy_sse("https://example.com/mcp", "sse")
        True
    """
    hint = (transport_hint or "").strip().lower()
    path = urlparse(url).path.lower()
    prefer_legacy = hint == "sse" or "sse" in path
    return prefer_legacy and hint not in STREAMABLE_HINTS


class TransportResolver:
    """Turns a ServerDescriptor into an ordered list of transport attempts.

    ABOUTME: cache_dir is the writable scratch dir injected for uv/uvx servers
    ABOUTME: cwd overrides the descriptor's working directory (project-scoped hosts)
    """

    def __init__(self, cache_dir: Path | str | None = None, cwd: str | None = None) -> None:
        self.cache_dir = Path(cache_dir) if cache_dir else get_runtime_cache_dir()
        self.cwd = cwd

    def resolve(self, descriptor: ServerDescriptor) -> list[TransportAttempt]:
        """Return the transports to try, most preferred first.

        Raises:
            ConfigError: If the descriptor has neither command nor url, or the
                url scheme is not supported
        """
        if descriptor.url:
            return self._remote_attempts(descriptor)
        if descriptor.command:
            return [self._stdio_attempt(descriptor)]
        raise ConfigError("Missing command or url")

    def _remote_attempts(self, descriptor: ServerDescriptor) -> list[TransportAttempt]:
        url = descriptor.url or ""
        parsed = urlparse(url)
        scheme = parsed.scheme.lower()

        if scheme in ("ws", "wss"):
            return [TransportAttempt(WEBSOCKET, lambda _diag: _websocket_session(url))]

        if scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigError(f"Unsupported MCP server URL: {url}")

        headers = {k: v for k, v in descriptor.headers.items() if isinstance(v, str)} or None
        streamable = TransportAttempt(
            STREAMABLE_HTTP, lambda _diag: _streamable_http_session(url, headers)
        )
        legacy = TransportAttempt(LEGACY_SSE, lambda _diag: _sse_session(url, headers))

        if prefers_legacy_sse(url, descriptor.transport_hint):
            return [legacy, streamable]
        return [streamable, legacy]

    def _stdio_attempt(self, descriptor: ServerDescriptor) -> TransportAttempt:
        params = StdioServerParameters(
            command=descriptor.command or "",
            args=list(descriptor.args),
            env=self.build_environment(descriptor),
            cwd=self.cwd or descriptor.cwd,
        )
        return TransportAttempt(STDIO, lambda diagnostics: _stdio_session(params, diagnostics))

    def build_environment(self, descriptor: ServerDescriptor) -> dict[str, str]:
        """Build the spawn environment for a local server.

        ABOUTME: SDK default environment overlaid with the descriptor's env
        ABOUTME: uv/uvx servers get UV_CACHE_DIR and XDG_CACHE_HOME unless already set
        """
        env = dict(get_default_environment())
        env.update(descriptor.env)

        if is_uv_command(descriptor.command):
            uv_cache_dir = self.cache_dir / "uv"
            xdg_cache_home = self.cache_dir / "xdg-cache"
            for directory in (uv_cache_dir, xdg_cache_home):
                try:
                    directory.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    logger.debug("Could not create cache dir %s: %s", directory, e)
            if not env.get("UV_CACHE_DIR"):
                env["UV_CACHE_DIR"] = str(uv_cache_dir)
            if not env.get("XDG_CACHE_HOME"):
                env["XDG_CACHE_HOME"] = str(xdg_cache_home)

        return env
