# ABOUTME: In-memory fakes for MCP sessions and transport candidates
# ABOUTME: Lets engine tests run without spawning servers or opening sockets
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import anyio
import pytest

from mcpcheck.models import ServerDescriptor
from mcpcheck.transports import TransportAttempt


@dataclass
class Hang:
    """Behavior that sleeps longer than any test budget."""
    seconds: float = 30.0


class FakeSession:
    """Session double; each method returns, raises, or hangs as configured."""

    def __init__(self, **behaviors: Any) -> None:
        self.behaviors = {
            "initialize": {},
            "ping": {},
            "tools": {"tools": []},
            "resources": {"resources": []},
            "prompts": {"prompts": []},
        }
        self.behaviors.update(behaviors)
        self.calls: list[str] = []

    async def _run(self, method: str) -> Any:
        self.calls.append(method)
        behavior = self.behaviors[method]
        if isinstance(behavior, BaseException):
            raise behavior
        if isinstance(behavior, Hang):
            await anyio.sleep(behavior.seconds)
        return behavior

    async def initialize(self) -> Any:
        return await self._run("initialize")

    async def send_ping(self) -> Any:
        return await self._run("ping")

    async def list_tools(self) -> Any:
        return await self._run("tools")

    async def list_resources(self) -> Any:
        return await self._run("resources")

    async def list_prompts(self) -> Any:
        return await self._run("prompts")


@dataclass
class Tracker:
    """Counts opened and closed transports across attempts."""
    opened: int = 0
    closed: int = 0
    names: list[str] = field(default_factory=list)


def fake_attempt(
    name: str,
    session: FakeSession | None = None,
    *,
    open_error: BaseException | None = None,
    stderr: bytes = b"",
    tracker: Tracker | None = None,
) -> TransportAttempt:
    """Build a TransportAttempt backed by a FakeSession."""
    tracker = tracker if tracker is not None else Tracker()

    @asynccontextmanager
    async def opener(diagnostics):
        tracker.opened += 1
        tracker.names.append(name)
        try:
            if stderr:
                diagnostics.write(stderr)
            if open_error is not None:
                raise open_error
            yield session if session is not None else FakeSession()
        finally:
            tracker.closed += 1

    return TransportAttempt(name, opener)


class FakeResolver:
    """Resolver stub returning a fixed list of attempts."""

    def __init__(self, *attempts: TransportAttempt) -> None:
        self.attempts = list(attempts)
        self.resolved: list[ServerDescriptor] = []

    def resolve(self, descriptor: ServerDescriptor) -> list[TransportAttempt]:
        self.resolved.append(descriptor)
        return list(self.attempts)


@pytest.fixture
def remote_descriptor() -> ServerDescriptor:
    return ServerDescriptor(name="remote", url="https://example.com/mcp")


@pytest.fixture
def local_descriptor() -> ServerDescriptor:
    return ServerDescriptor(name="local", command="node", args=["server.js"])
