# Core data models for mcpcheck
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ServerDescriptor:
    """Immutable description of one MCP server entry.

    ABOUTME: Either a local process (command/args/env/cwd) or a remote url
    ABOUTME: transport_hint mirrors the host config 'type' field and is advisory only
    """
    name: str
    command: str | None = None
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    cwd: str | None = None
    url: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    transport_hint: str | None = None

    @property
    def is_remote(self) -> bool:
        return bool(self.url)

    @property
    def is_local(self) -> bool:
        return not self.url and bool(self.command)


@dataclass(frozen=True)
class ToolInfo:
    """Normalized tool entry advertised by a server."""
    name: str
    description: str | None = None
    input_schema: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name}
        if self.description is not None:
            result["description"] = self.description
        if self.input_schema is not None:
            result["inputSchema"] = self.input_schema
        return result


@dataclass(frozen=True)
class Capabilities:
    """Tools, resources and prompts advertised by a server.

    ABOUTME: Resources and prompts are kept as plain JSON-ready dicts
    """
    tools: list[ToolInfo] = field(default_factory=list)
    resources: list[Any] = field(default_factory=list)
    prompts: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tools": [tool.to_dict() for tool in self.tools],
            "resources": list(self.resources),
            "prompts": list(self.prompts),
        }


@dataclass(frozen=True)
class SupportedMethods:
    """Which of the three listing methods the server implements."""
    tools: bool = True
    resources: bool = True
    prompts: bool = True

    def to_dict(self) -> dict[str, bool]:
        return {
            "tools": self.tools,
            "resources": self.resources,
            "prompts": self.prompts,
        }


@dataclass(frozen=True)
class ProbeOk:
    """Server connected and answered the liveness check."""
    latency_ms: int
    ok: bool = field(default=True, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, "latencyMs": self.latency_ms}


@dataclass(frozen=True)
class CapabilitiesOk:
    """Server connected and its capabilities were enumerated."""
    latency_ms: int
    supported: SupportedMethods
    capabilities: Capabilities
    ok: bool = field(default=True, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": True,
            "latencyMs": self.latency_ms,
            "supported": self.supported.to_dict(),
            "capabilities": self.capabilities.to_dict(),
        }


@dataclass(frozen=True)
class Failure:
    """Every transport candidate failed; error aggregates their messages."""
    latency_ms: int
    error: str
    ok: bool = field(default=False, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"ok": False, "latencyMs": self.latency_ms, "error": self.error}


ProbeOutcome = ProbeOk | Failure
CapabilityOutcome = CapabilitiesOk | Failure
Outcome = ProbeOk | CapabilitiesOk | Failure


def results_to_dict(results: dict[str, Outcome]) -> dict[str, dict[str, Any]]:
    """Convert a batch result mapping into JSON-ready dicts."""
    return {server_id: outcome.to_dict() for server_id, outcome in results.items()}
