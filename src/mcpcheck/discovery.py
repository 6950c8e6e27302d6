# Capability discovery: enumerate tools, resources and prompts of one MCP server
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from mcpcheck.budget import split_timeout
from mcpcheck.engine import AttemptEngine, PhaseTimer, elapsed_ms
from mcpcheck.errors import is_method_unsupported
from mcpcheck.models import (
    Capabilities,
    CapabilitiesOk,
    CapabilityOutcome,
    ServerDescriptor,
    SupportedMethods,
    ToolInfo,
)
from mcpcheck.transports import McpSession, TransportResolver

logger = logging.getLogger(__name__)


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def to_plain(item: Any) -> Any:
    """Dump SDK (pydantic) models to JSON-ready values, pass anything else through."""
    dump = getattr(item, "model_dump", None)
    if callable(dump):
        return dump(mode="json", exclude_none=True)
    return item


def normalize_tools(tools: Any) -> list[ToolInfo]:
    """Normalize advertised tools, dropping entries without a name.

    Examples:
        >>> normalize_tools([{"name": "echo", "description": "Echo text"}, {"name": ""}])
        [ToolInfo(name='echo', description='Echo text', input_schema=None)]
    """
    if not isinstance(tools, list):
        return []
    normalized: list[ToolInfo] = []
    for tool in tools:
        name = _field(tool, "name")
        if not name:
            continue
        description = _field(tool, "description")
        schema = _field(tool, "inputSchema")
        normalized.append(ToolInfo(
            name=str(name),
            description=description if isinstance(description, str) else None,
            input_schema=to_plain(schema) if schema is not None else None,
        ))
    return normalized


def _items(response: Any, name: str) -> list[Any]:
    items = _field(response, name)
    return list(items) if isinstance(items, list) else []


class DiscoveryEngine(AttemptEngine):
    """Lists tools, resources and prompts of a server.

    ABOUTME: The discover budget is split evenly over the three list calls
    ABOUTME: A list method the server lacks is marked unsupported, not failed
    """

    async def operate(
        self, session: McpSession, timer: PhaseTimer, budget_ms: int, start: float
    ) -> CapabilitiesOk:
        tools_ms, resources_ms, prompts_ms = split_timeout(budget_ms, 3)

        tools = await self._list(session.list_tools, timer, "tools/list", tools_ms)
        resources = await self._list(session.list_resources, timer, "resources/list", resources_ms)
        prompts = await self._list(session.list_prompts, timer, "prompts/list", prompts_ms)

        return CapabilitiesOk(
            latency_ms=elapsed_ms(start),
            supported=SupportedMethods(
                tools=tools is not None,
                resources=resources is not None,
                prompts=prompts is not None,
            ),
            capabilities=Capabilities(
                tools=normalize_tools(_items(tools, "tools")),
                resources=[to_plain(r) for r in _items(resources, "resources")],
                prompts=[to_plain(p) for p in _items(prompts, "prompts")],
            ),
        )

    async def _list(
        self,
        call: Callable[[], Awaitable[Any]],
        timer: PhaseTimer,
        phase: str,
        budget_ms: int,
    ) -> Any | None:
        # None means the server does not implement the method
        timer.start(phase, budget_ms)
        try:
            return await call()
        except Exception as e:
            if is_method_unsupported(e):
                logger.debug("%s not supported: %s", phase, e)
                return None
            raise

    async def discover(
        self, descriptor: ServerDescriptor, timeout_ms: float
    ) -> CapabilityOutcome:
        """Enumerate capabilities of one server within timeout_ms."""
        return await self.run(descriptor, timeout_ms)


async def discover_server(
    descriptor: ServerDescriptor,
    timeout_ms: float,
    resolver: TransportResolver | None = None,
) -> CapabilityOutcome:
    """Discover a single server's capabilities with a fresh engine."""
    return await DiscoveryEngine(resolver).discover(descriptor, timeout_ms)
