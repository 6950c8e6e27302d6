# Reachability probe: connect + ping against one MCP server
import logging

from mcpcheck.engine import AttemptEngine, PhaseTimer, elapsed_ms
from mcpcheck.errors import is_method_unsupported
from mcpcheck.models import ProbeOk, ProbeOutcome, ServerDescriptor
from mcpcheck.transports import McpSession, TransportResolver

logger = logging.getLogger(__name__)


class ProbeEngine(AttemptEngine):
    """Checks that a server connects and answers a liveness call.

    ABOUTME: Liveness is a protocol ping
    ABOUTME: Servers without ping are checked with tools/list instead
    """

    async def operate(
        self, session: McpSession, timer: PhaseTimer, budget_ms: int, start: float
    ) -> ProbeOk:
        timer.start("ping", budget_ms)
        try:
            await session.send_ping()
        except Exception as e:
            if not is_method_unsupported(e):
                raise
            logger.debug("Ping not supported, falling back to tools/list: %s", e)
            timer.start("tools/list", budget_ms)
            await session.list_tools()
        return ProbeOk(latency_ms=elapsed_ms(start))

    async def probe(self, descriptor: ServerDescriptor, timeout_ms: float) -> ProbeOutcome:
        """Probe one server within timeout_ms (per target, all candidates included)."""
        return await self.run(descriptor, timeout_ms)


async def probe_server(
    descriptor: ServerDescriptor,
    timeout_ms: float,
    resolver: TransportResolver | None = None,
) -> ProbeOutcome:
    """Probe a single server with a fresh engine."""
    return await ProbeEngine(resolver).probe(descriptor, timeout_ms)
