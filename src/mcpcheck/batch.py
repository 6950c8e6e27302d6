# ABOUTME: Bounded-concurrency batch runner over many MCP server ids
# ABOUTME: One shared FIFO queue, N workers, one result per requested id
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import cast

import anyio

from mcpcheck.discovery import DiscoveryEngine
from mcpcheck.engine import elapsed_ms
from mcpcheck.errors import describe_error
from mcpcheck.models import CapabilityOutcome, Failure, Outcome, ProbeOutcome, ServerDescriptor
from mcpcheck.probe import ProbeEngine
from mcpcheck.transports import TransportResolver

logger = logging.getLogger(__name__)

# ABOUTME: Error recorded for ids missing from the descriptor map
NOT_FOUND = "MCP not found"

Runner = Callable[[ServerDescriptor, float], Awaitable[Outcome]]


async def run_batch(
    descriptors: Mapping[str, ServerDescriptor],
    ids: Iterable[str],
    timeout_ms: float,
    concurrency: int,
    runner: Runner | None = None,
) -> dict[str, Outcome]:
    """Run `runner` over every requested id with at most `concurrency` in flight.

    ABOUTME: timeout_ms applies to each target, not to the batch as a whole
    ABOUTME: Unknown ids get a zero-latency "MCP not found" failure without a worker call

    Args:
        descriptors: Server id to descriptor
        ids: Ids to act on; duplicates collapse to one entry
        timeout_ms: Per-target time budget
        concurrency: Maximum number of targets in flight (at least 1)
        runner: Engine entry point; defaults to ProbeEngine().probe

    Returns:
        Mapping with exactly one outcome per requested id, in request order
    """
    if runner is None:
        runner = ProbeEngine().probe
    requested = list(dict.fromkeys(ids))
    # deque.popleft is atomic, so workers can share the queue without a lock
    queue: deque[str] = deque(requested)
    results: dict[str, Outcome] = {}
    worker_count = max(1, int(concurrency))

    async def worker() -> None:
        while True:
            try:
                server_id = queue.popleft()
            except IndexError:
                return

            descriptor = descriptors.get(server_id)
            if descriptor is None:
                results[server_id] = Failure(latency_ms=0, error=NOT_FOUND)
                continue

            start = time.monotonic()
            try:
                outcome = await runner(descriptor, timeout_ms)
            except Exception as e:
                logger.warning("Unexpected error checking '%s': %s", server_id, e)
                outcome = Failure(latency_ms=elapsed_ms(start), error=describe_error(e))
            results[server_id] = outcome

    logger.info(
        "Running batch of %d server(s), concurrency %d, timeout %d ms",
        len(requested), worker_count, timeout_ms,
    )
    async with anyio.create_task_group() as tg:
        for _ in range(worker_count):
            tg.start_soon(worker)

    ok_count = sum(1 for outcome in results.values() if outcome.ok)
    logger.info("Batch finished: %d/%d ok", ok_count, len(requested))
    return {server_id: results[server_id] for server_id in requested}


async def check_servers(
    descriptors: Mapping[str, ServerDescriptor],
    ids: Iterable[str],
    timeout_ms: float,
    concurrency: int,
    resolver: TransportResolver | None = None,
) -> dict[str, ProbeOutcome]:
    """Reachability-probe many servers."""
    engine = ProbeEngine(resolver)
    results = await run_batch(descriptors, ids, timeout_ms, concurrency, engine.probe)
    return cast(dict[str, ProbeOutcome], results)


async def discover_servers(
    descriptors: Mapping[str, ServerDescriptor],
    ids: Iterable[str],
    timeout_ms: float,
    concurrency: int,
    resolver: TransportResolver | None = None,
) -> dict[str, CapabilityOutcome]:
    """Enumerate capabilities of many servers."""
    engine = DiscoveryEngine(resolver)
    results = await run_batch(descriptors, ids, timeout_ms, concurrency, engine.discover)
    return cast(dict[str, CapabilityOutcome], results)
