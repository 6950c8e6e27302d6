# ABOUTME: Shared attempt loop for the probe and discovery engines
# ABOUTME: Tries transport candidates in order under per-phase deadlines
import logging
import time

import anyio

from mcpcheck.budget import attempt_budgets, split_timeout
from mcpcheck.diagnostics import DiagnosticsSink
from mcpcheck.errors import ConfigError, McpCheckError, PhaseTimeout, describe_error
from mcpcheck.models import Failure, Outcome, ServerDescriptor
from mcpcheck.transports import McpSession, TransportAttempt, TransportResolver

logger = logging.getLogger(__name__)

# ABOUTME: Error reported when no candidate recorded anything
UNAVAILABLE = "Unavailable"


def elapsed_ms(start: float) -> int:
    """Milliseconds elapsed since a time.monotonic() reading."""
    return int((time.monotonic() - start) * 1000)


class PhaseTimer:
    """Moves one attempt's cancel-scope deadline from phase to phase.

    ABOUTME: The scope is the attempt's only cancellation source
    ABOUTME: When it fires, `phase` names the phase that ran out of time
    """

    def __init__(self, scope: anyio.CancelScope) -> None:
        self._scope = scope
        self.phase = ""

    def start(self, phase: str, budget_ms: int) -> None:
        self.phase = phase
        self._scope.deadline = anyio.current_time() + budget_ms / 1000


class AttemptEngine:
    """Base class running connect + operate against each transport candidate.

    Subclasses implement `operate()`, which runs after `initialize` succeeded
    and returns the success outcome. Any exception it raises marks the
    candidate as failed and moves on to the next one.
    """

    def __init__(self, resolver: TransportResolver | None = None) -> None:
        self.resolver = resolver or TransportResolver()

    async def operate(
        self, session: McpSession, timer: PhaseTimer, budget_ms: int, start: float
    ) -> Outcome:
        raise NotImplementedError

    async def run(self, descriptor: ServerDescriptor, timeout_ms: float) -> Outcome:
        """Try every candidate transport until one fully succeeds.

        ABOUTME: Never raises for per-target problems; returns Failure instead
        ABOUTME: Failure messages are "<candidate>: <message>" joined by " | "
        """
        start = time.monotonic()

        try:
            attempts = self.resolver.resolve(descriptor)
        except ConfigError as e:
            return Failure(latency_ms=elapsed_ms(start), error=str(e))

        budgets = attempt_budgets(timeout_ms, len(attempts))
        errors: list[str] = []
        sinks: list[DiagnosticsSink] = []

        for attempt, budget_ms in zip(attempts, budgets):
            diagnostics = DiagnosticsSink()
            logger.debug(
                "Trying %s for '%s' (%d ms)", attempt.name, descriptor.name, budget_ms
            )
            try:
                return await self._attempt(attempt, budget_ms, diagnostics, start)
            except Exception as e:
                message = describe_error(e)
                logger.debug("%s failed for '%s': %s", attempt.name, descriptor.name, message)
                errors.append(f"{attempt.name}: {message}")
                sinks.append(diagnostics)

        error = " | ".join(errors) or UNAVAILABLE
        for sink in sinks:
            error = sink.annotate(error)
        return Failure(latency_ms=elapsed_ms(start), error=error)

    async def _attempt(
        self,
        attempt: TransportAttempt,
        budget_ms: int,
        diagnostics: DiagnosticsSink,
        start: float,
    ) -> Outcome:
        connect_ms, operate_ms = split_timeout(budget_ms, 2)
        result: Outcome | None = None

        with anyio.CancelScope() as scope:
            timer = PhaseTimer(scope)
            timer.start("connect", connect_ms)
            try:
                async with attempt.open(diagnostics) as session:
                    await session.initialize()
                    result = await self.operate(session, timer, operate_ms, start)
            except Exception as e:
                if result is not None:
                    # Outcome is already decided; teardown problems don't change it
                    logger.debug("Ignoring error while closing %s: %s", attempt.name, e)
                elif scope.cancel_called:
                    raise PhaseTimeout(timer.phase) from e
                else:
                    raise

        if result is not None:
            return result
        if scope.cancelled_caught or scope.cancel_called:
            raise PhaseTimeout(timer.phase)
        raise McpCheckError("Connection closed before completing")
