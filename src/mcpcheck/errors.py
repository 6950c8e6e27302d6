# Error types and error-message helpers for mcpcheck
from mcp.shared.exceptions import McpError
from mcp.types import METHOD_NOT_FOUND

# ABOUTME: Substrings servers use when they do not implement a method
METHOD_MISSING_MARKERS = (
    "method not found",
    "unknown method",
    "not implemented",
    "-32601",
)


class McpCheckError(Exception):
    """Base exception for mcpcheck."""


class ConfigError(McpCheckError):
    """Raised when a server descriptor cannot be turned into a transport."""


class PhaseTimeout(McpCheckError):
    """Raised when one phase of an attempt runs out of its time budget.

    ABOUTME: Covers connect, liveness and discovery timeouts
    """

    def __init__(self, phase: str) -> None:
        super().__init__(f"{phase} timeout")
        self.phase = phase


def _leaf_exceptions(exc: BaseException) -> list[BaseException]:
    if isinstance(exc, BaseExceptionGroup):
        leaves: list[BaseException] = []
        for inner in exc.exceptions:
            leaves.extend(_leaf_exceptions(inner))
        return leaves
    return [exc]


def describe_error(exc: BaseException) -> str:
    """Render an exception as a single human-readable message.

    ABOUTME: Unwraps exception groups raised from the SDK's task groups
    ABOUTME: Falls back to the class name when the message is empty

    Examples:
        >>> describe_error(ValueError("bad"))
        'bad'
        >>> describe_error(ExceptionGroup("g", [OSError("refused")]))
        'refused'
    """
    messages: list[str] = []
    for leaf in _leaf_exceptions(exc):
        text = str(leaf).strip() or type(leaf).__name__
        if text not in messages:
            messages.append(text)
    return "; ".join(messages)


def is_method_unsupported(exc: BaseException) -> bool:
    """Check whether an error means the server lacks the called method."""
    for leaf in _leaf_exceptions(exc):
        if isinstance(leaf, McpError) and leaf.error.code == METHOD_NOT_FOUND:
            return True
        message = (str(leaf) or "").lower()
        if any(marker in message for marker in METHOD_MISSING_MARKERS):
            return True
    return False
