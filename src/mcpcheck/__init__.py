# mcpcheck - MCP server reachability and capability checks
# ABOUTME: Version information
__version__ = "0.1.0"

# ABOUTME: Export data models and engine entry points
from mcpcheck.batch import NOT_FOUND, check_servers, discover_servers, run_batch
from mcpcheck.budget import attempt_budgets, split_timeout
from mcpcheck.config import get_config_path, load_servers
from mcpcheck.diagnostics import DiagnosticsSink
from mcpcheck.discovery import DiscoveryEngine, discover_server
from mcpcheck.errors import ConfigError, McpCheckError, PhaseTimeout
from mcpcheck.models import (
    Capabilities,
    CapabilitiesOk,
    Failure,
    ProbeOk,
    ServerDescriptor,
    SupportedMethods,
    ToolInfo,
    results_to_dict,
)
from mcpcheck.probe import ProbeEngine, probe_server
from mcpcheck.transports import TransportAttempt, TransportResolver

__all__ = [
    "__version__",
    "NOT_FOUND",
    "Capabilities",
    "CapabilitiesOk",
    "ConfigError",
    "DiagnosticsSink",
    "DiscoveryEngine",
    "Failure",
    "McpCheckError",
    "PhaseTimeout",
    "ProbeEngine",
    "ProbeOk",
    "ServerDescriptor",
    "SupportedMethods",
    "ToolInfo",
    "TransportAttempt",
    "TransportResolver",
    "attempt_budgets",
    "check_servers",
    "discover_server",
    "discover_servers",
    "get_config_path",
    "load_servers",
    "probe_server",
    "results_to_dict",
    "run_batch",
    "split_timeout",
]
