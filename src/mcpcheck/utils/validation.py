# ABOUTME: Static pre-flight checks for MCP server descriptors
# ABOUTME: Nothing here spawns processes or opens connections
import shutil
from dataclasses import dataclass
from urllib.parse import urlparse

from mcpcheck.models import ServerDescriptor
from mcpcheck.utils.env import find_unset_env_refs

# ABOUTME: URL schemes the transport resolver can handle
SUPPORTED_URL_SCHEMES = ("http", "https", "ws", "wss")


@dataclass(frozen=True)
class ValidationError:
    """Represents a validation error or warning.

    ABOUTME: Severity level distinguishes between blocking errors and warnings
    """
    server_name: str
    message: str
    severity: str  # 'error' or 'warning'


def validate_command_exists(command: str) -> ValidationError | None:
    """Validate that a command exists on the system.

    ABOUTME: Uses shutil.which() for cross-platform command lookup

    Returns:
        ValidationError if command not found, None otherwise
    """
    if shutil.which(command) is None:
        return ValidationError(
            server_name="",
            message=f"Command not found: {command}",
            severity="error"
        )
    return None


def validate_url(url: str) -> ValidationError | None:
    """Validate that a URL has a supported scheme and a host.

    Returns:
        ValidationError if URL invalid, None otherwise
    """
    try:
        parsed = urlparse(url)
    except ValueError as e:
        return ValidationError(
            server_name="",
            message=f"Invalid URL format '{url}': {e}",
            severity="error"
        )
    if parsed.scheme.lower() not in SUPPORTED_URL_SCHEMES:
        return ValidationError(
            server_name="",
            message=f"URL must use http, https, ws or wss scheme: {url}",
            severity="error"
        )
    if not parsed.netloc:
        return ValidationError(
            server_name="",
            message=f"URL missing host/domain: {url}",
            severity="error"
        )
    return None


def _unset_ref_warnings(server_name: str, value: str, where: str) -> list[ValidationError]:
    return [
        ValidationError(
            server_name=server_name,
            message=f"Environment variable '${var_name}' not set (referenced in {where})",
            severity="warning"
        )
        for var_name in find_unset_env_refs(value)
    ]


def validate_descriptor(descriptor: ServerDescriptor) -> list[ValidationError]:
    """Validate a server descriptor without connecting to it.

    ABOUTME: Remote servers: URL scheme/host and header references
    ABOUTME: Local servers: command on PATH, args and env references
    ABOUTME: Neither command nor url is an error

    Examples:
        >>> validate_descriptor(ServerDescriptor(name="remote", url="https://api.example.com/mcp"))
        []
    """
    name = descriptor.name
    errors: list[ValidationError] = []

    if descriptor.url:
        url_error = validate_url(descriptor.url)
        if url_error:
            errors.append(ValidationError(name, url_error.message, url_error.severity))
        errors.extend(_unset_ref_warnings(name, descriptor.url, "url"))
        for key, value in descriptor.headers.items():
            errors.extend(_unset_ref_warnings(name, value, f"headers.{key}"))
        return errors

    if not descriptor.command:
        errors.append(ValidationError(name, "Missing command or url", "error"))
        return errors

    cmd_error = validate_command_exists(descriptor.command)
    if cmd_error:
        errors.append(ValidationError(name, cmd_error.message, cmd_error.severity))
    errors.extend(_unset_ref_warnings(name, descriptor.command, "command"))
    for arg in descriptor.args:
        errors.extend(_unset_ref_warnings(name, arg, "args"))
    for key, value in descriptor.env.items():
        errors.extend(_unset_ref_warnings(name, value, f"env.{key}"))
    return errors
