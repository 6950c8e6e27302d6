# CLI interface for mcpcheck
import argparse
import functools
import json
import logging
import sys
from pathlib import Path

import anyio

from mcpcheck import __version__
from mcpcheck.batch import check_servers, discover_servers
from mcpcheck.config import (
    CAPABILITIES_DEFAULT_TIMEOUT_MS,
    CAPABILITIES_TIMEOUT_RANGE,
    CHECK_DEFAULT_TIMEOUT_MS,
    CHECK_TIMEOUT_RANGE,
    DEFAULT_CONCURRENCY,
    clamp_timeout_ms,
    get_config_path,
    load_servers,
)
from mcpcheck.models import CapabilitiesOk, ServerDescriptor, results_to_dict
from mcpcheck.transports import TransportResolver
from mcpcheck.utils import validate_descriptor

# ABOUTME: Exit codes
# 0 = every target ok, 1 = some targets failed, 2 = config error, 3 = fatal
EXIT_SUCCESS = 0
EXIT_PARTIAL = 1
EXIT_CONFIG_ERROR = 2
EXIT_FATAL = 3


def _load_targets(
    args: argparse.Namespace,
) -> tuple[dict[str, ServerDescriptor], list[str]]:
    config_path = Path(args.config) if args.config else get_config_path()
    servers = load_servers(config_path)
    ids = list(args.ids) if args.ids else list(servers)
    return servers, ids


def _resolver(args: argparse.Namespace) -> TransportResolver:
    return TransportResolver(cache_dir=args.cache_dir, cwd=args.cwd)


def cmd_check(args: argparse.Namespace) -> int:
    """Execute check command.

    ABOUTME: Connect + ping every selected server and report latency or error
    """
    try:
        servers, ids = _load_targets(args)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR

    timeout_ms = clamp_timeout_ms(args.timeout, CHECK_TIMEOUT_RANGE, CHECK_DEFAULT_TIMEOUT_MS)

    try:
        results = anyio.run(functools.partial(
            check_servers, servers, ids, timeout_ms, args.concurrency, _resolver(args)
        ))
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL

    if args.json:
        print(json.dumps(results_to_dict(results), indent=2))
    else:
        print(f"mcpcheck check v{__version__} (timeout {timeout_ms} ms)")
        print()
        for server_id, outcome in results.items():
            if outcome.ok:
                print(f"  ✓ {server_id} ({outcome.latency_ms} ms)")
            else:
                print(f"  ✗ {server_id} ({outcome.latency_ms} ms): {outcome.error}")
        print()
        ok_count = sum(1 for outcome in results.values() if outcome.ok)
        print(f"Check complete: {ok_count}/{len(results)} server(s) reachable")

    return EXIT_SUCCESS if all(outcome.ok for outcome in results.values()) else EXIT_PARTIAL


def cmd_capabilities(args: argparse.Namespace) -> int:
    """Execute capabilities command.

    ABOUTME: Lists tools, resources and prompts of every selected server
    """
    try:
        servers, ids = _load_targets(args)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR

    timeout_ms = clamp_timeout_ms(
        args.timeout, CAPABILITIES_TIMEOUT_RANGE, CAPABILITIES_DEFAULT_TIMEOUT_MS
    )

    try:
        results = anyio.run(functools.partial(
            discover_servers, servers, ids, timeout_ms, args.concurrency, _resolver(args)
        ))
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL

    if args.json:
        print(json.dumps(results_to_dict(results), indent=2))
        return EXIT_SUCCESS if all(outcome.ok for outcome in results.values()) else EXIT_PARTIAL

    print(f"mcpcheck capabilities v{__version__} (timeout {timeout_ms} ms)")
    print()
    for server_id, outcome in results.items():
        if not isinstance(outcome, CapabilitiesOk):
            print(f"  ✗ {server_id}: {outcome.error}")
            print()
            continue

        caps = outcome.capabilities
        print(f"  {server_id} ({outcome.latency_ms} ms)")
        for kind, supported, count in (
            ("tools", outcome.supported.tools, len(caps.tools)),
            ("resources", outcome.supported.resources, len(caps.resources)),
            ("prompts", outcome.supported.prompts, len(caps.prompts)),
        ):
            print(f"    {kind}: {count if supported else 'not supported'}")
        for tool in caps.tools:
            if tool.description:
                print(f"      - {tool.name}: {tool.description.splitlines()[0]}")
            else:
                print(f"      - {tool.name}")
        print()

    return EXIT_SUCCESS if all(outcome.ok for outcome in results.values()) else EXIT_PARTIAL


def cmd_validate(args: argparse.Namespace) -> int:
    """Execute validate command.

    ABOUTME: Static checks only; no server is started or contacted
    """
    print(f"mcpcheck validate v{__version__}")
    print()

    try:
        servers, ids = _load_targets(args)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR

    error_count = 0
    warning_count = 0
    for server_id in ids:
        descriptor = servers.get(server_id)
        if descriptor is None:
            print(f"  ✗ {server_id}: not found in config")
            error_count += 1
            continue

        problems = validate_descriptor(descriptor)
        if not problems:
            print(f"  ✓ {server_id}")
        for problem in problems:
            if problem.severity == "error":
                print(f"  ✗ {server_id}: {problem.message}")
                error_count += 1
            else:
                print(f"  ⚠ {server_id}: {problem.message}")
                warning_count += 1

    print()
    print(f"Validation complete: {error_count} error(s), {warning_count} warning(s)")
    return EXIT_CONFIG_ERROR if error_count else EXIT_SUCCESS


def _add_target_args(parser: argparse.ArgumentParser, with_timeout: bool = True) -> None:
    parser.add_argument(
        "ids",
        nargs="*",
        help="Server ids to act on (default: every server in the config)"
    )
    parser.add_argument(
        "--config", "-c",
        help="Host config file (.json with mcpServers/servers, or Codex .toml)"
    )
    if not with_timeout:
        return
    parser.add_argument(
        "--timeout", "-t",
        type=float,
        help="Per-server timeout in milliseconds"
    )
    parser.add_argument(
        "--concurrency", "-j",
        type=int,
        default=DEFAULT_CONCURRENCY,
        help=f"Servers checked in parallel (default: {DEFAULT_CONCURRENCY})"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON"
    )
    parser.add_argument(
        "--cwd",
        help="Working directory for spawned stdio servers"
    )
    parser.add_argument(
        "--cache-dir",
        help="Scratch cache directory handed to uv/uvx servers"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcpcheck",
        description="Check reachability and capabilities of MCP servers"
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"mcpcheck v{__version__}"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    check_parser = subparsers.add_parser(
        "check",
        help="Connect to servers and ping them"
    )
    _add_target_args(check_parser)

    capabilities_parser = subparsers.add_parser(
        "capabilities",
        help="List tools, resources and prompts of servers"
    )
    _add_target_args(capabilities_parser)

    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate server entries without connecting"
    )
    _add_target_args(validate_parser, with_timeout=False)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    ABOUTME: Parses args and dispatches to appropriate command
    ABOUTME: Returns exit code for sys.exit()
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "check":
        return cmd_check(args)
    elif args.command == "capabilities":
        return cmd_capabilities(args)
    elif args.command == "validate":
        return cmd_validate(args)
    else:
        parser.print_help()
        return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
