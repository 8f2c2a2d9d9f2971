#!/usr/bin/env python3
"""
PulseMesh Control - Command Line Entry Point

Usage:
    pulsemesh-control serve                     # Run the API (127.0.0.1:8090)
    pulsemesh-control serve --port 9000         # Run the API on another port
    pulsemesh-control restart                   # Restart PulseMesh once
    pulsemesh-control --config my.yaml restart  # Settings from a YAML file
    pulsemesh-control --dry-run serve           # Print settings and exit

restart exits with the restart command's own exit code.
"""

import argparse
import sys

from .common.exceptions import ConfigError
from .common.logging_setup import configure_logging
from .config import Settings, load_settings
from .services.restart_runner import RestartCommand, RestartRunner
from .services.status_message import format_status_message


def print_settings_summary(settings: Settings) -> None:
    """Print the effective settings."""
    command = RestartCommand.from_settings(settings)
    print("=" * 50)
    print("PulseMesh Control Settings")
    print("=" * 50)
    print(f"Environment:      {settings.environment}")
    print(f"Restart command:  {' '.join(command.argv())}")
    print(f"Restart timeout:  {settings.restart_timeout_seconds:g}s")
    print(f"Service port:     {settings.service_port}")
    print(f"API token:        {'set' if settings.api_token else 'not set'}")
    print(f"Settings group:   {settings.settings_group_key} ({settings.plugin_id})")
    print("=" * 50)


def run_restart(settings: Settings) -> int:
    """Restart once, print the status message, return the exit code."""
    runner = RestartRunner(RestartCommand.from_settings(settings))
    result = runner.restart()
    stream = sys.stdout if result.succeeded else sys.stderr
    print(format_status_message(result), file=stream)
    return result.exit_code


def run_server(settings: Settings, host: str, port: int) -> int:
    """Serve the API with uvicorn until interrupted."""
    import uvicorn

    from .main import create_app

    uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.log_level.lower())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pulsemesh-control",
        description="PulseMesh service control",
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to YAML settings file (overrides environment)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print settings and exit without doing anything"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (debug) logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the control API")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8090, help="Bind port (default: 8090)")

    subparsers.add_parser("restart", help="Restart the PulseMesh service once")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        print(e.message, file=sys.stderr)
        return 2

    configure_logging(
        "DEBUG" if args.verbose else settings.log_level,
        settings.log_format.lower() == "json",
    )

    if args.dry_run:
        print_settings_summary(settings)
        print("Dry run mode - exiting")
        return 0

    if args.command == "restart":
        return run_restart(settings)

    try:
        return run_server(settings, args.host, args.port)
    except KeyboardInterrupt:
        print("\nStopped by user")
        return 0


if __name__ == "__main__":
    sys.exit(main())
