#!/usr/bin/env python3
"""Command-line interface for Sanato.

This module provides the CLI for running a Sanato server:
- Argument parsing and validation
- Logging setup (console, optional rotating log file)
- Help and version information

Example:
    >>> from sanato.cli import parse_arguments
    >>> args = parse_arguments(['--config', 'config.json', '--debug'])
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from sanato.core.constants import (
    DEFAULT_AUTH_FILE,
    DEFAULT_CONFIG_FILE,
    DEFAULT_HOST,
    SANATO_VERSION,
    ExitCode,
)
from sanato.core.logging import Logger, LogLevel, set_global_logger

# Version information
VERSION = SANATO_VERSION
DESCRIPTION = "Sanato - WebDAV and file API server"


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def parse_arguments(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Argument list to parse (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace

    Raises:
        SystemExit: On invalid arguments or --help/--version
        CLIError: If an argument fails validation
    """
    parser = argparse.ArgumentParser(
        prog="sanato",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with files in the current directory (prompts on first run)
  sanato

  # Run with explicit config and credential files
  sanato --config /etc/sanato/config.json --auth /etc/sanato/auth.json

  # Listen on localhost only, without the static site
  sanato --host 127.0.0.1 --no-web

  # Debug logging to a file
  sanato --debug --log-file /var/log/sanato.log
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {VERSION}",
    )

    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        type=str,
        default=DEFAULT_CONFIG_FILE,
        help=f"Configuration file path, created on first run (default: {DEFAULT_CONFIG_FILE})",
    )

    parser.add_argument(
        "-a",
        "--auth",
        metavar="FILE",
        type=str,
        default=DEFAULT_AUTH_FILE,
        help=f"Credential file path, created on first run (default: {DEFAULT_AUTH_FILE})",
    )

    # Server options
    server_group = parser.add_argument_group("server options")

    server_group.add_argument(
        "--host",
        metavar="ADDR",
        type=str,
        default=DEFAULT_HOST,
        help=f"Interface to listen on (default: {DEFAULT_HOST})",
    )

    server_group.add_argument(
        "--no-web",
        action="store_true",
        help="Do not serve the static web directory",
    )

    server_group.add_argument(
        "--no-access-log",
        action="store_true",
        help="Disable per-request access logging",
    )

    # Logging options
    log_group = parser.add_argument_group("logging options")

    log_group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    log_group.add_argument(
        "--log-file",
        metavar="FILE",
        type=str,
        help="Also write logs to this file (rotated at 10MB)",
    )

    parsed = parser.parse_args(args)

    _validate_arguments(parsed)

    return parsed


def _validate_arguments(args: argparse.Namespace) -> None:
    """
    Validate parsed arguments.

    Missing config or credential files are fine: the server creates them.

    Args:
        args: Parsed arguments namespace

    Raises:
        CLIError: If validation fails
    """
    for label, value in (("Configuration", args.config), ("Credential", args.auth)):
        path = Path(value)
        if path.exists() and not path.is_file():
            raise CLIError(f"{label} path is not a file: {value}")
        if not path.parent.is_dir():
            raise CLIError(f"{label} file directory does not exist: {path.parent}")

    if args.log_file:
        log_path = Path(args.log_file)
        if log_path.is_dir():
            raise CLIError(f"Log file path is a directory: {args.log_file}")
        if not log_path.parent.is_dir():
            raise CLIError(f"Log file directory does not exist: {log_path.parent}")

    if not args.host.strip():
        raise CLIError("Host must not be empty")


def setup_logging(args: argparse.Namespace) -> Logger:
    """
    Setup logging based on arguments.

    Args:
        args: Parsed arguments namespace

    Returns:
        Configured logger instance, also installed as the shared logger
    """
    log_level = LogLevel.DEBUG if args.debug else LogLevel.INFO

    logger = Logger("sanato", level=log_level)

    if args.log_file:
        logger.add_handler(logger.create_file_handler(args.log_file))
        logger.debug(f"Logging to file: {args.log_file}")

    set_global_logger(logger)
    return logger


def print_banner(logger: Logger) -> None:
    """
    Print startup banner with version information.

    Args:
        logger: Logger instance
    """
    logger.info("=" * 60)
    logger.info(f"Sanato v{VERSION}")
    logger.info(DESCRIPTION)
    logger.info("=" * 60)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Handles argument parsing and logging setup, then passes control to
    sanato.main for bootstrap and serving.
    """
    try:
        args = parse_arguments(argv)

        logger = setup_logging(args)

        print_banner(logger)

        from sanato.main import run_sanato

        return run_sanato(args, logger)

    except CLIError as e:
        print(f"Error: {e}", file=sys.stderr)
        return ExitCode.STARTUP_FAILED

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return ExitCode.INTERRUPTED

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        import traceback

        traceback.print_exc()
        return ExitCode.STARTUP_FAILED


if __name__ == "__main__":
    sys.exit(main())
