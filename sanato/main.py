#!/usr/bin/env python3
"""Main entry point for the Sanato server.

This module handles:
- Running the bootstrap pipeline (config, credentials, storage, modules)
- Starting the HTTP listener
- Signal handling for graceful shutdown
- Mapping outcomes to process exit codes

Example:
    >>> from sanato.main import run_sanato
    >>> run_sanato(args, logger)
"""

import argparse
import signal
import sys
import threading
from typing import Optional

from sanato.bootstrap import Bootstrap, BootstrapResult
from sanato.core.constants import DEFAULT_AUTH_FILE, DEFAULT_CONFIG_FILE, DEFAULT_HOST, ExitCode
from sanato.core.errors import ListenerError, SanatoError
from sanato.core.logging import Logger
from sanato.server import ServerRuntime
from sanato.wizard import Prompter


class SanatoMain:
    """
    Main class for the Sanato server process.

    Handles bootstrap, serving, and shutdown.
    """

    def __init__(self, args: argparse.Namespace, logger: Logger, prompter: Optional[Prompter] = None):
        """
        Initialize Sanato main controller.

        Args:
            args: Parsed command-line arguments
            logger: Logger instance
            prompter: Source of setup wizard answers (defaults to stdin/stdout)
        """
        self.args = args
        self.logger = logger
        self.prompter = prompter
        self.shutdown_event = threading.Event()
        self.stop_signal: Optional[signal.Signals] = None

        self.bootstrap: Optional[Bootstrap] = None
        self.runtime: Optional[ServerRuntime] = None

    def run_bootstrap(self) -> BootstrapResult:
        """Run the startup pipeline."""
        self.bootstrap = Bootstrap(
            getattr(self.args, "config", DEFAULT_CONFIG_FILE),
            getattr(self.args, "auth", DEFAULT_AUTH_FILE),
            logger=self.logger,
            prompter=self.prompter,
        )
        return self.bootstrap.run()

    def create_runtime(self) -> ServerRuntime:
        """Build the server runtime around the bootstrapped router."""
        self.runtime = ServerRuntime(
            self.bootstrap.router,
            self.bootstrap.config,
            self.logger,
            host=getattr(self.args, "host", DEFAULT_HOST),
            serve_web=not getattr(self.args, "no_web", False),
            access_log=not getattr(self.args, "no_access_log", False),
            private_paths=[self.bootstrap.config_provider.path, self.bootstrap.credentials.path],
        )
        self.runtime.mount_static()
        return self.runtime

    def setup_signal_handlers(self) -> None:
        """
        Setup signal handlers for graceful shutdown.

        Handles:
        - SIGTERM: Graceful shutdown
        - SIGINT: Graceful shutdown (Ctrl+C)
        """

        def signal_handler(signum, frame):
            """Handle shutdown signals."""
            self.stop_signal = signal.Signals(signum)
            self.logger.info(f"Received signal {self.stop_signal.name}, shutting down...")
            self.shutdown_event.set()
            if self.runtime:
                self.runtime.stop()

        signal.signal(signal.SIGTERM, signal_handler)
        signal.signal(signal.SIGINT, signal_handler)

        self.logger.debug("Signal handlers registered")

    def serve(self) -> int:
        """
        Serve until shutdown.

        Returns:
            Exit code
        """
        try:
            self.runtime.serve()
        except ListenerError as e:
            self.logger.error(f"Listener failed: {e.message}", error_code=e.error_code.name)
            return ExitCode.LISTENER_FAILED

        if self.stop_signal == signal.SIGINT:
            return ExitCode.INTERRUPTED
        return ExitCode.OK

    def cleanup(self) -> None:
        """Stop the listener if it is still running."""
        if self.runtime:
            self.runtime.stop()
        self.logger.info("Shutdown complete")

    def run(self) -> int:
        """
        Run Sanato main loop.

        Returns:
            Exit code (0 for success, non-zero for failure)
        """
        try:
            result = self.run_bootstrap()
            if not result.ok:
                return ExitCode.STARTUP_FAILED

            try:
                self.create_runtime()
            except SanatoError as e:
                self.logger.error(f"Startup failed: {e.message}", error_code=e.error_code.name)
                return ExitCode.STARTUP_FAILED

            self.setup_signal_handlers()

            # Blocks until stop()
            return self.serve()

        except KeyboardInterrupt:
            self.logger.info("Interrupted by user")
            return ExitCode.INTERRUPTED

        finally:
            self.cleanup()


def run_sanato(args: argparse.Namespace, logger: Logger) -> int:
    """
    Main entry point for running Sanato.

    Args:
        args: Parsed command-line arguments
        logger: Logger instance

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    main = SanatoMain(args, logger)
    return main.run()


def main():
    """
    Entry point when run as standalone script.

    Typically called via cli.py, but can be run directly.
    """
    from sanato.cli import main as cli_main

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
