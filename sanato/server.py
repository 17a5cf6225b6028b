#!/usr/bin/env python3
"""HTTP server runtime for Sanato.

Takes the router produced by a successful bootstrap and:
- mounts static serving of ``web_dir`` under ``web_url`` (optional), never
  exposing the config file, the credential file or the storage roots
- wraps everything in access logging (optional)
- binds a cheroot WSGI server on the configured port and serves

Bind failures raise ListenerError, which the caller reports separately
from bootstrap failures.

Example:
    >>> runtime = ServerRuntime(router, config, logger)
    >>> runtime.mount_static()
    >>> runtime.serve()  # blocks until stop()
"""

from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Union

from cheroot import wsgi

from sanato.core.config import Config
from sanato.core.constants import DEFAULT_HOST, Limits
from sanato.core.errors import ListenerError
from sanato.core.logging import Logger
from sanato.http.access_log import AccessLogMiddleware
from sanato.http.router import Router


class ServerRuntime:
    """Owns the listener and the outermost WSGI stack."""

    def __init__(
        self,
        router: Router,
        config: Config,
        logger: Logger,
        host: str = DEFAULT_HOST,
        serve_web: bool = True,
        access_log: bool = True,
        threads: int = Limits.SERVER_THREADS,
        private_paths: Sequence[Union[str, Path]] = (),
    ):
        """Initialize server runtime.

        Args:
            router: Router with every module started
            config: Server configuration
            logger: Logger instance
            host: Interface to bind
            serve_web: Mount static assets from config.web_dir
            access_log: Log one line per request
            threads: Worker thread count
            private_paths: State files (config, credentials) the static
                site must never serve
        """
        self.router = router
        self.config = config
        self.logger = logger
        self.host = host
        self.serve_web = serve_web
        self.access_log = access_log
        self.threads = threads
        self.private_paths = list(private_paths)
        self.server: Optional[wsgi.Server] = None

    def mount_static(self) -> bool:
        """Mount the static site if enabled and the directory exists.

        Returns:
            True if mounted

        Raises:
            RouteConflictError: If web_url collides with a module mount
        """
        if not self.serve_web:
            self.logger.debug("Static site disabled")
            return False

        web_dir = Path(self.config.web_dir)
        if not web_dir.is_dir():
            self.logger.warning("Web directory not found, static site disabled", web_dir=str(web_dir))
            return False

        self.router.serve_files(self.config.web_url, str(web_dir), exclude=self.hidden_paths())
        self.logger.info(f"Static site at {self.config.web_url}", web_dir=str(web_dir.resolve()))
        return True

    def hidden_paths(self) -> List[str]:
        """Paths kept out of the static site: state files and storage roots."""
        paths = [str(path) for path in self.private_paths]
        paths.extend([self.config.root_data_dir, self.config.root_temp_dir])
        return paths

    def build_app(self) -> Callable[..., Any]:
        """Build the outermost WSGI application."""
        if self.access_log:
            return AccessLogMiddleware(self.router, self.logger.child("access"))
        return self.router

    @property
    def bind_addr(self):
        return (self.host, self.config.port)

    def serve(self) -> None:
        """Bind and serve until stop() is called.

        Raises:
            ListenerError: If the port cannot be bound or the server crashes
        """
        self.server = wsgi.Server(self.bind_addr, self.build_app(), numthreads=self.threads)

        try:
            self.server.prepare()
        except OSError as e:
            self.server = None
            raise ListenerError(f"Cannot listen on {self.host}:{self.config.port}: {e}")

        self.logger.info(f"SERVER STARTED: Listening on {self.host}:{self.config.port}")

        try:
            self.server.serve()
        except OSError as e:
            raise ListenerError(f"Listener on {self.host}:{self.config.port} failed: {e}")

    def stop(self) -> None:
        """Stop the listener if running."""
        if self.server is not None:
            self.logger.info("Stopping server")
            self.server.stop()
            self.server = None
