"""
HTTP exporter serving the metrics store.

This module provides the Starlette application that renders the store on
every GET and MetricsExporter, which serves it with uvicorn on a socket
bound up front so that a bind failure surfaces as ListenError before any
serving starts.
"""

import contextlib
import logging
import socket
from typing import Iterator, Optional

import uvicorn
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from ..metrics import CONTENT_TYPE, MetricsStore
from ..orchestration.constants import TimeoutConstants
from ..validation import ListenError

logger = logging.getLogger(__name__)


def create_app(store: MetricsStore) -> Starlette:
    """
    Build the exporter application.

    Every path answers GET and HEAD with the full render of `store`;
    other methods get 405 from the router.
    """

    async def metrics(request: Request) -> Response:
        return Response(store.render(), media_type=CONTENT_TYPE)

    return Starlette(routes=[Route("/{path:path}", metrics, methods=["GET", "HEAD"])])


class _ExporterServer(uvicorn.Server):
    """uvicorn server that leaves process signals to the supervisor."""

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield

    def install_signal_handlers(self) -> None:
        pass


class MetricsExporter:
    """
    Serves the exposition text over HTTP until shut down.

    Attributes:
        store: Store rendered on each request
        host: Address to bind
        port: Port to bind, 0 for an ephemeral port
        shutdown_timeout: Seconds in-flight requests get to finish on shutdown
    """

    def __init__(
        self,
        store: MetricsStore,
        host: str = "127.0.0.1",
        port: int = 9187,
        shutdown_timeout: float = TimeoutConstants.EXPORTER_SHUTDOWN_TIMEOUT,
    ):
        self.store = store
        self.host = host
        self.port = port
        self.shutdown_timeout = shutdown_timeout
        self.app = create_app(store)
        self._socket: Optional[socket.socket] = None
        self._server = _ExporterServer(
            uvicorn.Config(
                self.app,
                lifespan="off",
                log_config=None,
                access_log=False,
                timeout_graceful_shutdown=int(shutdown_timeout) or None,
            )
        )

    def bind(self) -> socket.socket:
        """
        Bind the listening socket.

        Raises:
            ListenError: If the address is in use, not permitted or invalid
        """
        if self._socket is not None:
            return self._socket

        family = socket.AF_INET6 if ":" in self.host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self.port))
            sock.listen(socket.SOMAXCONN)
        except OSError as e:
            sock.close()
            raise ListenError(f"Cannot listen on {self.host}:{self.port}: {e}") from e
        sock.setblocking(False)

        self._socket = sock
        logger.info(f"Exporter listening on {self.host}:{self.bound_port}")
        return sock

    @property
    def bound_port(self) -> Optional[int]:
        """The actual listening port, once bound."""
        if self._socket is None:
            return None
        return self._socket.getsockname()[1]

    async def run(self) -> None:
        """
        Serve requests until shutdown() is called.

        Raises:
            ListenError: If the socket cannot be bound
        """
        sock = self.bind()
        try:
            await self._server.serve(sockets=[sock])
        finally:
            sock.close()
            self._socket = None
        logger.info("Exporter stopped")

    def shutdown(self) -> None:
        """Stop accepting connections and let in-flight requests finish."""
        logger.info("Exporter shutdown requested")
        self._server.should_exit = True

    @property
    def started(self) -> bool:
        return self._server.started
