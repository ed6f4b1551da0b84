"""TCP listener: bind a port and hand every accepted socket to its own handler."""

from __future__ import annotations

import socketserver
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

from evalsrv.config.models import LOOPBACK
from evalsrv.errors import BindError
from evalsrv.server.handler import ConnectionHandler

if TYPE_CHECKING:
    from evalsrv.server.evaluator import EvaluatorFactory

logger = structlog.get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class _ListenerServer(socketserver.ThreadingTCPServer):
    """Thread-per-connection TCP server owned by a :class:`Listener`."""

    daemon_threads = True
    block_on_close = False
    request_queue_size = 128

    def __init__(
        self, listener: Listener, address: tuple[str, int], *, reuse_address: bool
    ) -> None:
        self.listener = listener
        self.allow_reuse_address = reuse_address
        super().__init__(address, ConnectionHandler, bind_and_activate=False)

    def process_request(self, request: Any, client_address: Any) -> None:
        self.listener.connection_accepted(client_address)
        super().process_request(request, client_address)


class Listener:
    """Accepts connections one at a time and never waits on a handler.

    Parameters:
        evaluator_factory: Called once per accepted connection; the handler
            submits that connection's command lines to the evaluator it returns.
        host: Interface to bind.
        reuse_address: Set ``SO_REUSEADDR`` before binding.
        clock: Time source for the accepted-connection record.  When it
            raises, the record is logged without a timestamp.
    """

    def __init__(
        self,
        evaluator_factory: EvaluatorFactory,
        *,
        host: str = LOOPBACK,
        reuse_address: bool = True,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.evaluator_factory = evaluator_factory
        self.host = host
        self.reuse_address = reuse_address
        self._clock = clock
        self._server: _ListenerServer | None = None

    @property
    def address(self) -> tuple[str, int]:
        """The bound ``(host, port)``; the real port when bound to port 0."""
        if self._server is None:
            raise RuntimeError("listener is not bound")
        host, port = self._server.server_address[:2]
        return host, port

    def bind(self, port: int) -> tuple[str, int]:
        """Bind and listen on *port*, raising :class:`BindError` on failure."""
        if not 0 <= port <= 65535:
            raise BindError(self.host, port, "port out of range")

        server = _ListenerServer(self, (self.host, port), reuse_address=self.reuse_address)
        try:
            server.server_bind()
            server.server_activate()
        except OSError as exc:
            server.server_close()
            raise BindError(self.host, port, exc.strerror or str(exc)) from exc

        self._server = server
        host, bound_port = self.address
        logger.info("server_listening", host=host, port=bound_port)
        return host, bound_port

    def serve_forever(self, poll_interval: float = 0.5) -> None:
        """Accept connections until :meth:`shutdown` is called."""
        if self._server is None:
            raise RuntimeError("listener is not bound")
        self._server.serve_forever(poll_interval=poll_interval)

    def start(self, port: int) -> None:
        """Bind *port* and accept connections until shut down."""
        self.bind(port)
        self.serve_forever()

    def shutdown(self) -> None:
        """Stop the accept loop; must be called from another thread."""
        server = self._server
        if server is not None:
            server.shutdown()

    def close(self) -> None:
        """Release the listening socket.  Open connections keep running."""
        if self._server is not None:
            self._server.server_close()
            self._server = None

    def connection_accepted(self, client_address: tuple[str, int]) -> None:
        """Log one accepted connection; the timestamp is best-effort."""
        peer_host, peer_port = client_address[:2]
        fields: dict[str, Any] = {"peer_host": peer_host, "peer_port": peer_port}
        try:
            fields["accepted_at"] = self._clock().isoformat()
        except Exception:
            logger.debug("accept_timestamp_unavailable", exc_info=True)
        logger.info("connection_accepted", **fields)
