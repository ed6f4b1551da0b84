"""ServerMain — start the listener and serve until externally terminated."""

from __future__ import annotations

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog

from evalsrv.config.models import LOOPBACK
from evalsrv.server.listener import Listener

if TYPE_CHECKING:
    from evalsrv.server.evaluator import EvaluatorFactory

logger = structlog.get_logger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


@contextmanager
def shutdown_on_signals(listener: Listener) -> Iterator[None]:
    """Stop *listener* gracefully on SIGINT/SIGTERM while the block runs.

    Handlers are only installed from the main thread; elsewhere this is a
    no-op and the caller is responsible for calling ``listener.shutdown()``.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _request_shutdown(signum: int, _frame: Any) -> None:
        logger.info("shutdown_requested", signal=signal.Signals(signum).name)
        # shutdown() blocks until serve_forever() returns, and serve_forever()
        # runs on this thread.
        threading.Thread(target=listener.shutdown, daemon=True).start()

    previous = {sig: signal.signal(sig, _request_shutdown) for sig in SHUTDOWN_SIGNALS}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


class ServerMain:
    """Owns one :class:`Listener` for the lifetime of the process."""

    def __init__(
        self,
        evaluator_factory: EvaluatorFactory,
        *,
        host: str = LOOPBACK,
        reuse_address: bool = True,
    ) -> None:
        self.listener = Listener(evaluator_factory, host=host, reuse_address=reuse_address)

    def run(self, port: int) -> None:
        """Bind *port* and serve until a shutdown signal arrives.

        Raises:
            BindError: *port* could not be opened; nothing was accepted.
        """
        self.listener.bind(port)
        try:
            with shutdown_on_signals(self.listener):
                self.listener.serve_forever()
        finally:
            self.listener.close()
            logger.info("server_stopped")
