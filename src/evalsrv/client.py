"""LineClient — send command lines to a running evalsrv and read the replies."""

from __future__ import annotations

import socket
import time
from types import TracebackType
from typing import BinaryIO

import structlog

from evalsrv.config.models import DEFAULT_PORT, LOOPBACK
from evalsrv.errors import ClientConnectError
from evalsrv.server.handler import ENCODING

logger = structlog.get_logger(__name__)


class LineClient:
    """Blocking client speaking the one-line-in, one-line-out protocol.

    :meth:`connect` keeps retrying until the server accepts or
    *connect_timeout* elapses, so a client can be started right after the
    server process.
    """

    def __init__(
        self,
        host: str = LOOPBACK,
        port: int = DEFAULT_PORT,
        *,
        connect_timeout: float = 5.0,
        retry_interval: float = 0.05,
    ) -> None:
        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout
        self.retry_interval = retry_interval
        self._sock: socket.socket | None = None
        self._rfile: BinaryIO | None = None

    def connect(self) -> None:
        deadline = time.monotonic() + self.connect_timeout
        attempts = 0
        while True:
            attempts += 1
            try:
                sock = socket.create_connection(
                    (self.host, self.port), timeout=self.connect_timeout
                )
            except OSError as exc:
                if time.monotonic() >= deadline:
                    raise ClientConnectError(
                        f"could not connect to {self.host}:{self.port} "
                        f"after {attempts} attempts: {exc}"
                    ) from exc
                time.sleep(self.retry_interval)
                continue
            break

        sock.settimeout(None)
        self._sock = sock
        self._rfile = sock.makefile("rb")
        logger.debug("client_connected", host=self.host, port=self.port, attempts=attempts)

    def send(self, command: str) -> str:
        """Send one command line and return the single response line."""
        if self._sock is None or self._rfile is None:
            self.connect()
        assert self._sock is not None and self._rfile is not None

        if "\n" in command or "\r" in command:
            raise ValueError("command must be a single line")
        self._sock.sendall((command + "\n").encode(ENCODING))
        raw = self._rfile.readline()
        if not raw.endswith(b"\n"):
            raise ConnectionError("server closed the connection before responding")
        return raw[:-1].decode(ENCODING, errors="replace")

    def close(self) -> None:
        if self._rfile is not None:
            self._rfile.close()
            self._rfile = None
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self) -> LineClient:
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
