"""Per-connection read → evaluate → respond cycle.

One :class:`ConnectionHandler` runs on its own thread for each accepted
socket and owns that socket until the peer closes it or an I/O error
occurs.  The cycle itself lives in :func:`serve_lines` so it can run over
any pair of binary streams.
"""

from __future__ import annotations

import socketserver
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, BinaryIO

import structlog
from pydantic import BaseModel

from evalsrv.errors import EvaluationError
from evalsrv.server.evaluator import describe_exception

if TYPE_CHECKING:
    from evalsrv.server.evaluator import Evaluator
    from evalsrv.server.listener import Listener, _ListenerServer

logger = structlog.get_logger(__name__)

ENCODING = "utf-8"


@dataclass(frozen=True)
class Connection:
    """Peer details captured at accept time."""

    peer_host: str
    peer_port: int
    line_buffered: bool = True
    blocking: bool = True

    @property
    def peer(self) -> str:
        return f"{self.peer_host}:{self.peer_port}"


class CloseReason(str, Enum):
    """Why a connection's cycle ended."""

    EOF = "eof"
    READ_ERROR = "read_error"
    WRITE_ERROR = "write_error"


class EvaluationResult(BaseModel):
    """Outcome of one command line: the response text and whether it failed."""

    model_config = {"frozen": True}

    ok: bool
    command: str
    text: str


def decode_line(raw: bytes) -> str:
    """Strip one trailing ``\\n`` or ``\\r\\n`` and decode."""
    if raw.endswith(b"\r\n"):
        raw = raw[:-2]
    elif raw.endswith(b"\n"):
        raw = raw[:-1]
    return raw.decode(ENCODING, errors="replace")


def encode_response(text: str) -> bytes:
    """Encode *text* as exactly one newline-terminated line."""
    single_line = text.replace("\r\n", "\\n").replace("\n", "\\n").replace("\r", "\\r")
    return (single_line + "\n").encode(ENCODING, errors="replace")


def evaluate(evaluator: Evaluator, command: str) -> EvaluationResult:
    """Run *command* through *evaluator*; failures become the response text."""
    try:
        text = evaluator.evaluate(command)
    except EvaluationError as exc:
        return EvaluationResult(ok=False, command=command, text=exc.text)
    except Exception as exc:
        # Plugin evaluators may raise anything; the connection stays up.
        return EvaluationResult(ok=False, command=command, text=describe_exception(exc))
    return EvaluationResult(ok=True, command=command, text=text)


def serve_lines(
    rfile: BinaryIO,
    wfile: BinaryIO,
    evaluator: Evaluator,
    *,
    log: structlog.stdlib.BoundLogger | None = None,
) -> CloseReason:
    """Serve one connection until end-of-stream or an I/O error.

    Every complete line read from *rfile* produces exactly one line on
    *wfile*, flushed before the next line is read.  A trailing fragment
    without a line terminator at end-of-stream is discarded.
    """
    log = log or logger
    while True:
        try:
            raw = rfile.readline()
        except OSError as exc:
            log.warning("connection_read_failed", error=str(exc))
            return CloseReason.READ_ERROR

        if not raw.endswith(b"\n"):
            return CloseReason.EOF

        command = decode_line(raw)
        log.debug("command_received", command=command)
        result = evaluate(evaluator, command)
        log.debug("command_evaluated", ok=result.ok)

        try:
            wfile.write(encode_response(result.text))
            wfile.flush()
        except OSError as exc:
            log.warning("connection_write_failed", error=str(exc))
            return CloseReason.WRITE_ERROR


class ConnectionHandler(socketserver.StreamRequestHandler):
    """socketserver handler binding one accepted socket to :func:`serve_lines`."""

    server: _ListenerServer

    def setup(self) -> None:
        super().setup()
        host, port = self.client_address[:2]
        self.connection_info = Connection(peer_host=host, peer_port=port)

    def handle(self) -> None:
        listener: Listener = self.server.listener
        log = logger.bind(peer=self.connection_info.peer)
        evaluator = listener.evaluator_factory()
        reason = serve_lines(self.rfile, self.wfile, evaluator, log=log)
        log.info("connection_closed", reason=reason.value)

