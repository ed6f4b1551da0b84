"""Shared pytest fixtures and test helpers for evalsrv tests."""

from __future__ import annotations

import logging
import socket
import threading
from collections.abc import Callable, Iterator
from typing import Any

import pytest
import structlog
from click.testing import CliRunner

from evalsrv.server.evaluator import EvaluatorFactory, PythonEvaluator
from evalsrv.server.listener import Listener

IO_TIMEOUT = 5.0


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Undo configure_logging() calls made by CLI invocations."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    app = logging.getLogger("evalsrv")
    app_level = app.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    app.setLevel(app_level)
    structlog.reset_defaults()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def _isolated_config(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run from an empty temp dir with no EVALSRV_* environment.

    Use via ``@pytest.mark.usefixtures("_isolated_config")`` so a developer's
    own evalsrv.toml or env vars never leak into assertions.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("EVALSRV_CONFIG", raising=False)
    for key in ("EVALSRV_SERVER__PORT", "EVALSRV_SERVER__HOST", "EVALSRV_QUIET"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def serve() -> Iterator[Callable[..., Listener]]:
    """Start listeners on ephemeral loopback ports; stop them after the test.

    Usage::

        listener = serve()                     # python evaluator
        listener = serve(EchoEvaluator)        # any evaluator factory
    """
    running: list[tuple[Listener, threading.Thread]] = []

    def _serve(factory: EvaluatorFactory = PythonEvaluator, **kwargs: Any) -> Listener:
        listener = Listener(factory, host="127.0.0.1", **kwargs)
        listener.bind(0)
        thread = threading.Thread(
            target=listener.serve_forever, kwargs={"poll_interval": 0.05}, daemon=True
        )
        thread.start()
        running.append((listener, thread))
        return listener

    try:
        yield _serve
    finally:
        for listener, thread in running:
            listener.shutdown()
            thread.join(timeout=IO_TIMEOUT)
            listener.close()


class LineConnection:
    """Raw test client: write bytes, read single response lines."""

    def __init__(self, address: tuple[str, int]) -> None:
        self.sock = socket.create_connection(address, timeout=IO_TIMEOUT)
        self.rfile = self.sock.makefile("rb")

    def send_raw(self, data: bytes) -> None:
        self.sock.sendall(data)

    def ask(self, command: str) -> str:
        self.send_raw(command.encode() + b"\n")
        return self.read_line()

    def read_line(self) -> str:
        raw = self.rfile.readline()
        assert raw.endswith(b"\n"), f"expected a full line, got {raw!r}"
        return raw[:-1].decode()

    def read_rest(self) -> bytes:
        """Read until the server closes the connection."""
        return self.rfile.read()

    def close(self) -> None:
        self.rfile.close()
        self.sock.close()


@pytest.fixture
def connect() -> Iterator[Callable[[Listener], LineConnection]]:
    """Open raw line connections to a listener; closed after the test."""
    opened: list[LineConnection] = []

    def _connect(listener: Listener) -> LineConnection:
        conn = LineConnection(listener.address)
        opened.append(conn)
        return conn

    try:
        yield _connect
    finally:
        for conn in opened:
            conn.close()
