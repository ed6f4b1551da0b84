"""Exception taxonomy shared by the server, client, and CLI."""

from __future__ import annotations


class ServerError(Exception):
    """Base class for all evalsrv errors."""


class BindError(ServerError):
    """The listening address could not be opened.

    Raised for ports already in use, ports requiring privileges the
    process lacks, and ports outside the valid range.
    """

    def __init__(self, host: str, port: int, reason: str) -> None:
        self.host = host
        self.port = port
        self.reason = reason
        super().__init__(f"cannot bind {host}:{port}: {reason}")


class EvaluationError(ServerError):
    """The evaluator rejected or failed on a command line.

    ``text`` is sent back to the client verbatim as the response line.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(text)


class UnknownEvaluatorError(ServerError):
    """No evaluator is registered under the requested name."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = available
        super().__init__(f"unknown evaluator {name!r} (available: {', '.join(available)})")


class ClientConnectError(ServerError):
    """The client could not reach the server before its timeout."""
