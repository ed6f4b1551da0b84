"""Server core: evaluator capability, connection handler, listener, and main loop."""

from evalsrv.server.evaluator import (
    ArithmeticEvaluator,
    EchoEvaluator,
    Evaluator,
    PythonEvaluator,
)
from evalsrv.server.handler import Connection, ConnectionHandler, EvaluationResult
from evalsrv.server.listener import Listener
from evalsrv.server.main import ServerMain

__all__ = [
    "ArithmeticEvaluator",
    "Connection",
    "ConnectionHandler",
    "EchoEvaluator",
    "EvaluationResult",
    "Evaluator",
    "Listener",
    "PythonEvaluator",
    "ServerMain",
]
