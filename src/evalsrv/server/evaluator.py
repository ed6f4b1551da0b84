"""Evaluator capability and the built-in implementations.

An evaluator turns one command line into one line of response text or
raises :class:`~evalsrv.errors.EvaluationError`.  Handlers never look
inside an evaluator; they only call :meth:`Evaluator.evaluate`.
"""

from __future__ import annotations

import ast
import operator
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from evalsrv.errors import EvaluationError


@runtime_checkable
class Evaluator(Protocol):
    """Anything that can evaluate a command line."""

    def evaluate(self, command: str) -> str: ...


EvaluatorFactory = Callable[[], Evaluator]


def describe_exception(exc: BaseException) -> str:
    """Render an exception as a single ``Type: message`` string."""
    message = str(exc)
    name = type(exc).__name__
    return f"{name}: {message}" if message else name


class PythonEvaluator:
    """Unrestricted evaluation in a persistent namespace.

    Expressions return ``str()`` of their value (``None`` becomes an empty
    string).  Anything that does not parse as an expression is executed as
    statements and yields an empty string, so ``x = 2`` followed by ``x * 3``
    answers ``6``.

    This runs arbitrary code with the privileges of the server process.
    """

    def __init__(self, namespace: dict[str, Any] | None = None) -> None:
        self.namespace: dict[str, Any] = (
            namespace if namespace is not None else {"__name__": "__evalsrv__"}
        )

    def evaluate(self, command: str) -> str:
        try:
            try:
                code = compile(command, "<client>", "eval")
            except SyntaxError:
                code = compile(command, "<client>", "exec")
                exec(code, self.namespace)
                return ""
            value = eval(code, self.namespace)
            return "" if value is None else str(value)
        except Exception as exc:
            raise EvaluationError(describe_exception(exc)) from exc


_BINARY_OPS: dict[type[ast.operator], Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPS: dict[type[ast.unaryop], Callable[[Any], Any]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

# Caps exponentiation so a single line cannot pin a handler thread.
MAX_EXPONENT = 10_000


class ArithmeticEvaluator:
    """Restricted evaluator for numeric expressions only.

    Accepts int/float literals, ``+ - * / // % **``, unary ``+``/``-``
    and parentheses.  Names, calls, attribute access and everything else
    are rejected with an :class:`EvaluationError`.
    """

    def evaluate(self, command: str) -> str:
        if not command.strip():
            raise EvaluationError("SyntaxError: empty expression")
        try:
            tree = ast.parse(command.strip(), mode="eval")
        except SyntaxError as exc:
            raise EvaluationError(f"SyntaxError: {exc.msg}") from exc
        except (MemoryError, RecursionError, ValueError) as exc:
            raise EvaluationError(describe_exception(exc)) from exc
        try:
            # str() of a huge int raises ValueError past the digit limit.
            return str(self._visit(tree.body))
        except EvaluationError:
            raise
        except (ArithmeticError, RecursionError, ValueError) as exc:
            raise EvaluationError(describe_exception(exc)) from exc

    def _visit(self, node: ast.expr) -> int | float:
        if isinstance(node, ast.Constant):
            if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
                raise EvaluationError(f"ValueError: unsupported literal {node.value!r}")
            return node.value
        if isinstance(node, ast.BinOp):
            op = _BINARY_OPS.get(type(node.op))
            if op is None:
                raise EvaluationError(f"ValueError: unsupported operator {type(node.op).__name__}")
            left = self._visit(node.left)
            right = self._visit(node.right)
            if op is operator.pow and abs(right) > MAX_EXPONENT:
                raise EvaluationError("OverflowError: exponent too large")
            return op(left, right)
        if isinstance(node, ast.UnaryOp):
            unary = _UNARY_OPS.get(type(node.op))
            if unary is None:
                raise EvaluationError(f"ValueError: unsupported operator {type(node.op).__name__}")
            return unary(self._visit(node.operand))
        raise EvaluationError(f"ValueError: unsupported expression {type(node).__name__}")


class EchoEvaluator:
    """Return every command unchanged."""

    def evaluate(self, command: str) -> str:
        return command
