"""Built-in evaluator plugin: python, arithmetic, echo."""

from __future__ import annotations

from evalsrv.plugins.hookspecs import hookimpl
from evalsrv.server.evaluator import (
    ArithmeticEvaluator,
    EchoEvaluator,
    EvaluatorFactory,
    PythonEvaluator,
)


class BuiltinEvaluatorsPlugin:
    """Registers the evaluators that ship with evalsrv."""

    @hookimpl
    def evalsrv_register_evaluators(self) -> dict[str, EvaluatorFactory]:
        return {
            "python": PythonEvaluator,
            "arithmetic": ArithmeticEvaluator,
            "echo": EchoEvaluator,
        }
