"""Pluggy hook specifications for evalsrv extensions."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from evalsrv.server.evaluator import EvaluatorFactory

hookspec = pluggy.HookspecMarker("evalsrv")
hookimpl = pluggy.HookimplMarker("evalsrv")


class EvalsrvHookSpec:
    """Hook specifications for the evalsrv plugin system."""

    @hookspec
    def evalsrv_register_evaluators(self) -> dict[str, EvaluatorFactory] | None:
        """Return a mapping of evaluator name to zero-argument factory."""
