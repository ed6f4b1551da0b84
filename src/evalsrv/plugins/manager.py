"""Plugin discovery and the evaluator registry.

Discovery: entry_points (pip-installed) in the ``evalsrv.plugins`` group,
plus the built-in evaluator plugin.
INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import inspect
import logging

import pluggy

from evalsrv.errors import UnknownEvaluatorError
from evalsrv.plugins.hookspecs import EvalsrvHookSpec
from evalsrv.server.evaluator import EvaluatorFactory

PROJECT_NAME = "evalsrv"
ENTRY_POINT_GROUP = "evalsrv.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Loads plugins and resolves evaluator names to factories."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(EvalsrvHookSpec)
        self._evaluators: dict[str, EvaluatorFactory] | None = None

    def discover_and_load(self, *, entry_points: bool = True) -> list[str]:
        """Register the built-in plugin and, optionally, entry-point plugins.

        Returns the names of all registered plugins.
        """
        from evalsrv.plugins.builtins.evaluators import BuiltinEvaluatorsPlugin

        self.register_plugin(BuiltinEvaluatorsPlugin(), name="builtin-evaluators")
        if entry_points:
            try:
                self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
            except Exception:
                logger.warning("Failed to load entry-point plugins", exc_info=True)
            self._normalize_plugin_instances()
            self._evaluators = None
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        self._evaluators = None
        logger.debug("Registered plugin: %s", resolved_name)

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    def evaluators(self) -> dict[str, EvaluatorFactory]:
        """Merged name → factory mapping from every plugin.

        A plugin whose hook raises or returns a non-dict is skipped with a
        warning.  Later registrations win on name clashes.
        """
        if self._evaluators is not None:
            return self._evaluators

        merged: dict[str, EvaluatorFactory] = {}
        # get_hookimpls() lists implementations in registration order.
        for impl in self._pm.hook.evalsrv_register_evaluators.get_hookimpls():
            try:
                mapping = impl.function()
            except Exception:
                logger.warning(
                    "Failed to collect evaluators from plugin %s", impl.plugin_name, exc_info=True
                )
                continue
            if mapping is None:
                continue
            if not isinstance(mapping, dict):
                logger.warning(
                    "Plugin %s returned non-dict evaluator registrations", impl.plugin_name
                )
                continue
            merged.update(mapping)

        self._evaluators = merged
        return merged

    def get_factory(self, name: str) -> EvaluatorFactory:
        """Return the factory registered under *name*."""
        factories = self.evaluators()
        factory = factories.get(name)
        if factory is None:
            raise UnknownEvaluatorError(name, sorted(factories))
        return factory

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly, which
        leaves ``self`` unbound at hook call time.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)

            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s", plugin_name, exc_info=True
                )
                continue

            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)
