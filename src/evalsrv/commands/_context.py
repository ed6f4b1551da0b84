"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Plugins are loaded lazily so ``--help`` and
``--version`` never import entry points.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from evalsrv.config.settings import EvalsrvSettings
    from evalsrv.plugins.manager import PluginManager


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: EvalsrvSettings) -> None:
        self.settings = settings
        self._plugins: PluginManager | None = None

        from evalsrv.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            quiet=settings.quiet,
            log_json=settings.log_json,
        )

    @property
    def plugins(self) -> PluginManager:
        """The plugin manager (loaded on first access)."""
        if self._plugins is None:
            from evalsrv.plugins.manager import PluginManager

            self._plugins = PluginManager()
            self._plugins.discover_and_load()
        return self._plugins
