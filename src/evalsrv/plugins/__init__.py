"""Extension layer — evaluator plugins via pluggy.

INVARIANT: Plugin failures are warnings, never errors.
"""

from evalsrv.plugins.manager import PluginManager

__all__ = ["PluginManager"]
