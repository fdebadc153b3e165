"""Extension layer — change notifications via pluggy.

Discovery: entry_points (pip-installed) plus ``.relgraph/plugins/``.
INVARIANT: Plugin failures are warnings, never errors.
"""

from relgraph.plugins.event_bus import EventBus
from relgraph.plugins.manager import PluginManager

__all__ = ["EventBus", "PluginManager"]
