"""Plugin discovery and loading.

Two sources feed the manager: pip-installed packages advertising the
``relgraph.plugins`` entry point, and single-file modules dropped into
``.relgraph/plugins/``. Plugins only observe change notifications, so a
plugin that fails to load is logged and left out rather than aborting.

Names listed in ``[plugins] disabled`` are blocked before discovery;
pluggy then refuses any later registration under that name.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from collections.abc import Iterable, Iterator
from pathlib import Path
from types import ModuleType

import pluggy

from relgraph.plugins.hookspecs import RelgraphHookSpec

PROJECT_NAME = "relgraph"
ENTRY_POINT_GROUP = "relgraph.plugins"
LOCAL_MODULE_PREFIX = "relgraph_local_plugin_"

logger = logging.getLogger(__name__)

_HOOK_NAMES = frozenset(
    name for name, _ in inspect.getmembers(RelgraphHookSpec, inspect.isfunction)
)


def hook_names_of(obj: object) -> set[str]:
    """Names of the ``@hookimpl`` methods defined on a plugin class or instance."""
    marker = f"{PROJECT_NAME}_impl"
    return {
        name
        for name in dir(obj)
        if not name.startswith("_") and getattr(getattr(obj, name, None), marker, None)
    }


class PluginManager:
    """Wraps a pluggy manager bound to the relgraph hook specs."""

    def __init__(self, *, disabled: Iterable[str] = ()) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(RelgraphHookSpec)
        for name in disabled:
            self._pm.set_blocked(name)
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has run."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load entry-point plugins, then local ones from *local_dir*.

        Returns the names of every registered plugin afterwards.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._instantiate_entry_point_classes()
        if local_dir is not None and local_dir.is_dir():
            for path in sorted(local_dir.glob("*.py")):
                if not path.name.startswith("_"):
                    self._load_local_file(path)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> bool:
        """Register *plugin* under *name*.

        Returns False when the name is blocked or the plugin implements a
        hook relgraph does not define (usually a misspelt hook name).
        """
        resolved = name or plugin.__class__.__name__
        unknown = hook_names_of(plugin) - _HOOK_NAMES
        if unknown:
            logger.warning(
                "Plugin %s implements unknown hooks %s; not registered",
                resolved,
                ", ".join(sorted(unknown)),
            )
            return False
        if self._pm.register(plugin, name=resolved) is None:
            logger.info("Plugin %s is disabled", resolved)
            return False
        logger.debug("Registered plugin: %s", resolved)
        return True

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    def is_blocked(self, name: str) -> bool:
        return self._pm.is_blocked(name)

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        """Registered plugin names, sorted."""
        return sorted(
            self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()
        )

    # ------------------------------------------------------------------
    # Discovery internals
    # ------------------------------------------------------------------

    def _instantiate_entry_point_classes(self) -> None:
        """Swap plugin classes registered by entry points for instances.

        Hooks called on a bare class would leave ``self`` unbound.
        """
        for plugin in self.get_plugins():
            if not inspect.isclass(plugin) or not hook_names_of(plugin):
                continue
            name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning("Cannot instantiate entry-point plugin %s", name, exc_info=True)
                continue
            self.register_plugin(instance, name=name)

    def _load_local_file(self, path: Path) -> None:
        module = _import_file(path)
        if module is None:
            return
        for cls in _plugin_classes(module):
            name = f"{module.__name__}.{cls.__name__}"
            try:
                instance = cls()
            except Exception:
                logger.warning("Cannot instantiate %s from %s", cls.__name__, path, exc_info=True)
                continue
            self.register_plugin(instance, name=name)


def _import_file(path: Path) -> ModuleType | None:
    """Import *path* as a standalone module; None when it fails to load."""
    module_name = f"{LOCAL_MODULE_PREFIX}{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        logger.warning("No module spec for local plugin %s", path)
        return None
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        logger.warning("Failed to load local plugin %s", path, exc_info=True)
        sys.modules.pop(module_name, None)
        return None
    return module


def _plugin_classes(module: ModuleType) -> Iterator[type]:
    """Classes defined in *module* (not imported into it) that carry hooks."""
    for _, obj in inspect.getmembers(module, inspect.isclass):
        if obj.__module__ == module.__name__ and hook_names_of(obj):
            yield obj
