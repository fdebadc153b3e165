"""Tests for PluginManager — registration and local discovery."""

from __future__ import annotations

import sys
from pathlib import Path

import pluggy

from relgraph.plugins.builtins.audit import AuditPlugin
from relgraph.plugins.manager import PluginManager, hook_names_of

hookimpl = pluggy.HookimplMarker("relgraph")

# -- Plugin source code used in tests ------------------------------------------

_VALID_PLUGIN_SRC = """\
import pluggy

hookimpl = pluggy.HookimplMarker("relgraph")

calls: list[dict] = []


class LocalCapturePlugin:
    \"\"\"Captures graph_created calls for verification.\"\"\"

    @hookimpl
    def graph_created(self, graph_id: str, kind: str) -> None:
        calls.append({"graph_id": graph_id, "kind": kind})
"""

_SYNTAX_ERROR_SRC = """\
def broken(
    # missing closing paren and colon
"""

_NO_HOOKS_SRC = """\
class PlainClass:
    \"\"\"A class with no hookimpl-decorated methods.\"\"\"
    def hello(self) -> str:
        return "world"
"""


class Counter:
    def __init__(self) -> None:
        self.count = 0

    @hookimpl
    def graph_destroyed(self, graph_id: str, kind: str) -> None:
        self.count += 1


class Misspelt:
    @hookimpl
    def graph_creatd(self, graph_id: str, kind: str) -> None:
        pass


class TestRegistration:
    def test_register_and_dispatch(self) -> None:
        pm = PluginManager()
        plugin = Counter()
        pm.register_plugin(plugin)
        pm.hook.graph_destroyed(graph_id="g", kind="relationship")
        assert plugin.count == 1
        assert "Counter" in pm.list_plugin_names()

    def test_unregister(self) -> None:
        pm = PluginManager()
        plugin = Counter()
        pm.register_plugin(plugin, name="counter")
        pm.unregister(plugin)
        pm.hook.graph_destroyed(graph_id="g", kind="relationship")
        assert plugin.count == 0
        assert pm.get_plugins() == []

    def test_not_loaded_until_discovery(self, tmp_path: Path) -> None:
        pm = PluginManager()
        assert not pm.is_loaded
        pm.discover_and_load(local_dir=tmp_path)
        assert pm.is_loaded

    def test_hook_names_of(self) -> None:
        assert "graph_created" in hook_names_of(AuditPlugin)
        assert hook_names_of(Counter()) == {"graph_destroyed"}
        assert hook_names_of(Path) == set()

    def test_rejects_unknown_hook(self) -> None:
        pm = PluginManager()
        assert pm.register_plugin(Misspelt()) is False
        assert pm.get_plugins() == []

    def test_disabled_name_is_refused(self) -> None:
        pm = PluginManager(disabled=["counter"])
        assert pm.is_blocked("counter")
        assert pm.register_plugin(Counter(), name="counter") is False
        assert pm.register_plugin(Counter(), name="other") is True
        assert pm.list_plugin_names() == ["other"]


class TestLocalDiscovery:
    def test_discovers_local_plugin(self, tmp_path: Path) -> None:
        (tmp_path / "capture.py").write_text(_VALID_PLUGIN_SRC, encoding="utf-8")
        pm = PluginManager()
        names = pm.discover_and_load(local_dir=tmp_path)
        assert "relgraph_local_plugin_capture.LocalCapturePlugin" in names

        pm.hook.graph_created(graph_id="graph_0123456789ab", kind="beneficiary")
        module = sys.modules["relgraph_local_plugin_capture"]
        assert module.calls == [{"graph_id": "graph_0123456789ab", "kind": "beneficiary"}]

    def test_skips_bad_plugin_gracefully(self, tmp_path: Path) -> None:
        (tmp_path / "broken.py").write_text(_SYNTAX_ERROR_SRC, encoding="utf-8")
        pm = PluginManager()
        names = pm.discover_and_load(local_dir=tmp_path)
        assert not any("broken" in name for name in names)

    def test_skips_classes_without_hooks(self, tmp_path: Path) -> None:
        (tmp_path / "plain.py").write_text(_NO_HOOKS_SRC, encoding="utf-8")
        pm = PluginManager()
        assert not any("plain" in name for name in pm.discover_and_load(local_dir=tmp_path))

    def test_skips_private_files(self, tmp_path: Path) -> None:
        (tmp_path / "_helper.py").write_text(_VALID_PLUGIN_SRC, encoding="utf-8")
        pm = PluginManager()
        assert not any("_helper" in name for name in pm.discover_and_load(local_dir=tmp_path))

    def test_missing_dir_is_fine(self, tmp_path: Path) -> None:
        pm = PluginManager()
        pm.discover_and_load(local_dir=tmp_path / "nope")
        assert pm.is_loaded
