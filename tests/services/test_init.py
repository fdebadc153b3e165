"""Tests for InitService — ledger scaffolding."""

from __future__ import annotations

import tomllib
from pathlib import Path

import pytest

from relgraph.config.settings import CONFIG_ENV_VAR, RelgraphSettings
from relgraph.services.init import InitService


@pytest.fixture(autouse=True)
def _no_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


class TestInitLedger:
    def test_creates_config_and_database(self, tmp_path: Path) -> None:
        result = InitService.init_ledger(tmp_path / "ledger")
        assert result.ok
        root = tmp_path / "ledger"
        assert (root / "relgraph.toml").is_file()
        assert (root / ".relgraph" / "relgraph.db").is_file()
        assert result.data["config_path"] == str(root / "relgraph.toml")

    def test_sparse_config(self, tmp_path: Path) -> None:
        InitService.init_ledger(tmp_path)
        data = tomllib.loads((tmp_path / "relgraph.toml").read_text())
        assert data == {}

    def test_overrides_written(self, tmp_path: Path) -> None:
        InitService.init_ledger(tmp_path, max_out_degree=1, max_as_beneficiary=2)
        config = RelgraphSettings.from_cli(root=tmp_path)
        assert config.config_path == (tmp_path / "relgraph.toml").resolve()
        assert config.graph.default_max_out_degree == 1
        assert config.beneficiary.max_as_beneficiary == 2
        assert config.beneficiary.max_as_benefactor == 5

    def test_refuses_existing(self, tmp_path: Path) -> None:
        (tmp_path / "relgraph.toml").write_text("")
        result = InitService.init_ledger(tmp_path)
        assert result.error is not None
        assert result.error.code == "ALREADY_INITIALIZED"

    @pytest.mark.parametrize(
        "overrides",
        [{"max_out_degree": 0}, {"max_as_benefactor": 0}, {"max_as_beneficiary": -1}],
    )
    def test_invalid_caps(self, tmp_path: Path, overrides: dict[str, int]) -> None:
        result = InitService.init_ledger(tmp_path, **overrides)
        assert result.error is not None
        assert result.error.code == "INVALID_CONFIG"
        assert not (tmp_path / "relgraph.toml").exists()
        assert not (tmp_path / ".relgraph").exists()

    def test_invalid_cap_names_field(self, tmp_path: Path) -> None:
        result = InitService.init_ledger(tmp_path, max_out_degree=0, max_as_benefactor=0)
        assert result.error is not None
        assert result.error.detail["fields"] == [
            "graph.default_max_out_degree",
            "beneficiary.max_as_benefactor",
        ]
