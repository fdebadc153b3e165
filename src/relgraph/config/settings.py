"""Unified settings: CLI flags, env vars, and ``relgraph.toml`` in one object.

Priority chain (highest to lowest):
  1. Init kwargs   (CLI flags passed by Click)
  2. Env vars      (``RELGRAPH_*``, nested with ``__``, e.g.
                    ``RELGRAPH_GRAPH__DEFAULT_MAX_OUT_DEGREE=3``)
  3. TOML file     (``relgraph.toml`` found by walk-up, or ``--config``)
  4. Code defaults (the section models in :mod:`relgraph.config.models`)

The TOML file may only hold the section tables; CLI-only fields such as
``json_output`` cannot be set from it.
"""

from __future__ import annotations

import os
import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from relgraph.config.models import (
    BeneficiaryConfig,
    EventsConfig,
    GraphConfig,
    PluginsConfig,
)

CONFIG_FILENAME = "relgraph.toml"
CONFIG_ENV_VAR = "RELGRAPH_CONFIG"
TOML_SECTIONS = ("graph", "beneficiary", "events", "plugins")

# The TOML file chosen by from_cli(), read by settings_customise_sources().
_toml_path: ContextVar[Path | None] = ContextVar("relgraph_toml_path", default=None)


def find_config(start: Path | None = None) -> Path | None:
    """Locate the ledger's ``relgraph.toml``.

    A set ``RELGRAPH_CONFIG`` decides alone: its file, or None if that file
    is missing. Otherwise each directory from *start* (default: CWD) up to
    the filesystem root is checked, the way git finds ``.git/``.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        return path if path.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by one ``relgraph.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data = _read_sections(toml_path) if toml_path else {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


def _read_sections(path: Path) -> dict[str, Any]:
    """Parse *path* and check it only contains known section tables."""
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc

    unknown = sorted(set(data) - set(TOML_SECTIONS))
    if unknown:
        msg = (
            f"Unknown section(s) in {path}: {', '.join(unknown)} "
            f"(expected: {', '.join(TOML_SECTIONS)})"
        )
        raise click.ClickException(msg)
    return data


class RelgraphSettings(BaseSettings):
    """Frozen settings shared by the CLI, the ledger, and services.

    Attributes:
        root: Ledger directory (parent of ``relgraph.toml``, or CWD if no
            config was found). The database lives under ``root/.relgraph``.
        config_path: The TOML file that was loaded, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "RELGRAPH_",
        "env_nested_delimiter": "__",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # CLI flags
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    sync: bool = False

    graph: GraphConfig = Field(default_factory=GraphConfig)
    beneficiary: BeneficiaryConfig = Field(default_factory=BeneficiaryConfig)
    events: EventsConfig = Field(default_factory=EventsConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, _toml_path.get()),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> RelgraphSettings:
        """Build settings for one CLI invocation.

        An explicit *config_path* must exist. Otherwise ``relgraph.toml``
        is looked up from *root* (or the CWD) upwards, and its directory
        becomes the ledger root unless *root* is given.

        Raises:
            click.ClickException: The config file is missing, unreadable,
                or fails validation.
        """
        if config_path:
            toml_path: Path | None = Path(config_path)
            if not toml_path.is_file():
                msg = f"Config file not found: {config_path}"
                raise click.ClickException(msg)
        else:
            toml_path = find_config(root)

        if root is None:
            root = toml_path.parent if toml_path else Path.cwd()

        token = _toml_path.set(toml_path)
        try:
            return cls(root=root, config_path=toml_path, **cli_flags)
        except ValidationError as exc:
            where = toml_path or "environment"
            msg = f"Invalid configuration ({where}):\n{exc}"
            raise click.ClickException(msg) from exc
        finally:
            _toml_path.reset(token)

    @property
    def events_sync(self) -> bool:
        """Synchronous dispatch if forced by ``--sync`` or ``[events] sync``."""
        return self.sync or self.events.sync
