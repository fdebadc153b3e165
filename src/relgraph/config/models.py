"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, relgraph.toml only contains
overrides. A fresh ledger needs no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class GraphConfig(BaseModel):
    """[graph] section."""

    model_config = {"frozen": True}

    default_max_out_degree: int | None = None

    @field_validator("default_max_out_degree")
    @classmethod
    def _positive_cap(cls, value: int | None) -> int | None:
        if value is not None and value < 1:
            msg = "default_max_out_degree must be at least 1 (omit it for unbounded)"
            raise ValueError(msg)
        return value


class BeneficiaryConfig(BaseModel):
    """[beneficiary] section."""

    model_config = {"frozen": True}

    max_as_benefactor: int = Field(default=5, ge=1)
    max_as_beneficiary: int = Field(default=5, ge=1)


class EventsConfig(BaseModel):
    """[events] section."""

    model_config = {"frozen": True}

    sync: bool = False
    max_retries: int = Field(default=3, ge=1)
    max_workers: int = Field(default=2, ge=1)


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    disabled: tuple[str, ...] = ()


class RelgraphConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    graph: GraphConfig = Field(default_factory=GraphConfig)
    beneficiary: BeneficiaryConfig = Field(default_factory=BeneficiaryConfig)
    events: EventsConfig = Field(default_factory=EventsConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
