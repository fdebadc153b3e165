"""InitService — ledger directory scaffolding.

Writes a sparse ``relgraph.toml`` (only the sections the caller
overrides) and creates the database under ``.relgraph/``. Runs before
any settings exist, so it takes no Ledger.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

from pydantic import ValidationError

from relgraph.config.models import RelgraphConfig
from relgraph.config.settings import CONFIG_FILENAME
from relgraph.infrastructure.database.engine import DB_FILENAME, STATE_DIRNAME, init_database
from relgraph.services.result import ServiceResult


def _render_config(
    *,
    max_out_degree: int | None,
    max_as_benefactor: int | None,
    max_as_beneficiary: int | None,
) -> str:
    lines = ["# relgraph ledger configuration. Omitted keys use built-in defaults.", ""]
    if max_out_degree is not None:
        lines += ["[graph]", f"default_max_out_degree = {max_out_degree}", ""]
    beneficiary: list[str] = []
    if max_as_benefactor is not None:
        beneficiary.append(f"max_as_benefactor = {max_as_benefactor}")
    if max_as_beneficiary is not None:
        beneficiary.append(f"max_as_beneficiary = {max_as_beneficiary}")
    if beneficiary:
        lines += ["[beneficiary]", *beneficiary, ""]
    return "\n".join(lines)


class InitService:
    """Creates new ledgers."""

    @staticmethod
    def init_ledger(
        path: Path,
        *,
        max_out_degree: int | None = None,
        max_as_benefactor: int | None = None,
        max_as_beneficiary: int | None = None,
    ) -> ServiceResult:
        """Initialize a ledger at *path*.

        Fails with ALREADY_INITIALIZED if *path* already holds a
        ``relgraph.toml``, and with INVALID_CONFIG if a cap is below 1.
        """
        op = "init_ledger"
        config_path = path / CONFIG_FILENAME
        if config_path.exists():
            return ServiceResult.failure(
                op,
                "ALREADY_INITIALIZED",
                f"{config_path} already exists",
                {"path": str(config_path)},
            )

        text = _render_config(
            max_out_degree=max_out_degree,
            max_as_benefactor=max_as_benefactor,
            max_as_beneficiary=max_as_beneficiary,
        )
        # The file is parsed back exactly as settings will read it.
        try:
            RelgraphConfig.model_validate(tomllib.loads(text))
        except ValidationError as exc:
            fields = [".".join(str(part) for part in err["loc"]) for err in exc.errors()]
            return ServiceResult.failure(
                op, "INVALID_CONFIG", f"Invalid ledger configuration: {exc}", {"fields": fields}
            )

        path.mkdir(parents=True, exist_ok=True)
        config_path.write_text(text, encoding="utf-8")
        engine = init_database(path)
        engine.dispose()

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "root": str(path),
                "config_path": str(config_path),
                "database": str(path / STATE_DIRNAME / DB_FILENAME),
            },
        )
