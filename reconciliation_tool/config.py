"""Settings for a reconciliation run.

Values come from ``RECON_*`` environment variables (the CLI loads a local
``.env`` first) and may be overridden by command-line options.

=========================  ===========================  =======================
Setting                    Environment variable         Default
=========================  ===========================  =======================
``reference_column``       ``RECON_REFERENCE_COLUMN``   ``transaction_reference``
``amount_column``          ``RECON_AMOUNT_COLUMN``      ``amount``
``status_column``          ``RECON_STATUS_COLUMN``      ``status``
``duplicate_policy``       ``RECON_DUPLICATES``         ``keep-last``
``amount_compare``         ``RECON_AMOUNT_COMPARE``     ``exact``
``status_compare``         ``RECON_STATUS_COMPARE``     ``exact``
``strict``                 ``RECON_STRICT``             ``false``
``out_dir``                ``RECON_OUT_DIR``            unset
=========================  ===========================  =======================
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from .comparators import COMPARATORS, ComparisonPolicy
from .indexing import DuplicatePolicy
from .normalizer import ColumnMap

_ENV_PREFIX = "RECON_"
_ENV_FIELDS: dict[str, str] = {
    "REFERENCE_COLUMN": "reference_column",
    "AMOUNT_COLUMN": "amount_column",
    "STATUS_COLUMN": "status_column",
    "DUPLICATES": "duplicate_policy",
    "AMOUNT_COMPARE": "amount_compare",
    "STATUS_COMPARE": "status_compare",
    "STRICT": "strict",
    "OUT_DIR": "out_dir",
}
_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


class ReconcileSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    reference_column: str = "transaction_reference"
    amount_column: str = "amount"
    status_column: str = "status"
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.KEEP_LAST
    amount_compare: str = "exact"
    status_compare: str = "exact"
    strict: bool = False
    out_dir: Path | None = None

    @field_validator("reference_column", "amount_column", "status_column")
    @classmethod
    def _column_non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("column name must be non-empty")
        return v

    @field_validator("amount_compare", "status_compare")
    @classmethod
    def _known_comparator(cls, v: str) -> str:
        name = v.lower()
        if name not in COMPARATORS:
            raise ValueError(f"unknown comparator {v!r}; allowed: {sorted(COMPARATORS)}")
        return name

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, **overrides: Any
    ) -> ReconcileSettings:
        """Build settings from ``RECON_*`` variables, then apply ``overrides``.

        Overrides whose value is ``None`` are ignored so CLI options left
        unset fall through to the environment.
        """

        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for suffix, field in _ENV_FIELDS.items():
            raw = env.get(_ENV_PREFIX + suffix)
            if raw is None:
                continue
            if field == "strict":
                values[field] = _parse_bool(_ENV_PREFIX + suffix, raw)
            elif field == "out_dir":
                values[field] = Path(raw) if raw.strip() else None
            else:
                values[field] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def columns(self) -> ColumnMap:
        return ColumnMap(
            reference=self.reference_column,
            amount=self.amount_column,
            status=self.status_column,
        )

    @property
    def comparison(self) -> ComparisonPolicy:
        return ComparisonPolicy.from_names(
            amount=self.amount_compare, status=self.status_compare
        )


def _parse_bool(name: str, raw: str) -> bool:
    v = raw.strip().lower()
    if v in _TRUTHY:
        return True
    if v in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


__all__ = ["ReconcileSettings"]
