from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from reconciliation_tool.comparators import decimal_equal, exact_equal
from reconciliation_tool.config import ReconcileSettings
from reconciliation_tool.indexing import DuplicatePolicy


def test_defaults():
    settings = ReconcileSettings.from_env({})

    assert settings.duplicate_policy is DuplicatePolicy.KEEP_LAST
    assert settings.columns.reference == "transaction_reference"
    assert settings.comparison.amount is exact_equal
    assert settings.strict is False
    assert settings.out_dir is None


def test_environment_values():
    settings = ReconcileSettings.from_env(
        {
            "RECON_REFERENCE_COLUMN": "ref",
            "RECON_DUPLICATES": "reject",
            "RECON_AMOUNT_COMPARE": "Decimal",
            "RECON_STRICT": "yes",
            "RECON_OUT_DIR": "reports",
        }
    )

    assert settings.columns.reference == "ref"
    assert settings.duplicate_policy is DuplicatePolicy.REJECT
    assert settings.comparison.amount is decimal_equal
    assert settings.strict is True
    assert settings.out_dir == Path("reports")


def test_overrides_win_and_none_falls_through():
    settings = ReconcileSettings.from_env(
        {"RECON_DUPLICATES": "keep-first", "RECON_STATUS_COMPARE": "casefold"},
        duplicate_policy="collect-all",
        status_compare=None,
    )

    assert settings.duplicate_policy is DuplicatePolicy.COLLECT_ALL
    assert settings.status_compare == "casefold"


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("RECON_AMOUNT_COLUMN", "value")
    assert ReconcileSettings.from_env().amount_column == "value"


@pytest.mark.parametrize(
    "env",
    [
        {"RECON_DUPLICATES": "newest"},
        {"RECON_AMOUNT_COMPARE": "fuzzy"},
        {"RECON_REFERENCE_COLUMN": "  "},
    ],
)
def test_invalid_values_are_rejected(env):
    with pytest.raises(ValidationError):
        ReconcileSettings.from_env(env)


def test_invalid_boolean():
    with pytest.raises(ValueError, match="RECON_STRICT"):
        ReconcileSettings.from_env({"RECON_STRICT": "maybe"})
