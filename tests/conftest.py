"""Pytest configuration and shared fixtures.

Settings are read from ``RECON_*`` environment variables. A developer's
shell (or a ``.env`` picked up by the CLI) could otherwise leak into tests,
so an autouse fixture clears them and runs each test from its own temporary
working directory.
"""

from __future__ import annotations

import os
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from reconciliation_tool import TransactionRecord
from reconciliation_tool.models import INTERNAL


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("RECON_"):
            monkeypatch.delenv(name, raising=False)
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)


@pytest.fixture
def tx() -> Callable[..., TransactionRecord]:
    """Factory for records: ``tx("A", "100", "paid", source="provider")``."""

    def _make(
        reference: str | None,
        amount: object = None,
        status: str | None = None,
        *,
        source: str = INTERNAL,
        line: int | None = None,
    ) -> TransactionRecord:
        return TransactionRecord(
            reference=reference, amount=amount, status=status, source=source, line=line
        )

    return _make


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write dedented CSV text to ``tmp_path/name`` and return the path."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(text).lstrip("\n"), encoding="utf-8")
        return path

    return _write
