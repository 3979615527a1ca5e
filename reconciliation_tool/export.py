"""Row projections and CSV export of a :class:`~.models.ComparisonResult`.

Projections are lossless for the compared fields (reference, amount,
status). Extra columns preserved by the normalizer are not exported.

File layout under ``out_dir``:

- ``matched_transactions.csv``
- ``internal_only_transactions.csv``
- ``provider_only_transactions.csv``
- ``unkeyed_transactions.csv`` (only when some record had no reference)

Empty partitions produce no file. Writes target ``.tmp`` first and then
``os.replace`` into place.
"""

from __future__ import annotations

import csv
import os
from collections.abc import Iterable, Mapping, Sequence
from os import PathLike
from pathlib import Path
from typing import Any

from .logging_setup import get_logger
from .models import ComparisonResult, TransactionRecord

_logger = get_logger("reconciliation_tool.export")

MATCHED_COLUMNS: tuple[str, ...] = (
    "transaction_reference",
    "internal_amount",
    "internal_status",
    "provider_amount",
    "provider_status",
)
ONE_SIDED_COLUMNS: tuple[str, ...] = ("transaction_reference", "amount", "status")
UNKEYED_COLUMNS: tuple[str, ...] = ("source", "line", "amount", "status")

MATCHED_FILENAME = "matched_transactions.csv"
INTERNAL_ONLY_FILENAME = "internal_only_transactions.csv"
PROVIDER_ONLY_FILENAME = "provider_only_transactions.csv"
UNKEYED_FILENAME = "unkeyed_transactions.csv"


def matched_rows(result: ComparisonResult) -> list[dict[str, Any]]:
    return [
        {
            "transaction_reference": pair.key,
            "internal_amount": pair.internal.amount,
            "internal_status": pair.internal.status,
            "provider_amount": pair.provider.amount,
            "provider_status": pair.provider.status,
        }
        for pair in result.matched
    ]


def one_sided_rows(records: Iterable[TransactionRecord]) -> list[dict[str, Any]]:
    return [
        {
            "transaction_reference": tx.reference,
            "amount": tx.amount,
            "status": tx.status,
        }
        for tx in records
    ]


def unkeyed_rows(result: ComparisonResult) -> list[dict[str, Any]]:
    return [
        {"source": tx.source, "line": tx.line, "amount": tx.amount, "status": tx.status}
        for tx in (*result.internal_unkeyed, *result.provider_unkeyed)
    ]


def write_csv(
    path: str | PathLike[str],
    rows: Iterable[Mapping[str, Any]],
    fieldnames: Sequence[str],
) -> Path:
    """Write ``rows`` atomically; ``None`` cells are written empty."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_name(target.name + ".tmp")
    with tmp.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(fieldnames), extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow({k: ("" if row.get(k) is None else row.get(k)) for k in fieldnames})
    os.replace(tmp, target)
    return target


def export_result(result: ComparisonResult, out_dir: str | PathLike[str]) -> list[Path]:
    """Write each non-empty partition of ``result`` under ``out_dir``.

    Returns the written paths in a fixed order: matched, internal-only,
    provider-only, unkeyed.
    """

    out = Path(out_dir)
    plan: list[tuple[str, list[dict[str, Any]], tuple[str, ...]]] = [
        (MATCHED_FILENAME, matched_rows(result), MATCHED_COLUMNS),
        (INTERNAL_ONLY_FILENAME, one_sided_rows(result.internal_only), ONE_SIDED_COLUMNS),
        (PROVIDER_ONLY_FILENAME, one_sided_rows(result.provider_only), ONE_SIDED_COLUMNS),
        (UNKEYED_FILENAME, unkeyed_rows(result), UNKEYED_COLUMNS),
    ]

    written: list[Path] = []
    for filename, rows, columns in plan:
        if not rows:
            continue
        written.append(write_csv(out / filename, rows, columns))
        _logger.info("Exported %d rows to %s", len(rows), out / filename)
    return written


__all__ = [
    "MATCHED_COLUMNS",
    "ONE_SIDED_COLUMNS",
    "UNKEYED_COLUMNS",
    "export_result",
    "matched_rows",
    "one_sided_rows",
    "unkeyed_rows",
    "write_csv",
]
