"""Delimited-text reader producing :class:`~.models.TransactionRecord` rows.

Parsing follows RFC 4180 rules via the stdlib :mod:`csv` module. Header
names are whitespace-trimmed before being matched against the configured
column names, blank rows are skipped, and column order does not matter.

Only the reference key is trimmed. Amount and status values are kept exactly
as read so that representation differences stay visible to the engine.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from io import StringIO
from os import PathLike
from pathlib import Path
from types import MappingProxyType

from .errors import MalformedRecordError
from .logging_setup import get_logger
from .models import INTERNAL, TransactionRecord

_logger = get_logger("reconciliation_tool.normalizer")

_CANDIDATE_DELIMITERS = ",;\t|"
_SNIFF_BYTES = 8192


@dataclass(frozen=True, slots=True)
class ColumnMap:
    """Names of the source columns holding the compared fields."""

    reference: str = "transaction_reference"
    amount: str = "amount"
    status: str = "status"


def _detect_delimiter(sample: str) -> str:
    # Only the delimiter is sniffed; quoting and spacing stay csv.excel so
    # cells are kept as read.
    try:
        return csv.Sniffer().sniff(sample, delimiters=_CANDIDATE_DELIMITERS).delimiter
    except csv.Error:
        return csv.excel.delimiter


def _is_blank(row: Mapping[str | None, object]) -> bool:
    return all(not v.strip() for v in row.values() if isinstance(v, str))


def normalize_rows(
    rows: Iterable[Mapping[str, str | None]],
    *,
    source: str = INTERNAL,
    columns: ColumnMap | None = None,
    strict: bool = False,
) -> Iterator[TransactionRecord]:
    """Convert header-keyed rows into records.

    Keys of ``rows`` are trimmed before lookup. Rows whose reference is
    missing or blank become unkeyed records; with ``strict`` they raise
    :class:`MalformedRecordError` instead.

    When ``rows`` is a :class:`csv.DictReader`, each record's ``line`` is the
    physical file line its row ended on (the header is line 1). For any
    other iterable it is the 1-based position of the row in ``rows``.
    """

    columns = columns or ColumnMap()
    compared = {columns.reference, columns.amount, columns.status}

    for position, raw in enumerate(rows, start=1):
        line = getattr(rows, "line_num", position)
        # csv.DictReader stores overflow cells under the ``None`` key.
        row = {(k.strip() if isinstance(k, str) else k): v for k, v in raw.items()}
        if _is_blank(row):
            continue

        ref_raw = row.get(columns.reference)
        reference = ref_raw.strip() if isinstance(ref_raw, str) else None
        if not reference:
            reason = (
                f"missing {columns.reference!r}"
                if ref_raw is None
                else f"blank {columns.reference!r}"
            )
            if strict:
                raise MalformedRecordError(line, reason)
            _logger.warning("%s line %d: %s; reporting as unkeyed", source, line, reason)
            reference = None

        extra = {
            k: v
            for k, v in row.items()
            if isinstance(k, str) and k not in compared and isinstance(v, str)
        }
        yield TransactionRecord(
            reference=reference,
            amount=row.get(columns.amount),
            status=row.get(columns.status),
            extra=MappingProxyType(extra),
            source=source,
            line=line,
        )


def parse_records(
    text: str,
    *,
    source: str = INTERNAL,
    columns: ColumnMap | None = None,
    strict: bool = False,
) -> list[TransactionRecord]:
    """Parse delimited ``text`` with a header row into records.

    Raises ``csv.Error`` when there is no header or the header lacks the
    reference column.
    """

    columns = columns or ColumnMap()
    text = text.removeprefix("\ufeff")
    delimiter = _detect_delimiter(text[:_SNIFF_BYTES])

    with StringIO(text, newline="") as f:
        reader = csv.DictReader(f, dialect=csv.excel, delimiter=delimiter)
        if reader.fieldnames is None:
            raise csv.Error("CSV appears to have no header row")
        reader.fieldnames = [name.strip() for name in reader.fieldnames]
        headers = set(reader.fieldnames)
        _logger.debug("%s CSV headers: %s", source, reader.fieldnames)

        if columns.reference not in headers:
            raise csv.Error(
                f"CSV header mismatch. Missing columns: {columns.reference}"
            )
        for name in (columns.amount, columns.status):
            if name not in headers:
                _logger.warning("%s CSV has no %r column; values will be empty", source, name)

        records = list(normalize_rows(reader, source=source, columns=columns, strict=strict))

    _logger.debug("Loaded %d %s records", len(records), source)
    return records


def read_records(
    path: str | PathLike[str],
    *,
    source: str = INTERNAL,
    columns: ColumnMap | None = None,
    strict: bool = False,
) -> list[TransactionRecord]:
    """Read a delimited file from ``path``. See :func:`parse_records`."""

    text = Path(path).read_text(encoding="utf-8-sig")
    return parse_records(text, source=source, columns=columns, strict=strict)


__all__ = ["ColumnMap", "normalize_rows", "parse_records", "read_records"]
