"""Data models for ``reconciliation_tool``.

Records are immutable once produced by the normalizer. Results are built
from tuples only so that a :class:`ComparisonResult` never shares mutable
state with the indices it was computed from.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

INTERNAL = "internal"
PROVIDER = "provider"

_EMPTY_EXTRA: Mapping[str, str] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """A single transaction row from either source.

    Attributes
    ----------
    reference:
        The join key. ``None`` (or blank) marks an unkeyed record.
    amount:
        The amount exactly as provided by the source; not normalized.
    status:
        Source-provided status text.
    extra:
        Additional columns preserved from the input but never compared.
    source:
        ``"internal"`` or ``"provider"``.
    line:
        1-based line number within the input file (header is line 1), when known.
    """

    reference: str | None
    amount: Any = None
    status: str | None = None
    extra: Mapping[str, str] = field(default_factory=lambda: _EMPTY_EXTRA, compare=False)
    source: str = INTERNAL
    line: int | None = field(default=None, compare=False)

    @property
    def has_key(self) -> bool:
        return self.reference is not None and self.reference.strip() != ""


@dataclass(frozen=True, slots=True)
class MatchedPair:
    """Internal and provider records sharing a key, with discrepancy flags."""

    key: str
    internal: TransactionRecord
    provider: TransactionRecord
    mismatch_amount: bool
    mismatch_status: bool

    @property
    def in_agreement(self) -> bool:
        return not (self.mismatch_amount or self.mismatch_status)

    @property
    def remarks(self) -> tuple[str, ...]:
        notes: list[str] = []
        if self.mismatch_amount:
            notes.append("Amount mismatch")
        if self.mismatch_status:
            notes.append("Status mismatch")
        return tuple(notes)


@dataclass(frozen=True, slots=True)
class ComparisonResult:
    """The engine's sole output: three disjoint keyed partitions.

    ``internal_unkeyed`` and ``provider_unkeyed`` carry records that had no
    reference key. They bypass matching and are reported separately.
    """

    matched: tuple[MatchedPair, ...] = ()
    internal_only: tuple[TransactionRecord, ...] = ()
    provider_only: tuple[TransactionRecord, ...] = ()
    internal_unkeyed: tuple[TransactionRecord, ...] = ()
    provider_unkeyed: tuple[TransactionRecord, ...] = ()

    @property
    def discrepancies(self) -> tuple[MatchedPair, ...]:
        return tuple(p for p in self.matched if not p.in_agreement)

    def counts(self) -> dict[str, int]:
        return {
            "matched": len(self.matched),
            "discrepancies": len(self.discrepancies),
            "internal_only": len(self.internal_only),
            "provider_only": len(self.provider_only),
            "internal_unkeyed": len(self.internal_unkeyed),
            "provider_unkeyed": len(self.provider_unkeyed),
        }


__all__ = [
    "INTERNAL",
    "PROVIDER",
    "TransactionRecord",
    "MatchedPair",
    "ComparisonResult",
]
