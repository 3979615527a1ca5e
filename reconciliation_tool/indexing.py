"""Keyed index construction with an explicit duplicate-key policy.

A :class:`KeyedIndex` maps reference keys to a single representative record
and iterates in first-seen key order. How repeated keys are resolved is a
caller decision expressed through :class:`DuplicatePolicy`:

- ``KEEP_LAST`` (default): the stored record is the last occurrence, but the
  key keeps the position of its first occurrence.
- ``KEEP_FIRST``: the first occurrence wins; later ones are ignored.
- ``REJECT``: a repeated key raises :class:`~.errors.DuplicateKeyError`.
- ``COLLECT_ALL``: like ``KEEP_LAST`` for matching, and every occurrence is
  retained and available through :meth:`KeyedIndex.occurrences`.

Records without a key never enter the mapping. They are kept, in input
order, in :attr:`KeyedIndex.unkeyed`.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import StrEnum

from .errors import DuplicateKeyError
from .logging_setup import get_logger
from .models import TransactionRecord

_logger = get_logger("reconciliation_tool.indexing")


class DuplicatePolicy(StrEnum):
    KEEP_LAST = "keep-last"
    KEEP_FIRST = "keep-first"
    REJECT = "reject"
    COLLECT_ALL = "collect-all"


class KeyedIndex:
    """Ordered, read-only view from reference key to record."""

    __slots__ = (
        "_entries",
        "_occurrences",
        "_duplicate_keys",
        "_unkeyed",
        "_policy",
        "_source_size",
    )

    def __init__(
        self,
        entries: dict[str, TransactionRecord],
        occurrences: dict[str, tuple[TransactionRecord, ...]],
        duplicate_keys: tuple[str, ...],
        unkeyed: tuple[TransactionRecord, ...],
        *,
        policy: DuplicatePolicy,
        source_size: int,
    ) -> None:
        self._entries = entries
        self._occurrences = occurrences
        self._duplicate_keys = duplicate_keys
        self._unkeyed = unkeyed
        self._policy = policy
        self._source_size = source_size

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __getitem__(self, key: str) -> TransactionRecord:
        return self._entries[key]

    def get(self, key: str) -> TransactionRecord | None:
        return self._entries.get(key)

    def keys(self) -> list[str]:
        return list(self._entries)

    def items(self) -> Iterator[tuple[str, TransactionRecord]]:
        return iter(self._entries.items())

    def occurrences(self, key: str) -> tuple[TransactionRecord, ...]:
        """Every record seen for ``key`` under ``COLLECT_ALL``; otherwise the
        representative alone. Unknown keys yield an empty tuple."""

        if key not in self._entries:
            return ()
        return self._occurrences.get(key, (self._entries[key],))

    @property
    def duplicate_keys(self) -> tuple[str, ...]:
        return self._duplicate_keys

    @property
    def unkeyed(self) -> tuple[TransactionRecord, ...]:
        return self._unkeyed

    @property
    def policy(self) -> DuplicatePolicy:
        return self._policy

    @property
    def source_size(self) -> int:
        """Number of records the index was built from, keyed or not."""
        return self._source_size

    def __repr__(self) -> str:  # pragma: no cover - trivial repr
        return (
            f"KeyedIndex(keys={len(self._entries)}, unkeyed={len(self._unkeyed)}, "
            f"policy={self._policy.value!r})"
        )


def build_index(
    records: Iterable[TransactionRecord],
    *,
    policy: DuplicatePolicy | str = DuplicatePolicy.KEEP_LAST,
) -> KeyedIndex:
    """Index ``records`` by reference in a single pass.

    Total over any input sequence (including empty) except under the
    ``REJECT`` policy, which raises on the first repeated key.
    """

    policy = DuplicatePolicy(policy)
    entries: dict[str, TransactionRecord] = {}
    # Tracked for every policy so duplicate keys can be reported; only
    # COLLECT_ALL exposes the full history through occurrences().
    seen: dict[str, list[TransactionRecord]] = {}
    unkeyed: list[TransactionRecord] = []
    total = 0

    for record in records:
        total += 1
        if not record.has_key:
            unkeyed.append(record)
            continue
        key = record.reference
        assert key is not None
        if key not in entries:
            entries[key] = record
            seen[key] = [record]
            continue

        if policy is DuplicatePolicy.REJECT:
            raise DuplicateKeyError(key, seen[key][0].line, record.line)
        seen[key].append(record)
        if policy is not DuplicatePolicy.KEEP_FIRST:
            # Reassigning an existing dict key keeps its insertion position.
            entries[key] = record

    occurrences: dict[str, tuple[TransactionRecord, ...]] = {}
    if policy is DuplicatePolicy.COLLECT_ALL:
        occurrences = {k: tuple(v) for k, v in seen.items()}
    duplicate_keys = tuple(k for k, v in seen.items() if len(v) > 1)

    index = KeyedIndex(
        entries,
        occurrences,
        duplicate_keys,
        tuple(unkeyed),
        policy=policy,
        source_size=total,
    )
    if duplicate_keys or unkeyed:
        _logger.info(
            "Indexed %d records: %d keys, %d duplicate keys (%s), %d unkeyed",
            total,
            len(entries),
            len(duplicate_keys),
            policy.value,
            len(unkeyed),
        )
    else:
        _logger.debug("Indexed %d records into %d keys", total, len(entries))
    return index


__all__ = ["DuplicatePolicy", "KeyedIndex", "build_index"]
