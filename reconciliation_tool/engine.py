"""Reconciliation engine: join two keyed indices into a partitioned result.

The join walks the internal index in first-seen key order. Keys present in
the provider index become :class:`~.models.MatchedPair` items and are
consumed; the rest are internal-only. Provider keys left unconsumed follow,
in provider first-seen order, as provider-only. The function is pure: it
never mutates its inputs and keeps no state between calls.
"""

from __future__ import annotations

from .comparators import ComparisonPolicy
from .errors import PreconditionError
from .indexing import KeyedIndex
from .logging_setup import get_logger
from .models import ComparisonResult, MatchedPair, TransactionRecord

_logger = get_logger("reconciliation_tool.engine")


def ensure_reconcilable(internal_size: int, provider_size: int) -> None:
    """Raise :class:`PreconditionError` unless both collections are non-empty."""

    if internal_size == 0 or provider_size == 0:
        missing = [
            name
            for name, size in (("internal", internal_size), ("provider", provider_size))
            if size == 0
        ]
        raise PreconditionError(
            f"nothing to reconcile: {' and '.join(missing)} collection is empty"
        )


def compare_pair(
    key: str,
    internal: TransactionRecord,
    provider: TransactionRecord,
    policy: ComparisonPolicy,
) -> MatchedPair:
    return MatchedPair(
        key=key,
        internal=internal,
        provider=provider,
        mismatch_amount=not policy.amount(internal.amount, provider.amount),
        mismatch_status=not policy.status(internal.status, provider.status),
    )


def reconcile(
    internal: KeyedIndex,
    provider: KeyedIndex,
    *,
    policy: ComparisonPolicy | None = None,
) -> ComparisonResult:
    """Reconcile two keyed indices.

    Raises :class:`PreconditionError` when either index was built from an
    empty collection. Otherwise returns a :class:`ComparisonResult` where every
    internal key is in exactly one of ``matched``/``internal_only`` and every
    provider key in exactly one of ``matched``/``provider_only``.
    """

    ensure_reconcilable(internal.source_size, provider.source_size)
    policy = policy or ComparisonPolicy.exact()

    matched: list[MatchedPair] = []
    internal_only: list[TransactionRecord] = []
    # Working set of provider keys still unconsumed; the index itself is
    # never mutated.
    remaining = set(provider)

    for key, internal_tx in internal.items():
        provider_tx = provider.get(key)
        if provider_tx is None:
            internal_only.append(internal_tx)
            continue
        matched.append(compare_pair(key, internal_tx, provider_tx, policy))
        remaining.discard(key)

    provider_only = [provider[key] for key in provider if key in remaining]

    result = ComparisonResult(
        matched=tuple(matched),
        internal_only=tuple(internal_only),
        provider_only=tuple(provider_only),
        internal_unkeyed=internal.unkeyed,
        provider_unkeyed=provider.unkeyed,
    )
    _logger.debug("Reconciled: %s", result.counts())
    return result


__all__ = ["compare_pair", "ensure_reconcilable", "reconcile"]
