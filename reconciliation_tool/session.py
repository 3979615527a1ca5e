"""Orchestration layer owning the loaded collections and the latest result.

The engine is stateless; this module is where state lives. A
:class:`ReconciliationSession` holds the two collections as tuples, the most
recent :class:`~.models.ComparisonResult`, and a single-slot lock so a run
cannot start while another is in flight on the same pair.

Loading or clearing either side discards the latest result.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from concurrent.futures import Executor, Future

from .comparators import ComparisonPolicy
from .engine import ensure_reconcilable, reconcile
from .errors import ReconciliationBusyError, ReconciliationCancelled
from .indexing import DuplicatePolicy, build_index
from .logging_setup import get_logger
from .models import ComparisonResult, TransactionRecord

_logger = get_logger("reconciliation_tool.session")


class CancellationToken:
    """Cooperative cancellation flag checked between reconciliation phases."""

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ReconciliationCancelled("reconciliation cancelled")


def reconcile_collections(
    internal: Iterable[TransactionRecord],
    provider: Iterable[TransactionRecord],
    *,
    duplicate_policy: DuplicatePolicy | str = DuplicatePolicy.KEEP_LAST,
    comparison: ComparisonPolicy | None = None,
    cancel: CancellationToken | None = None,
) -> ComparisonResult:
    """Index both collections and reconcile them.

    The empty-collection precondition is checked before any indexing.
    ``cancel`` is checked after indexing, before the join.
    """

    internal_seq = tuple(internal)
    provider_seq = tuple(provider)
    ensure_reconcilable(len(internal_seq), len(provider_seq))

    internal_index = build_index(internal_seq, policy=duplicate_policy)
    provider_index = build_index(provider_seq, policy=duplicate_policy)
    if cancel is not None:
        cancel.raise_if_cancelled()
    return reconcile(internal_index, provider_index, policy=comparison)


class ReconciliationSession:
    """Holds an internal/provider collection pair and their latest result."""

    def __init__(
        self,
        *,
        duplicate_policy: DuplicatePolicy | str = DuplicatePolicy.KEEP_LAST,
        comparison: ComparisonPolicy | None = None,
    ) -> None:
        self.duplicate_policy = DuplicatePolicy(duplicate_policy)
        self.comparison = comparison or ComparisonPolicy.exact()
        self._internal: tuple[TransactionRecord, ...] = ()
        self._provider: tuple[TransactionRecord, ...] = ()
        self._result: ComparisonResult | None = None
        self._generation = 0
        self._busy = threading.Lock()
        self._state = threading.Lock()

    # ---- collections --------------------------------------------------------

    @property
    def internal(self) -> tuple[TransactionRecord, ...]:
        return self._internal

    @property
    def provider(self) -> tuple[TransactionRecord, ...]:
        return self._provider

    @property
    def result(self) -> ComparisonResult | None:
        return self._result

    @property
    def busy(self) -> bool:
        return self._busy.locked()

    def load_internal(self, records: Iterable[TransactionRecord]) -> int:
        with self._state:
            self._internal = tuple(records)
            self._generation += 1
            self._result = None
            return len(self._internal)

    def load_provider(self, records: Iterable[TransactionRecord]) -> int:
        with self._state:
            self._provider = tuple(records)
            self._generation += 1
            self._result = None
            return len(self._provider)

    def clear_internal(self) -> None:
        self.load_internal(())

    def clear_provider(self) -> None:
        self.load_provider(())

    # ---- running ------------------------------------------------------------

    def _acquire(self) -> None:
        if not self._busy.acquire(blocking=False):
            raise ReconciliationBusyError("a reconciliation is already running")

    def _execute(self, cancel: CancellationToken | None) -> ComparisonResult:
        with self._state:
            internal, provider = self._internal, self._provider
            generation = self._generation
        result = reconcile_collections(
            internal,
            provider,
            duplicate_policy=self.duplicate_policy,
            comparison=self.comparison,
            cancel=cancel,
        )
        with self._state:
            # A reload during the run invalidates this result.
            if generation == self._generation:
                self._result = result
            else:
                _logger.info("Collections changed during reconciliation; result discarded")
        return result

    def _execute_and_release(self, cancel: CancellationToken | None) -> ComparisonResult:
        try:
            return self._execute(cancel)
        finally:
            self._busy.release()

    def run(self) -> ComparisonResult:
        """Reconcile the loaded collections synchronously."""

        self._acquire()
        return self._execute_and_release(None)

    def submit(
        self, executor: Executor, *, cancel: CancellationToken | None = None
    ) -> Future[ComparisonResult]:
        """Run on ``executor``.

        The busy lock is released by the worker before the future resolves,
        so a caller woken by ``result()`` can start the next run at once.
        """

        self._acquire()
        try:
            future = executor.submit(self._execute_and_release, cancel)
        except BaseException:
            self._busy.release()
            raise
        def _release_if_cancelled(f: Future[ComparisonResult]) -> None:
            # A future cancelled before it started never reaches the worker.
            if f.cancelled():
                self._busy.release()

        future.add_done_callback(_release_if_cancelled)
        return future


__all__ = [
    "CancellationToken",
    "ReconciliationSession",
    "reconcile_collections",
]
