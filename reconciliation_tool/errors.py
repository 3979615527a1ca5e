"""Exception types raised by ``reconciliation_tool``.

All errors derive from :class:`ReconciliationError` so callers (notably the
CLI) can handle the package's failure modes with a single ``except`` clause
while still distinguishing them when needed.
"""

from __future__ import annotations


class ReconciliationError(Exception):
    """Base class for all reconciliation failures."""


class PreconditionError(ReconciliationError):
    """Raised when a reconciliation is attempted with an empty collection.

    No indexing or join work is performed before this is raised.
    """

    def __init__(self, message: str = "nothing to reconcile") -> None:
        super().__init__(message)


class MalformedRecordError(ReconciliationError):
    """A row is missing its reference key.

    Only raised when the caller opts into strict loading; the default policy
    routes such rows to the unkeyed bucket instead.
    """

    def __init__(self, line: int | None, reason: str) -> None:
        self.line = line
        self.reason = reason
        where = f"line {line}" if line is not None else "row"
        super().__init__(f"{where}: {reason}")


class DuplicateKeyError(ReconciliationError):
    """Raised by the ``reject`` duplicate policy when a key repeats."""

    def __init__(self, key: str, first_line: int | None, duplicate_line: int | None) -> None:
        self.key = key
        self.first_line = first_line
        self.duplicate_line = duplicate_line
        super().__init__(
            f"duplicate reference {key!r} (first seen at line {first_line}, "
            f"repeated at line {duplicate_line})"
        )


class ReconciliationBusyError(ReconciliationError):
    """A session was asked to reconcile while a previous run is in flight."""


class ReconciliationCancelled(ReconciliationError):
    """A background reconciliation observed its cancellation token."""


__all__ = [
    "ReconciliationError",
    "PreconditionError",
    "MalformedRecordError",
    "DuplicateKeyError",
    "ReconciliationBusyError",
    "ReconciliationCancelled",
]
