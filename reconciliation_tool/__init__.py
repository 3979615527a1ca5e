"""Public interface for the ``reconciliation_tool`` package.

Reconciles an internal transaction export against a provider statement by
reference key. This module only re-exports the stable import surface.
"""

from .comparators import ComparisonPolicy, casefold_equal, decimal_equal, exact_equal
from .engine import reconcile
from .errors import (
    DuplicateKeyError,
    MalformedRecordError,
    PreconditionError,
    ReconciliationBusyError,
    ReconciliationCancelled,
    ReconciliationError,
)
from .export import export_result, matched_rows, one_sided_rows, unkeyed_rows
from .indexing import DuplicatePolicy, KeyedIndex, build_index
from .models import ComparisonResult, MatchedPair, TransactionRecord
from .normalizer import ColumnMap, parse_records, read_records
from .session import CancellationToken, ReconciliationSession, reconcile_collections

__all__ = [
    # Core
    "build_index",
    "reconcile",
    "reconcile_collections",
    "ReconciliationSession",
    "CancellationToken",
    # Models / policies
    "TransactionRecord",
    "MatchedPair",
    "ComparisonResult",
    "KeyedIndex",
    "DuplicatePolicy",
    "ComparisonPolicy",
    "exact_equal",
    "decimal_equal",
    "casefold_equal",
    # I/O boundary
    "ColumnMap",
    "parse_records",
    "read_records",
    "export_result",
    "matched_rows",
    "one_sided_rows",
    "unkeyed_rows",
    # Errors
    "ReconciliationError",
    "PreconditionError",
    "MalformedRecordError",
    "DuplicateKeyError",
    "ReconciliationBusyError",
    "ReconciliationCancelled",
]
