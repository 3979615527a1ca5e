"""Per-field comparison policy for matched pairs.

A comparator is a callable ``(left, right) -> bool`` returning ``True`` when
the two values should be considered equal. The default policy compares both
amount and status by exact representation: ``"100"`` and ``"100.00"`` are
different amounts. Deployments that receive differently formatted statements
can opt into decimal amount comparison and case-folded status comparison.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, TypeAlias

Comparator: TypeAlias = Callable[[Any, Any], bool]


def exact_equal(left: Any, right: Any) -> bool:
    """Same type and equal value (``"100"`` never equals ``100``)."""
    return type(left) is type(right) and left == right


def parse_decimal(raw: Any) -> Decimal:
    """Parse a source amount into a :class:`~decimal.Decimal`.

    Accepts surrounding whitespace, a leading ``+``/``-``, a ``$`` symbol,
    parentheses for negatives, and ``,`` thousands separators. Raises
    ``ValueError`` when the value cannot be parsed.
    """

    if isinstance(raw, bool) or raw is None:
        raise ValueError(f"invalid amount: {raw!r}")
    if isinstance(raw, Decimal):
        return raw
    if isinstance(raw, int | float):
        return Decimal(str(raw))
    s = str(raw).strip()
    if not s:
        raise ValueError("amount is empty")

    negative = False
    # Strip sign, currency symbol, and parentheses in any order until stable.
    while True:
        changed = False
        if s.startswith("+"):
            s = s[1:].lstrip()
            changed = True
        elif s.startswith("-"):
            negative = True
            s = s[1:].lstrip()
            changed = True
        if s.startswith("$"):
            s = s[1:].lstrip()
            changed = True
        if s.startswith("(") and s.endswith(")") and len(s) >= 2:
            negative = True
            s = s[1:-1].strip()
            changed = True
        if not changed:
            break

    s = s.replace(",", "").strip()
    try:
        d = Decimal(s)
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {raw!r}") from exc
    if not d.is_finite():
        raise ValueError(f"invalid amount: {raw!r}")
    return -abs(d) if negative else d


def decimal_equal(left: Any, right: Any) -> bool:
    """Numeric equality after parsing; exact comparison when either side
    does not parse as an amount."""

    try:
        return parse_decimal(left) == parse_decimal(right)
    except ValueError:
        return exact_equal(left, right)


def casefold_equal(left: Any, right: Any) -> bool:
    if isinstance(left, str) and isinstance(right, str):
        return left.casefold() == right.casefold()
    return exact_equal(left, right)


COMPARATORS: dict[str, Comparator] = {
    "exact": exact_equal,
    "decimal": decimal_equal,
    "casefold": casefold_equal,
}


def get_comparator(name: str) -> Comparator:
    try:
        return COMPARATORS[name.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown comparator: {name!r}. Allowed: {sorted(COMPARATORS)}"
        ) from None


@dataclass(frozen=True, slots=True)
class ComparisonPolicy:
    """Comparators applied to the amount and status fields of a pair."""

    amount: Comparator = exact_equal
    status: Comparator = exact_equal

    @classmethod
    def exact(cls) -> ComparisonPolicy:
        return cls()

    @classmethod
    def from_names(cls, *, amount: str = "exact", status: str = "exact") -> ComparisonPolicy:
        return cls(amount=get_comparator(amount), status=get_comparator(status))


__all__ = [
    "Comparator",
    "ComparisonPolicy",
    "COMPARATORS",
    "casefold_equal",
    "decimal_equal",
    "exact_equal",
    "get_comparator",
    "parse_decimal",
]
