from __future__ import annotations

import io

from rich.console import Console

from reconciliation_tool import build_index, reconcile
from reconciliation_tool.models import PROVIDER
from reconciliation_tool.report import render_result, summary_text


def _render(result, **kwargs) -> str:
    buf = io.StringIO()
    render_result(result, console=Console(file=buf, width=200, color_system=None), **kwargs)
    return buf.getvalue()


def test_missing_values_render_as_placeholder(tx):
    result = reconcile(
        build_index([tx("A", "", None)]),
        build_index([tx("A", "5", "paid", source=PROVIDER)]),
    )

    out = _render(result)

    assert "Amount mismatch" in out
    assert "Status mismatch" in out
    assert " - " in out


def test_agreeing_pair_is_marked_ok(tx):
    result = reconcile(
        build_index([tx("A", "5", "paid")]),
        build_index([tx("A", "5", "paid", source=PROVIDER)]),
    )

    assert "OK" in _render(result)


def test_unkeyed_section_only_when_present(tx):
    provider = build_index([tx("A", "5", "paid", source=PROVIDER)])
    clean = reconcile(build_index([tx("A", "5", "paid")]), provider)
    dirty = reconcile(build_index([tx("A", "5", "paid"), tx(None, "9", line=4)]), provider)

    assert "without a transaction reference" not in _render(clean)
    assert "without a transaction reference" in _render(dirty)
    assert "1 unkeyed" in summary_text(dirty).plain
