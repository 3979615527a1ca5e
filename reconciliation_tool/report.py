"""Terminal rendering of a reconciliation result (rich-based)."""

from __future__ import annotations

from typing import Any

from rich.console import Console, Group
from rich.table import Table
from rich.text import Text

from .indexing import KeyedIndex
from .models import ComparisonResult, TransactionRecord

_PLACEHOLDER = "-"


def _cell(value: Any) -> str:
    if value is None:
        return _PLACEHOLDER
    text = str(value)
    return text if text != "" else _PLACEHOLDER


def matched_table(result: ComparisonResult, *, show_agreeing: bool = True) -> Table:
    table = Table(
        title=f"Matched Transactions ({len(result.matched)})",
        title_style="bold green",
        expand=True,
    )
    for header in (
        "Transaction Ref",
        "Internal Amount",
        "Internal Status",
        "Provider Amount",
        "Provider Status",
        "Remarks",
    ):
        table.add_column(header)

    for pair in result.matched:
        if pair.in_agreement and not show_agreeing:
            continue
        remarks = (
            Text(", ".join(pair.remarks), style="bold red")
            if pair.remarks
            else Text("OK", style="bold green")
        )
        table.add_row(
            _cell(pair.key),
            _cell(pair.internal.amount),
            _cell(pair.internal.status),
            _cell(pair.provider.amount),
            _cell(pair.provider.status),
            remarks,
            style=None if pair.in_agreement else "on #fff3cd",
        )
    return table


def records_table(title: str, records: tuple[TransactionRecord, ...], *, style: str) -> Table:
    table = Table(title=f"{title} ({len(records)})", title_style=style, expand=True)
    table.add_column("Transaction Ref")
    table.add_column("Amount")
    table.add_column("Status")
    for tx in records:
        table.add_row(_cell(tx.reference), _cell(tx.amount), _cell(tx.status))
    return table


def unkeyed_table(result: ComparisonResult) -> Table:
    table = Table(title="Rows without a transaction reference", title_style="bold magenta")
    table.add_column("Source")
    table.add_column("Line", justify="right")
    table.add_column("Amount")
    table.add_column("Status")
    for tx in (*result.internal_unkeyed, *result.provider_unkeyed):
        table.add_row(tx.source, _cell(tx.line), _cell(tx.amount), _cell(tx.status))
    return table


def summary_text(result: ComparisonResult) -> Text:
    counts = result.counts()
    text = Text("Comparison completed: ")
    text.append(f"{counts['matched']} matched", style="green")
    text.append(f" ({counts['discrepancies']} with discrepancies), ")
    text.append(f"{counts['internal_only']} internal only", style="yellow")
    text.append(", ")
    text.append(f"{counts['provider_only']} provider only", style="red")
    unkeyed = counts["internal_unkeyed"] + counts["provider_unkeyed"]
    if unkeyed:
        text.append(f", {unkeyed} unkeyed", style="magenta")
    return text


def render_result(
    result: ComparisonResult,
    *,
    console: Console | None = None,
    show_agreeing: bool = True,
) -> None:
    """Print all sections of ``result`` followed by the summary line."""

    console = console or Console()
    sections: list[Any] = [
        matched_table(result, show_agreeing=show_agreeing),
        records_table("Present only in Internal file", result.internal_only, style="bold yellow"),
        records_table("Present only in Provider file", result.provider_only, style="bold red"),
    ]
    if result.internal_unkeyed or result.provider_unkeyed:
        sections.append(unkeyed_table(result))
    console.print(Group(*sections))
    console.print(summary_text(result))


def index_summary(label: str, index: KeyedIndex) -> Table:
    """Per-file load statistics used by ``recon inspect``."""

    table = Table(title=label, show_header=False)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Records", str(index.source_size))
    table.add_row("Distinct references", str(len(index)))
    table.add_row("Duplicate references", str(len(index.duplicate_keys)))
    table.add_row("Rows without reference", str(len(index.unkeyed)))
    if index.duplicate_keys:
        table.add_row("Duplicated", ", ".join(index.duplicate_keys[:10]))
    return table


__all__ = [
    "index_summary",
    "matched_table",
    "records_table",
    "render_result",
    "summary_text",
    "unkeyed_table",
]
