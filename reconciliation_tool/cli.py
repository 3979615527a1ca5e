"""CLI for the ``reconciliation_tool`` package.

Exposes callable command handlers (``cmd_reconcile``, ``cmd_inspect``) and a
Typer-based console interface. Settings are read from ``RECON_*``
environment variables after loading a local ``.env`` with ``python-dotenv``;
command-line options take precedence. Business logic lives in the
``session``, ``engine`` and ``indexing`` modules.
"""

from __future__ import annotations

import csv
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console

from .config import ReconcileSettings
from .errors import ReconciliationError
from .export import export_result
from .indexing import DuplicatePolicy, build_index
from .logging_setup import configure_logging, get_logger
from .models import INTERNAL, PROVIDER, TransactionRecord
from .normalizer import ColumnMap, read_records
from .report import index_summary, render_result
from .session import ReconciliationSession

_logger = get_logger("reconciliation_tool.cli")


def _load(
    path: Path, *, source: str, columns: ColumnMap, strict: bool
) -> list[TransactionRecord] | None:
    """Read one input file, printing an ``Error:`` line and returning
    ``None`` on failure."""

    try:
        return read_records(path, source=source, columns=columns, strict=strict)
    except FileNotFoundError:
        print(f"Error: File not found: {path}", file=sys.stderr)
    except PermissionError:
        print(f"Error: Permission denied: {path}", file=sys.stderr)
    except UnicodeDecodeError as e:
        print(f"Error: {path} is not valid UTF-8 text: {e}", file=sys.stderr)
    except csv.Error as e:
        print(f"Error: Failed to parse CSV {path}: {e}", file=sys.stderr)
    except ReconciliationError as e:
        print(f"Error: {source} file {path}: {e}", file=sys.stderr)
    return None


def cmd_reconcile(
    internal_path: Path,
    provider_path: Path,
    *,
    settings: ReconcileSettings,
    show_agreeing: bool = True,
    console: Console | None = None,
) -> int:
    """Reconcile two CSV files, render the result, and optionally export it.

    Returns ``0`` when a result was produced (discrepancies included) and
    ``1`` on load failures, an empty collection, a rejected duplicate, or a
    malformed row in strict mode.
    """

    console = console or Console()
    _logger.debug("Reconciling %s against %s with %r", internal_path, provider_path, settings)
    columns = settings.columns
    session = ReconciliationSession(
        duplicate_policy=settings.duplicate_policy,
        comparison=settings.comparison,
    )

    for path, source, load in (
        (internal_path, INTERNAL, session.load_internal),
        (provider_path, PROVIDER, session.load_provider),
    ):
        records = _load(path, source=source, columns=columns, strict=settings.strict)
        if records is None:
            return 1
        count = load(records)
        console.print(f"[green]{count} {source} transactions loaded[/green] from {path}")

    try:
        result = session.run()
    except ReconciliationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    render_result(result, console=console, show_agreeing=show_agreeing)

    if settings.out_dir is not None:
        try:
            written = export_result(result, settings.out_dir)
        except OSError as e:
            print(f"Error: export to {settings.out_dir} failed: {e}", file=sys.stderr)
            return 1
        for p in written:
            console.print(f"[cyan]Exported[/cyan] {p}")

    return 0


def cmd_inspect(path: Path, *, settings: ReconcileSettings, console: Console | None = None) -> int:
    """Load a single file and report its key statistics."""

    console = console or Console()
    records = _load(path, source=INTERNAL, columns=settings.columns, strict=settings.strict)
    if records is None:
        return 1
    # Duplicates are reported here, never rejected.
    policy = (
        DuplicatePolicy.KEEP_LAST
        if settings.duplicate_policy is DuplicatePolicy.REJECT
        else settings.duplicate_policy
    )
    index = build_index(records, policy=policy)
    console.print(index_summary(str(path), index))
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Reconcile an internal transaction export against a provider statement. "
        "Loads RECON_* settings from a local .env before running."
    ),
)


def _settings_or_exit(**overrides: object) -> ReconcileSettings:
    try:
        return ReconcileSettings.from_env(**overrides)
    except ValueError as e:
        print(f"Error: invalid settings: {e}", file=sys.stderr)
        raise typer.Exit(1) from None


@app.command("reconcile")
def reconcile_cmd(
    internal: Annotated[
        Path, typer.Option("--internal", help="Internal system export CSV.", dir_okay=False)
    ],
    provider: Annotated[
        Path, typer.Option("--provider", help="Provider statement CSV.", dir_okay=False)
    ],
    out_dir: Annotated[
        Path | None,
        typer.Option(help="Write matched/internal-only/provider-only CSVs here.", file_okay=False),
    ] = None,
    duplicates: Annotated[
        DuplicatePolicy | None,
        typer.Option(help="How repeated references within one file are resolved."),
    ] = None,
    amount_compare: Annotated[
        str | None, typer.Option(help="Amount comparator: exact or decimal.")
    ] = None,
    status_compare: Annotated[
        str | None, typer.Option(help="Status comparator: exact or casefold.")
    ] = None,
    strict: Annotated[
        bool, typer.Option("--strict", help="Fail on rows without a reference.")
    ] = False,
    show_agreeing: Annotated[
        bool, typer.Option("--show-agreeing/--hide-agreeing", help="List matched rows that agree.")
    ] = True,
) -> None:
    """Compare the two files and print matched, internal-only and provider-only rows."""

    settings = _settings_or_exit(
        out_dir=out_dir,
        duplicate_policy=duplicates,
        amount_compare=amount_compare,
        status_compare=status_compare,
        strict=strict or None,
    )
    code = cmd_reconcile(internal, provider, settings=settings, show_agreeing=show_agreeing)
    raise typer.Exit(code)


@app.command("inspect")
def inspect_cmd(
    path: Annotated[Path, typer.Argument(help="CSV file to inspect.", dir_okay=False)],
) -> None:
    """Report record, reference, duplicate and unkeyed counts for one file."""

    settings = _settings_or_exit()
    raise typer.Exit(cmd_inspect(path, settings=settings))


@app.callback()
def _root(
    log_level: Annotated[
        str | None, typer.Option(help="Log level (falls back to RECON_LOG_LEVEL).")
    ] = None,
) -> None:
    """Load ``.env`` from the working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)


def main() -> None:  # pragma: no cover - console script shim
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
