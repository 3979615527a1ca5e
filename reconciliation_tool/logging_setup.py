"""Logging for ``reconciliation_tool``.

The package logs under the ``"reconciliation_tool"`` hierarchy. Until the
CLI calls :func:`configure_logging`, that root carries only a
``NullHandler``, so embedding the engine in another program prints nothing.
``RECON_LOG_LEVEL`` picks the level when none is passed.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_ROOT = "reconciliation_tool"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_configured = False


def _parse_level(level: int | str | None) -> int:
    if level is None:
        level = os.getenv("RECON_LOG_LEVEL")
        if not level:
            return logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    # Unknown names fall back to INFO rather than failing startup.
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Attach one ``StreamHandler`` to the package root; later calls are no-ops.

    ``stream`` defaults to whatever ``sys.stderr`` is when this runs.
    """

    global _configured
    if _configured:
        return

    root = logging.getLogger(_ROOT)
    for h in list(root.handlers):
        if isinstance(h, logging.NullHandler):
            root.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))

    root.setLevel(resolved)
    root.addHandler(handler)
    root.propagate = False
    _configured = True


def get_logger(name: str) -> logging.Logger:
    root = logging.getLogger(_ROOT)
    if not _configured and not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
