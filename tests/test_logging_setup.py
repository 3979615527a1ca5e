from __future__ import annotations

import logging

from reconciliation_tool.logging_setup import _parse_level, get_logger


def test_parse_level_accepts_names_and_numbers():
    assert _parse_level("debug") == logging.DEBUG
    assert _parse_level(" 30 ") == 30
    assert _parse_level(logging.ERROR) == logging.ERROR


def test_parse_level_falls_back_to_env(monkeypatch):
    monkeypatch.setenv("RECON_LOG_LEVEL", "WARNING")
    assert _parse_level(None) == logging.WARNING
    monkeypatch.delenv("RECON_LOG_LEVEL")
    assert _parse_level(None) == logging.INFO


def test_get_logger_returns_package_child():
    assert get_logger("reconciliation_tool.engine").name == "reconciliation_tool.engine"


def test_unknown_level_name_falls_back_to_info():
    assert _parse_level("chatty") == logging.INFO
