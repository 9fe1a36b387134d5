# tests/test_config_logging.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from todo_sync.config import DEFAULT_API_BASE_URL, Settings
from todo_sync.logging_setup import _ConsoleNoiseFilter, setup_logging
from todo_sync.remote.gateway import build_timeout


def test_settings_from_env_reads_prefixed_vars(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TODOSYNC_API_BASE_URL", "https://todos.example.test/")
    monkeypatch.setenv("TODOSYNC_LOG_LEVEL", "debug")
    monkeypatch.setenv("TODOSYNC_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("TODOSYNC_READ_TIMEOUT_SECONDS", "not-a-number")

    s = Settings.from_env()

    assert s.api_base_url == "https://todos.example.test"
    assert s.log_level == "DEBUG"
    assert s.log_dir == tmp_path / "logs"
    assert s.read_timeout_seconds == 15.0
    # Behavioural constants are not taken from the environment.
    assert (s.read_retries, s.write_retries, s.fetch_limit) == (2, 1, 50)
    assert s.search_debounce_seconds == 0.3


def test_settings_defaults(monkeypatch) -> None:
    for name in ("TODOSYNC_API_BASE_URL", "TODOSYNC_LOG_LEVEL", "TODOSYNC_CONNECT_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    s = Settings.from_env()
    assert s.api_base_url == DEFAULT_API_BASE_URL
    assert s.connect_timeout_seconds == 5.0


def test_build_timeout_keeps_read_at_least_connect() -> None:
    t = build_timeout(Settings(connect_timeout_seconds=8.0, read_timeout_seconds=2.0))
    assert t.connect == 8.0
    assert t.read == 8.0


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_keeps_app_logs_and_quiets_libraries() -> None:
    f = _ConsoleNoiseFilter()
    assert f.filter(_record("todo_sync.remote.gateway", logging.DEBUG))
    assert not f.filter(_record("httpx", logging.INFO))
    assert f.filter(_record("httpx", logging.ERROR))
    assert not f.filter(_record("py.warnings", logging.WARNING))
    assert f.filter(_record("py.warnings", logging.ERROR))


@pytest.fixture()
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        if h not in handlers:
            h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)


def test_setup_logging_writes_file(tmp_path: Path, restore_root_logging) -> None:
    log_file = setup_logging(log_dir=tmp_path / "logs", console_level=logging.WARNING)

    logging.getLogger("todo_sync.test").debug("hello %s", "file")
    for h in logging.getLogger().handlers:
        h.flush()

    assert log_file == tmp_path / "logs" / "todo_sync.log"
    assert "hello file" in log_file.read_text("utf-8")


def test_configure_logging_uses_settings_and_quiets_httpx(tmp_path: Path, restore_root_logging) -> None:
    from todo_sync.bootstrap import configure_logging

    configure_logging(Settings(log_dir=tmp_path, log_level="warning"))

    assert (tmp_path / "todo_sync.log").exists()
    assert logging.getLogger("httpx").level == logging.WARNING
    console = [h for h in logging.getLogger().handlers if not isinstance(h, logging.FileHandler)]
    assert console and console[0].level == logging.WARNING
