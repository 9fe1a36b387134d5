# src/todo_sync/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object per process (normal "settings layer").
- No secrets required at import time.
- Only endpoint, timeout and logging knobs come from the environment; the sync
  behaviour (retries, debounce, fetch limit) is fixed unless overridden in code.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TODOSYNC"

DEFAULT_API_BASE_URL = "https://jsonplaceholder.typicode.com"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None or v.strip() == "" else v.strip()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str = "todo-sync"
    log_level: str = "INFO"
    log_dir: Path = Path(".local/todo_sync")

    # ---- Remote API ----
    api_base_url: str = DEFAULT_API_BASE_URL
    connect_timeout_seconds: float = 5.0
    read_timeout_seconds: float = 15.0

    # ---- Sync behaviour ----
    read_retries: int = 2
    write_retries: int = 1
    fetch_limit: int = 50
    search_debounce_seconds: float = 0.3
    default_owner_id: int = 1

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "todo-sync")
        log_level = _env(_k("LOG_LEVEL"), "INFO").upper()
        log_dir = _env_path(_k("LOG_DIR"), Path(".local/todo_sync"))

        api_base_url = _env(_k("API_BASE_URL"), DEFAULT_API_BASE_URL).rstrip("/")

        connect_timeout = _env_float(_k("CONNECT_TIMEOUT_SECONDS"), 5.0)
        read_timeout = _env_float(_k("READ_TIMEOUT_SECONDS"), 15.0)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_dir=log_dir,
            api_base_url=api_base_url,
            connect_timeout_seconds=max(0.1, connect_timeout),
            read_timeout_seconds=max(0.1, read_timeout),
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
