# src/todo_sync/bootstrap.py

"""
Bootstrap helpers.

This module is the "composition root":
- loads settings once,
- configures logging for a host process,
- wires the httpx client and RemoteGateway into a TodoSession.
"""

from __future__ import annotations

import logging

import httpx

from .config import Settings, get_settings
from .core.scope import LifecycleScope
from .logging_setup import setup_logging
from .remote.gateway import RemoteGateway
from .session import TodoSession

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings | None = None) -> None:
    if settings is None:
        settings = get_settings()

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    if not isinstance(console_level, int):
        console_level = logging.INFO

    setup_logging(log_dir=settings.log_dir, console_level=console_level)

    # keep noisy libs readable
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def create_session(
        *,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        scope: LifecycleScope | None = None,
) -> TodoSession:
    """
    Create a TodoSession from the provided settings.

    Keeping settings (and the HTTP transport) injectable makes the session easy to
    test and avoids hidden global config reads. The session owns the HTTP client;
    close it with `await session.aclose()`.
    """
    if settings is None:
        settings = get_settings()

    gateway = RemoteGateway.from_settings(settings, transport=transport)
    session = TodoSession(gateway, settings=settings, scope=scope)
    logger.info("%s session created (api=%s)", settings.app_name, settings.api_base_url)
    return session
