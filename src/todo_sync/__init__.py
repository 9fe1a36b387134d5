"""
Reactive todo synchronization engine.

Components:
- remote/gateway.py: HTTP gateway (retry policy, replay cache for reads)
- state/: snapshot store, filter pipeline, stats, mutations, owner names
- core/: value streams, operators, lifecycle scope, models
- session.py: one scope's worth of wired components
- bootstrap.py: composition root (settings -> client -> gateway -> session)
"""

from .bootstrap import configure_logging, create_session
from .errors import FetchError, MutationError, NotFoundError, TodoSyncError, ValidationError
from .session import TodoSession

__all__ = [
    "FetchError",
    "MutationError",
    "NotFoundError",
    "TodoSession",
    "TodoSyncError",
    "ValidationError",
    "configure_logging",
    "create_session",
]
