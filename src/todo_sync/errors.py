# src/todo_sync/errors.py

from __future__ import annotations

"""
Error taxonomy.

Every error carries a short message that is safe to show to a user.
The underlying transport error (if any) is chained via __cause__.
"""


class TodoSyncError(Exception):
    """Base class for all todo_sync errors."""


class FetchError(TodoSyncError):
    """A read (todos / owners) failed after all retries."""

    def __init__(self, message: str, *, resource: str) -> None:
        super().__init__(message)
        self.resource = resource


class MutationError(TodoSyncError):
    """A write (create / update / delete / toggle) failed after all retries."""

    def __init__(self, message: str, *, operation: str) -> None:
        super().__init__(message)
        self.operation = operation


class ValidationError(TodoSyncError):
    """Rejected locally, no network call was attempted."""


class NotFoundError(TodoSyncError):
    def __init__(self, todo_id: int) -> None:
        super().__init__(f"Todo {todo_id} not found")
        self.todo_id = todo_id
