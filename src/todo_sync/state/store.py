# src/todo_sync/state/store.py

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..core.models import Snapshot, TodoItem
from ..core.subject import Subject

logger = logging.getLogger(__name__)


class StateStore:
    """
    Authoritative local snapshot of todos plus the loading flag.

    Both are last-value streams: new observers receive the current value
    immediately. replace_snapshot() is the only snapshot mutator; it always
    succeeds and notifies every observer (in registration order) before returning.
    """

    def __init__(self) -> None:
        self.todos: Subject[Snapshot] = Subject((), name="todos")
        self.loading: Subject[bool] = Subject(False, name="loading")

    @property
    def snapshot(self) -> Snapshot:
        return self.todos.value

    @property
    def is_loading(self) -> bool:
        return self.loading.value

    def find(self, todo_id: int) -> TodoItem | None:
        for item in self.snapshot:
            if item.id == todo_id:
                return item
        return None

    def set_loading(self, loading: bool) -> None:
        self.loading.emit(bool(loading))

    def replace_snapshot(self, items: Iterable[TodoItem]) -> None:
        snapshot = tuple(items)
        logger.debug("Snapshot replaced: %d items", len(snapshot))
        self.todos.emit(snapshot)
