# src/todo_sync/state/filters.py

from __future__ import annotations

"""
Filter pipeline.

Joins four signals into the filtered todo list:

    search input --debounce--> distinct --+
    status ------------------------------ +--> combine_latest --> apply_filters --> filtered
    owner ------------------------------- +
    store.todos ------------------------- +

Every upstream emission produces exactly one recomputation (once all inputs have a
value). Search keystrokes inside the debounce window never reach the join.
"""

import logging
from collections.abc import Iterable
from typing import Any

from ..core.models import ALL, FilterCriteria, Snapshot, StatusFilter, TodoItem
from ..core.operators import combine_latest, debounce, distinct_until_changed, map_stream
from ..core.scope import LifecycleScope
from ..core.subject import Subject
from .store import StateStore

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.3


def parse_owner_filter(owner: int | str | None) -> int | None:
    """
    Owner filter value -> owner id.

    Returns None for a malformed value (which then matches no item).
    Callers handle "all" before calling this.
    """
    if isinstance(owner, bool):
        return None
    if isinstance(owner, int):
        return owner
    if isinstance(owner, str):
        try:
            return int(owner.strip())
        except ValueError:
            return None
    return None


def apply_filters(
        todos: Iterable[TodoItem],
        search_text: str,
        status: StatusFilter | str,
        owner: int | str,
) -> Snapshot:
    """Pure composition: search -> status -> owner, original order preserved."""
    filtered = list(todos)

    if search_text and search_text.strip():
        needle = search_text.lower()
        filtered = [t for t in filtered if needle in t.title.lower()]

    status = StatusFilter(status)
    if status == StatusFilter.COMPLETED:
        filtered = [t for t in filtered if t.completed]
    elif status == StatusFilter.ACTIVE:
        filtered = [t for t in filtered if not t.completed]

    if owner != ALL:
        owner_id = parse_owner_filter(owner)
        filtered = [t for t in filtered if owner_id is not None and t.owner_id == owner_id]

    return tuple(filtered)


class FilterPipeline:
    def __init__(
            self,
            store: StateStore,
            scope: LifecycleScope,
            *,
            debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self._search_input: Subject[str] = Subject(name="search.input")
        self._status: Subject[StatusFilter] = Subject(StatusFilter.ALL, name="status")
        self._owner: Subject[int | str] = Subject(ALL, name="owner")

        self.search: Subject[str] = distinct_until_changed(
            debounce(self._search_input, debounce_seconds, scope),
            scope,
            initial="",
        )

        combined = combine_latest([self.search, self._status, self._owner, store.todos], scope)
        self.filtered: Subject[Snapshot] = map_stream(combined, self._recompute, scope, name="filtered")

    @property
    def criteria(self) -> FilterCriteria:
        """Criteria currently applied (search is the debounced value)."""
        return FilterCriteria(
            search_text=self.search.value,
            status_filter=self._status.value,
            owner_filter=self._owner.value,
        )

    def set_search(self, text: str) -> None:
        """Feed a keystroke; it reaches the join only after the debounce window."""
        self._search_input.emit(text or "")

    def set_status(self, status: StatusFilter | str) -> None:
        self._status.emit(StatusFilter(status))

    def set_owner(self, owner: int | str) -> None:
        self._owner.emit(owner)

    def apply(self, criteria: FilterCriteria) -> None:
        self.set_status(criteria.status_filter)
        self.set_owner(criteria.owner_filter)
        self.set_search(criteria.search_text)

    @staticmethod
    def _recompute(values: tuple[Any, ...]) -> Snapshot:
        search_text, status, owner, todos = values
        filtered = apply_filters(todos, search_text, status, owner)
        logger.debug(
            "Filtered %d/%d (search=%r status=%s owner=%s)",
            len(filtered),
            len(todos),
            search_text,
            status,
            owner,
        )
        return filtered
