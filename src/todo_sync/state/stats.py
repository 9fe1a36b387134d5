# src/todo_sync/state/stats.py

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..core.models import Snapshot, TodoItem, TodoStats
from ..core.operators import map_stream
from ..core.scope import LifecycleScope
from ..core.subject import Subject

logger = logging.getLogger(__name__)


def compute_stats(todos: Sequence[TodoItem]) -> TodoStats:
    completed = sum(1 for t in todos if t.completed)
    return TodoStats(total=len(todos), completed=completed, active=len(todos) - completed)


class StatsAggregator:
    """Derives {total, completed, active} from every filtered-list emission."""

    def __init__(self, filtered: Subject[Snapshot], scope: LifecycleScope) -> None:
        self.stats: Subject[TodoStats] = map_stream(filtered, self._derive, scope, name="stats")

    @staticmethod
    def _derive(todos: Snapshot) -> TodoStats:
        stats = compute_stats(todos)
        logger.debug("Stats: %s", stats)
        return stats
