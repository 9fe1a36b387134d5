# src/todo_sync/state/mutations.py

from __future__ import annotations

"""
Mutation coordinator.

The only writer of StateStore after the initial load. Each operation:
- validates locally (no network call on rejection),
- awaits the gateway inside the coordinator's LifecycleScope,
- on success applies an optimistic local change via replace_snapshot().

Gateway failures leave the snapshot untouched and propagate to the caller.
If the scope ends while a write is in flight, the late response is discarded;
a write the server already committed is not rolled back.
"""

import dataclasses
import logging
from typing import Any, Mapping

from ..core.models import TodoItem, WIRE_FIELDS
from ..core.ports import TodoGateway
from ..core.scope import LifecycleScope
from ..errors import NotFoundError, ValidationError
from .store import StateStore

logger = logging.getLogger(__name__)


def _clean_title(title: Any) -> str:
    text = title.strip() if isinstance(title, str) else ""
    if not text:
        raise ValidationError("Title must not be empty")
    return text


class MutationCoordinator:
    def __init__(
            self,
            gateway: TodoGateway,
            store: StateStore,
            scope: LifecycleScope,
            *,
            default_owner_id: int = 1,
    ) -> None:
        self._gateway = gateway
        self._store = store
        self._scope = scope
        self._default_owner_id = default_owner_id

    async def create(self, title: str, owner_id: int | None = None) -> TodoItem:
        clean = _clean_title(title)
        owner = self._default_owner_id if owner_id is None else owner_id

        created = await self._scope.run(self._gateway.create(clean, owner))

        current = self._store.snapshot
        # The server assigns its own id, which is not part of our snapshot; renumber locally.
        local = dataclasses.replace(created, id=len(current) + 1)
        self._store.replace_snapshot((local, *current))
        logger.info("Todo created: id=%s title=%r", local.id, local.title)
        return local

    async def update(self, todo_id: int, partial: Mapping[str, Any]) -> TodoItem | None:
        changes = dict(partial)
        unknown = set(changes) - set(WIRE_FIELDS)
        if unknown:
            raise ValueError(f"unknown todo field(s): {', '.join(sorted(unknown))}")
        if "title" in changes:
            changes["title"] = _clean_title(changes["title"])

        await self._scope.run(self._gateway.replace(todo_id, changes))

        updated: TodoItem | None = None
        items: list[TodoItem] = []
        for item in self._store.snapshot:
            if item.id == todo_id:
                item = dataclasses.replace(item, **changes)
                updated = item
            items.append(item)
        self._store.replace_snapshot(items)
        logger.info("Todo updated: id=%s fields=%s", todo_id, sorted(changes))
        return updated

    async def delete(self, todo_id: int) -> None:
        await self._scope.run(self._gateway.delete(todo_id))

        self._store.replace_snapshot(t for t in self._store.snapshot if t.id != todo_id)
        logger.info("Todo deleted: id=%s", todo_id)

    async def toggle(self, todo_id: int) -> TodoItem:
        before = self._store.find(todo_id)
        if before is None:
            raise NotFoundError(todo_id)
        completed = not before.completed

        await self._scope.run(self._gateway.patch_completion(todo_id, completed))

        toggled = dataclasses.replace(before, completed=completed)
        self._store.replace_snapshot(
            dataclasses.replace(t, completed=completed) if t.id == todo_id else t
            for t in self._store.snapshot
        )
        logger.info("Todo toggled: id=%s completed=%s", todo_id, completed)
        return toggled
