# tests/fakes.py

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any, Mapping

from todo_sync.core.models import Owner, TodoItem, to_wire_partial


class FakeGateway:
    """
    Deterministic TodoGateway for unit tests.

    - Captures calls for assertions
    - `fail[op]` makes that operation raise the given exception
    - `gate` (if set) holds every operation until the event is set
    """

    def __init__(self, todos: Iterable[TodoItem] = (), owners: Iterable[Owner] = ()) -> None:
        self.todos = tuple(todos)
        self.owners = tuple(owners)
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.fail: dict[str, Exception] = {}
        self.gate: asyncio.Event | None = None
        self.server_id = 201

    def ops(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def _enter(self, op: str, *args: Any) -> None:
        self.calls.append((op, args))
        if self.gate is not None:
            await self.gate.wait()
        exc = self.fail.get(op)
        if exc is not None:
            raise exc

    async def fetch_todos(self, *, refresh: bool = False) -> tuple[TodoItem, ...]:
        await self._enter("fetch_todos", refresh)
        return self.todos

    async def fetch_owners(self, *, refresh: bool = False) -> tuple[Owner, ...]:
        await self._enter("fetch_owners", refresh)
        return self.owners

    async def create(self, title: str, owner_id: int) -> TodoItem:
        await self._enter("create", title, owner_id)
        return TodoItem(id=self.server_id, title=title, completed=False, owner_id=owner_id)

    async def replace(self, todo_id: int, partial: Mapping[str, Any]) -> dict[str, Any]:
        await self._enter("replace", todo_id, dict(partial))
        return {"id": todo_id, **to_wire_partial(partial)}

    async def delete(self, todo_id: int) -> None:
        await self._enter("delete", todo_id)

    async def patch_completion(self, todo_id: int, completed: bool) -> dict[str, Any]:
        await self._enter("patch_completion", todo_id, completed)
        return {"id": todo_id, "completed": completed}
