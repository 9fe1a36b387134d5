# src/todo_sync/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the state layer.

State components depend on this Protocol instead of the concrete HTTP gateway.
This keeps the remote side swappable and makes testing easier.
"""

from typing import Any, Mapping, Protocol

from .models import Owner, TodoItem


class TodoGateway(Protocol):
    """Remote todo collection (reads are cached, writes are not)."""

    async def fetch_todos(self, *, refresh: bool = False) -> tuple[TodoItem, ...]: ...

    async def fetch_owners(self, *, refresh: bool = False) -> tuple[Owner, ...]: ...

    async def create(self, title: str, owner_id: int) -> TodoItem: ...

    async def replace(self, todo_id: int, partial: Mapping[str, Any]) -> dict[str, Any]: ...

    async def delete(self, todo_id: int) -> None: ...

    async def patch_completion(self, todo_id: int, completed: bool) -> dict[str, Any]: ...
