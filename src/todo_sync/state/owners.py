# src/todo_sync/state/owners.py

from __future__ import annotations

from collections.abc import Iterable

from ..core.models import Owner
from ..core.subject import Subject


class OwnerDirectory:
    """Owner id -> display name, filled once from the initial load."""

    def __init__(self) -> None:
        self.owners: Subject[tuple[Owner, ...]] = Subject((), name="owners")
        self._names: dict[int, str] = {}

    def update(self, owners: Iterable[Owner]) -> None:
        items = tuple(owners)
        self._names = {o.id: o.name for o in items}
        self.owners.emit(items)

    def resolve(self, owner_id: int) -> str:
        name = self._names.get(owner_id)
        return name if name else f"User {owner_id}"
