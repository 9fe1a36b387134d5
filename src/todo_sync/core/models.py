# src/todo_sync/core/models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Mapping

ALL = "all"


class StatusFilter(StrEnum):
    ALL = "all"
    COMPLETED = "completed"
    ACTIVE = "active"


def _require_int(raw: Mapping[str, Any], key: str) -> int:
    value = raw.get(key)
    # bool is an int subclass; never accept it as an id
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected integer '{key}', got {value!r}")
    return value


@dataclass(frozen=True, slots=True)
class TodoItem:
    """
    A single todo as held in the local snapshot.

    The remote API calls the owner "userId"; locally it is owner_id.
    Instances are immutable: mutations produce new items via dataclasses.replace().
    """

    id: int
    title: str
    completed: bool
    owner_id: int

    @classmethod
    def from_json(cls, raw: Mapping[str, Any]) -> TodoItem:
        if not isinstance(raw, Mapping):
            raise ValueError(f"expected a JSON object, got {type(raw).__name__}")
        title = raw.get("title")
        if not isinstance(title, str):
            raise ValueError(f"expected string 'title', got {title!r}")
        return cls(
            id=_require_int(raw, "id"),
            title=title,
            completed=bool(raw.get("completed", False)),
            owner_id=_require_int(raw, "userId"),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
            "userId": self.owner_id,
        }


@dataclass(frozen=True, slots=True)
class Owner:
    id: int
    name: str

    @classmethod
    def from_json(cls, raw: Mapping[str, Any]) -> Owner:
        if not isinstance(raw, Mapping):
            raise ValueError(f"expected a JSON object, got {type(raw).__name__}")
        name = raw.get("name")
        if not isinstance(name, str):
            raise ValueError(f"expected string 'name', got {name!r}")
        return cls(id=_require_int(raw, "id"), name=name)


# Ordered, immutable view of all todos at a point in time.
Snapshot = tuple[TodoItem, ...]

# Local field name -> wire field name, for partial updates.
WIRE_FIELDS: dict[str, str] = {
    "title": "title",
    "completed": "completed",
    "owner_id": "userId",
}


def to_wire_partial(partial: Mapping[str, Any]) -> dict[str, Any]:
    """Translate a local partial update into the API's field names."""
    out: dict[str, Any] = {}
    for key, value in partial.items():
        if key not in WIRE_FIELDS:
            raise ValueError(f"unknown todo field: {key!r}")
        out[WIRE_FIELDS[key]] = value
    return out


@dataclass(frozen=True, slots=True)
class FilterCriteria:
    search_text: str = ""
    status_filter: StatusFilter = StatusFilter.ALL
    owner_filter: int | str = ALL


@dataclass(frozen=True, slots=True)
class TodoStats:
    total: int
    completed: int
    active: int
