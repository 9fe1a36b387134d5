# tests/conftest.py

from __future__ import annotations

import pytest

from todo_sync.config import Settings
from todo_sync.core.models import Owner, TodoItem
from todo_sync.core.scope import LifecycleScope
from todo_sync.state.store import StateStore

from .fakes import FakeGateway

# Short enough to keep the suite fast, long enough to type several keys inside one window.
DEBOUNCE = 0.05


@pytest.fixture()
def settings() -> Settings:
    """
    Explicit settings rather than Settings.from_env(), to keep unit tests
    isolated from the developer's environment / .env file.
    """
    return Settings(
        api_base_url="https://api.test",
        search_debounce_seconds=DEBOUNCE,
    )


@pytest.fixture()
def todos() -> tuple[TodoItem, ...]:
    return (
        TodoItem(id=1, title="Buy milk", completed=False, owner_id=2),
        TodoItem(id=2, title="Pay rent", completed=True, owner_id=3),
    )


@pytest.fixture()
def owners() -> tuple[Owner, ...]:
    return (
        Owner(id=2, name="Ervin Howell"),
        Owner(id=3, name="Clementine Bauch"),
    )


@pytest.fixture()
def gateway(todos, owners) -> FakeGateway:
    return FakeGateway(todos, owners)


@pytest.fixture()
def scope() -> LifecycleScope:
    return LifecycleScope("test")


@pytest.fixture()
def store(todos) -> StateStore:
    s = StateStore()
    s.replace_snapshot(todos)
    return s
