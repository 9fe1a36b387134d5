# tests/test_mutations.py

from __future__ import annotations

import asyncio

import pytest

from todo_sync.core.models import TodoItem
from todo_sync.errors import MutationError, NotFoundError, ValidationError
from todo_sync.state.mutations import MutationCoordinator


@pytest.fixture()
def coordinator(gateway, store, scope) -> MutationCoordinator:
    return MutationCoordinator(gateway, store, scope, default_owner_id=1)


@pytest.mark.asyncio
async def test_create_prepends_reindexed_item(coordinator, gateway, store) -> None:
    created = await coordinator.create("  Water plants ")

    assert gateway.calls == [("create", ("Water plants", 1))]
    assert created == TodoItem(id=3, title="Water plants", completed=False, owner_id=1)
    assert store.snapshot[0] == created
    assert [t.id for t in store.snapshot] == [3, 1, 2]


@pytest.mark.asyncio
async def test_create_with_blank_title_is_rejected_locally(coordinator, gateway, store, todos) -> None:
    with pytest.raises(ValidationError):
        await coordinator.create("   ")
    assert gateway.calls == []
    assert store.snapshot == todos


@pytest.mark.asyncio
async def test_create_failure_leaves_snapshot_unchanged(coordinator, gateway, store, todos) -> None:
    gateway.fail["create"] = MutationError("Unable to create the todo", operation="create")
    with pytest.raises(MutationError):
        await coordinator.create("Something")
    assert store.snapshot == todos


@pytest.mark.asyncio
async def test_update_merges_partial_and_keeps_others(coordinator, gateway, store, todos) -> None:
    other_before = store.snapshot[1]

    updated = await coordinator.update(1, {"title": " Buy oat milk ", "owner_id": 5})

    assert gateway.calls == [("replace", (1, {"title": "Buy oat milk", "owner_id": 5}))]
    assert updated == TodoItem(id=1, title="Buy oat milk", completed=False, owner_id=5)
    assert store.snapshot[0] == updated
    assert store.snapshot[1] is other_before


@pytest.mark.asyncio
async def test_update_validation(coordinator, gateway) -> None:
    with pytest.raises(ValidationError):
        await coordinator.update(1, {"title": "  "})
    with pytest.raises(ValueError):
        await coordinator.update(1, {"priority": 3})
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_delete_removes_item(coordinator, store, todos) -> None:
    await coordinator.delete(2)
    assert store.snapshot == (todos[0],)


@pytest.mark.asyncio
async def test_toggle_twice_restores_original(coordinator, gateway, store) -> None:
    first = await coordinator.toggle(1)
    assert first.completed is True
    assert store.find(1).completed is True

    second = await coordinator.toggle(1)
    assert second.completed is False
    assert store.find(1).completed is False
    assert gateway.calls == [
        ("patch_completion", (1, True)),
        ("patch_completion", (1, False)),
    ]


@pytest.mark.asyncio
async def test_toggle_missing_item_fails_without_network(coordinator, gateway) -> None:
    with pytest.raises(NotFoundError) as info:
        await coordinator.toggle(99)
    assert info.value.todo_id == 99
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_mutation_notifies_observers_before_returning(coordinator, store) -> None:
    seen: list[int] = []
    store.todos.subscribe(lambda snap: seen.append(len(snap)))
    await coordinator.delete(1)
    assert seen == [2, 1]


@pytest.mark.asyncio
async def test_late_write_response_after_scope_end_is_discarded(coordinator, gateway, store, scope, todos) -> None:
    gateway.gate = asyncio.Event()
    changes: list[object] = []
    store.todos.subscribe(changes.append)
    baseline = len(changes)

    pending = asyncio.create_task(coordinator.toggle(1))
    await asyncio.sleep(0)
    scope.end()
    gateway.gate.set()

    with pytest.raises(asyncio.CancelledError):
        await pending
    await asyncio.sleep(0.01)

    assert len(changes) == baseline
    assert store.snapshot == todos
