# src/todo_sync/session.py

from __future__ import annotations

"""
Todo session.

One session = one LifecycleScope worth of components:
StateStore, FilterPipeline, StatsAggregator, MutationCoordinator, OwnerDirectory.

The presentation layer reads the streams exposed here and sends filter changes and
mutation intents back. Every failure is published on `errors` before it is re-raised,
so a fire-and-forget caller still has an observable signal.
"""

import asyncio
import logging
from typing import Any, Mapping

from .config import Settings, get_settings
from .core.models import TodoItem
from .core.ports import TodoGateway
from .core.scope import LifecycleScope
from .core.subject import Subject
from .errors import FetchError, TodoSyncError
from .state.filters import FilterPipeline
from .state.mutations import MutationCoordinator
from .state.owners import OwnerDirectory
from .state.stats import StatsAggregator
from .state.store import StateStore

logger = logging.getLogger(__name__)


class TodoSession:
    def __init__(
            self,
            gateway: TodoGateway,
            *,
            settings: Settings | None = None,
            scope: LifecycleScope | None = None,
    ) -> None:
        if settings is None:
            settings = get_settings()

        self.settings = settings
        self.gateway = gateway
        self.scope = scope or LifecycleScope("session")

        self.store = StateStore()
        self.owners = OwnerDirectory()
        self.errors: Subject[TodoSyncError] = Subject(name="errors")

        self.filters = FilterPipeline(
            self.store,
            self.scope,
            debounce_seconds=settings.search_debounce_seconds,
        )
        self.stats = StatsAggregator(self.filters.filtered, self.scope)
        self.mutations = MutationCoordinator(
            gateway,
            self.store,
            self.scope,
            default_owner_id=settings.default_owner_id,
        )

    @property
    def closed(self) -> bool:
        return not self.scope.active

    # ---- loading ----

    async def load(self, *, refresh: bool = False) -> None:
        """
        Bulk-load todos and owners in parallel.

        On failure the loading flag is cleared and the snapshot is emptied
        (the previous snapshot is not kept), then the FetchError is re-raised.
        A closed session raises CancelledError without touching state.
        """
        if not self.scope.active:
            raise asyncio.CancelledError(f"{self.scope.name} has ended")
        self.store.set_loading(True)
        try:
            todos, owners = await self.scope.run(
                asyncio.gather(
                    self.gateway.fetch_todos(refresh=refresh),
                    self.gateway.fetch_owners(refresh=refresh),
                )
            )
        except FetchError as e:
            logger.warning("Initial load failed: %s", e)
            self.store.set_loading(False)
            self.store.replace_snapshot(())
            self.errors.emit(e)
            raise

        self.store.replace_snapshot(todos)
        self.owners.update(owners)
        self.store.set_loading(False)
        logger.info("Session loaded: todos=%d owners=%d", len(todos), len(owners))

    async def refresh(self) -> None:
        await self.load(refresh=True)

    def start(self) -> asyncio.Task[None]:
        """Schedule the initial load in the background (errors go to `errors`)."""
        return self.scope.spawn(self._load_quietly())

    async def _load_quietly(self) -> None:
        try:
            await self.load()
        except FetchError:
            # Already published on `errors` and reflected in state.
            pass

    # ---- presentation helpers ----

    def resolve_owner(self, owner_id: int) -> str:
        return self.owners.resolve(owner_id)

    def set_search(self, text: str) -> None:
        self.filters.set_search(text)

    def set_status(self, status: str) -> None:
        self.filters.set_status(status)

    def set_owner(self, owner: int | str) -> None:
        self.filters.set_owner(owner)

    # ---- mutation intents ----

    async def create(self, title: str, owner_id: int | None = None) -> TodoItem:
        return await self._publishing(self.mutations.create(title, owner_id))

    async def update(self, todo_id: int, partial: Mapping[str, Any]) -> TodoItem | None:
        return await self._publishing(self.mutations.update(todo_id, partial))

    async def delete(self, todo_id: int) -> None:
        await self._publishing(self.mutations.delete(todo_id))

    async def toggle(self, todo_id: int) -> TodoItem:
        return await self._publishing(self.mutations.toggle(todo_id))

    async def _publishing(self, coro: Any) -> Any:
        try:
            return await coro
        except TodoSyncError as e:
            logger.warning("Mutation failed: %s", e)
            self.errors.emit(e)
            raise

    # ---- shutdown ----

    def close(self) -> None:
        """End the scope: observers detach, timers stop, late responses are dropped."""
        if self.scope.active:
            logger.info("Session closing")
        self.scope.end()

    async def aclose(self) -> None:
        self.close()
        aclose = getattr(self.gateway, "aclose", None)
        if callable(aclose):
            await aclose()

    async def __aenter__(self) -> TodoSession:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
