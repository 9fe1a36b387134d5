# src/todo_sync/core/scope.py

from __future__ import annotations

"""
Lifecycle scope.

A scope bounds the lifetime of subscriptions, timers and in-flight async work.
Ending it:
- cancels every task started through spawn()/run(),
- runs the registered teardown callbacks in registration order,
- makes run() refuse to hand back results that arrive afterwards.

Outbound HTTP requests that were already sent are not recalled; their responses are
simply never applied to state.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Teardown = Callable[[], None]


class LifecycleScope:
    def __init__(self, name: str = "scope") -> None:
        self.name = name
        self._teardowns: list[Teardown] = []
        self._tasks: set[asyncio.Future[Any]] = set()
        self._ended = False

    @property
    def active(self) -> bool:
        return not self._ended

    def add_teardown(self, callback: Teardown) -> None:
        """Register a callback for end(). If the scope already ended, run it now."""
        if self._ended:
            self._run_teardown(callback)
            return
        self._teardowns.append(callback)

    def remove_teardown(self, callback: Teardown) -> None:
        try:
            self._teardowns.remove(callback)
        except ValueError:
            pass

    def spawn(self, coro: Coroutine[Any, Any, T]) -> asyncio.Task[T]:
        """Start a background task owned by this scope."""
        if self._ended:
            coro.close()
            raise RuntimeError(f"{self.name} has ended")
        task = asyncio.get_running_loop().create_task(coro)
        self._track(task)
        return task

    async def run(self, awaitable: Awaitable[T]) -> T:
        """
        Await inside the scope.

        Raises asyncio.CancelledError if the scope ends before the result is
        ready, or if it ended while the result was waiting to be delivered.
        """
        if self._ended:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            elif asyncio.isfuture(awaitable):
                awaitable.cancel()
            raise asyncio.CancelledError(f"{self.name} has ended")

        fut = asyncio.ensure_future(awaitable)
        self._track(fut)
        result = await fut

        if self._ended:
            logger.debug("%s: discarding late result", self.name)
            raise asyncio.CancelledError(f"{self.name} has ended")
        return result

    def end(self) -> None:
        if self._ended:
            return
        self._ended = True

        tasks, self._tasks = list(self._tasks), set()
        teardowns, self._teardowns = self._teardowns, []

        logger.debug("%s: ending (tasks=%d teardowns=%d)", self.name, len(tasks), len(teardowns))

        for task in tasks:
            if not task.done():
                task.cancel()

        for callback in teardowns:
            self._run_teardown(callback)

    def _track(self, fut: asyncio.Future[Any]) -> None:
        self._tasks.add(fut)
        fut.add_done_callback(self._tasks.discard)

    def _run_teardown(self, callback: Teardown) -> None:
        try:
            callback()
        except Exception:
            logger.exception("%s: teardown callback failed", self.name)

    async def __aenter__(self) -> LifecycleScope:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.end()
