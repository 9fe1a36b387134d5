# src/todo_sync/core/operators.py

from __future__ import annotations

"""
Stream operators built on Subject.

Each operator subscribes to its source(s) inside a LifecycleScope and returns a new
Subject. Ending the scope detaches the operator and cancels any pending timer.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from .scope import LifecycleScope
from .subject import MISSING, Subject

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class Debouncer:
    """
    Emit a value only after `delay` seconds without a newer one.

    Every push cancels the pending timer and schedules a new one, so only the
    surviving (last) value is forwarded.
    """

    def __init__(self, delay: float, on_fire: Callable[[Any], None]) -> None:
        self.delay = max(0.0, float(delay))
        self._on_fire = on_fire
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def push(self, value: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, value)

    def cancel(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.cancel()

    def _fire(self, value: Any) -> None:
        self._handle = None
        self._on_fire(value)


def debounce(source: Subject[T], delay: float, scope: LifecycleScope) -> Subject[T]:
    out: Subject[T] = Subject(name=f"{source.name}.debounce")
    debouncer = Debouncer(delay, out.emit)
    scope.add_teardown(debouncer.cancel)
    source.subscribe(debouncer.push, scope=scope)
    return out


def distinct_until_changed(
        source: Subject[T],
        scope: LifecycleScope,
        *,
        initial: T = MISSING,
) -> Subject[T]:
    """
    Drop values equal to the immediately preceding one.

    With `initial`, the output starts holding that value and it counts as "preceding".
    """
    out: Subject[T] = Subject(initial, name=f"{source.name}.distinct")

    def _on_value(value: T) -> None:
        if out.has_value and out.value == value:
            return
        out.emit(value)

    source.subscribe(_on_value, scope=scope)
    return out


class CombineLatest:
    """
    Join node over several sources.

    Holds the latest value of every input plus a "has value" flag. Once every input
    has produced at least one value, each upstream emission produces exactly one
    output tuple, in emission order.
    """

    def __init__(self, sources: Sequence[Subject[Any]], *, name: str = "combine") -> None:
        self._sources = list(sources)
        self._latest: list[Any] = [MISSING] * len(self._sources)
        self._ready = [False] * len(self._sources)
        self.output: Subject[tuple[Any, ...]] = Subject(name=name)

    @property
    def ready(self) -> bool:
        return all(self._ready)

    def connect(self, scope: LifecycleScope) -> Subject[tuple[Any, ...]]:
        for index, source in enumerate(self._sources):
            source.subscribe(self._slot(index), scope=scope)
        return self.output

    def _slot(self, index: int) -> Callable[[Any], None]:
        def _on_value(value: Any) -> None:
            self._latest[index] = value
            self._ready[index] = True
            if all(self._ready):
                self.output.emit(tuple(self._latest))

        return _on_value


def combine_latest(sources: Sequence[Subject[Any]], scope: LifecycleScope) -> Subject[tuple[Any, ...]]:
    return CombineLatest(sources).connect(scope)


def map_stream(
        source: Subject[T],
        fn: Callable[[T], R],
        scope: LifecycleScope,
        *,
        name: str | None = None,
) -> Subject[R]:
    out: Subject[R] = Subject(name=name or f"{source.name}.map")
    source.subscribe(lambda value: out.emit(fn(value)), scope=scope)
    return out
