# src/todo_sync/core/subject.py

from __future__ import annotations

"""
Push-based multicast value streams.

Subject keeps a list of observers and (optionally) the last emitted value.
- Observers are called synchronously, in registration order.
- A subject that holds a value replays it to every new observer immediately.
- An emit() issued from inside an observer is queued and delivered after the
  current round, so every observer sees values in the same order.
- An observer that raises is logged; the remaining observers are still notified.
"""

import logging
from collections import deque
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from .scope import LifecycleScope

logger = logging.getLogger(__name__)

T = TypeVar("T")

Observer = Callable[[T], None]


class _Missing:
    def __repr__(self) -> str:
        return "<missing>"


MISSING: Any = _Missing()


class Subscription:
    def __init__(self, subject: Subject[Any], observer: Observer[Any]) -> None:
        self._subject: Subject[Any] | None = subject
        self._observer = observer

    @property
    def closed(self) -> bool:
        return self._subject is None

    def unsubscribe(self) -> None:
        subject, self._subject = self._subject, None
        if subject is not None:
            subject._detach(self)

    def _deliver(self, value: Any) -> None:
        if self._subject is not None:
            self._observer(value)


class Subject(Generic[T]):
    def __init__(self, initial: T = MISSING, *, name: str = "subject") -> None:
        self.name = name
        self._value = initial
        self._subscriptions: list[Subscription] = []
        self._pending: deque[T] = deque()
        self._emitting = False

    @property
    def has_value(self) -> bool:
        return self._value is not MISSING

    @property
    def value(self) -> T:
        if self._value is MISSING:
            raise LookupError(f"{self.name} has not emitted yet")
        return self._value

    @property
    def observer_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, observer: Observer[T], *, scope: LifecycleScope | None = None) -> Subscription:
        """
        Register an observer. If the subject holds a value, the observer gets it immediately.

        When a scope is given, the subscription is dropped when the scope ends.
        """
        sub = Subscription(self, observer)
        self._subscriptions.append(sub)
        if scope is not None:
            scope.add_teardown(sub.unsubscribe)
        if self._value is not MISSING and not sub.closed:
            sub._deliver(self._value)
        return sub

    def emit(self, value: T) -> None:
        self._pending.append(value)
        if self._emitting:
            return

        self._emitting = True
        try:
            while self._pending:
                current = self._pending.popleft()
                self._value = current
                # Snapshot the list: observers may (un)subscribe while being notified.
                for sub in list(self._subscriptions):
                    try:
                        sub._deliver(current)
                    except Exception:
                        logger.exception("%s: observer failed", self.name)
        finally:
            self._emitting = False

    def _detach(self, sub: Subscription) -> None:
        try:
            self._subscriptions.remove(sub)
        except ValueError:
            pass
