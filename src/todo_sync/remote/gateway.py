# src/todo_sync/remote/gateway.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Generic, Mapping, TypeVar

import httpx

from ..config import Settings
from ..core.models import Owner, TodoItem, to_wire_partial
from ..errors import FetchError, MutationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_RETRYABLE_STATUS = {408, 429}


def build_timeout(settings: Settings) -> httpx.Timeout:
    """Keep read >= connect as a sane baseline; writes and pool share the connect budget."""
    connect_s = float(settings.connect_timeout_seconds)
    read_s = max(float(settings.read_timeout_seconds), connect_s)
    return httpx.Timeout(connect=connect_s, read=read_s, write=read_s, pool=connect_s)


def build_client(settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=build_timeout(settings),
        headers={"Accept": "application/json"},
        transport=transport,
    )


def _is_transient(exc: Exception) -> bool:
    """Network trouble, server-side errors and garbled bodies are worth another try."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status >= 500 or status in _RETRYABLE_STATUS
    # json.JSONDecodeError and payload shape errors
    return isinstance(exc, ValueError)


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    return response.json()


def _consume_result(task: asyncio.Task[Any]) -> None:
    # Nobody may be awaiting a detached write any more.
    if not task.cancelled():
        task.exception()


class _ReplayCache(Generic[T]):
    """
    Latest successful read, replayed to later callers.

    Concurrent callers share one in-flight load. Failed or cancelled loads are
    dropped so the next call starts over.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._task: asyncio.Task[T] | None = None

    @property
    def has_result(self) -> bool:
        task = self._task
        return task is not None and task.done() and not task.cancelled() and task.exception() is None

    def clear(self) -> None:
        self._task = None

    async def get(self, load: Callable[[], Awaitable[T]], *, refresh: bool = False) -> T:
        task = self._task
        if refresh or task is None:
            task = asyncio.get_running_loop().create_task(load())
            task.add_done_callback(self._on_done)
            self._task = task
        else:
            logger.debug("%s: replaying cached read", self.name)
        # One caller giving up must not abort the shared request.
        return await asyncio.shield(task)

    def _on_done(self, task: asyncio.Task[T]) -> None:
        if task.cancelled():
            failed = True
        else:
            # Retrieve the exception so an unawaited failure is not reported as lost.
            failed = task.exception() is not None
        if failed and self._task is task:
            self._task = None


class RemoteGateway:
    """
    HTTP gateway for the remote todo collection.

    Reads (GET /todos, GET /users):
    - retried `read_retries` extra times on transient failure, no backoff
    - FetchError after exhaustion
    - latest success cached and replayed until refresh=True / invalidate()
    - /todos truncated to `fetch_limit` items before caching

    Writes (POST/PUT/DELETE/PATCH /todos):
    - request retried `write_retries` extra times, MutationError after exhaustion
    - an accepted write with an undecodable body fails without being re-sent
    - shielded from caller cancellation, never cached
    """

    def __init__(
            self,
            client: httpx.AsyncClient,
            *,
            read_retries: int = 2,
            write_retries: int = 1,
            fetch_limit: int = 50,
            owns_client: bool = False,
    ) -> None:
        self._client = client
        self._read_attempts = 1 + max(0, int(read_retries))
        self._write_attempts = 1 + max(0, int(write_retries))
        self._fetch_limit = max(0, int(fetch_limit))
        self._owns_client = owns_client

        self._todos_cache: _ReplayCache[tuple[TodoItem, ...]] = _ReplayCache("todos")
        self._owners_cache: _ReplayCache[tuple[Owner, ...]] = _ReplayCache("owners")
        self._writes: set[asyncio.Task[Any]] = set()

    @classmethod
    def from_settings(
            cls,
            settings: Settings,
            *,
            transport: httpx.AsyncBaseTransport | None = None,
    ) -> RemoteGateway:
        return cls(
            build_client(settings, transport=transport),
            read_retries=settings.read_retries,
            write_retries=settings.write_retries,
            fetch_limit=settings.fetch_limit,
            owns_client=True,
        )

    async def aclose(self) -> None:
        """Let dispatched writes finish, then close an owned client."""
        if self._writes:
            await asyncio.gather(*self._writes, return_exceptions=True)
        if self._owns_client:
            await self._client.aclose()

    def invalidate(self) -> None:
        """Forget cached reads; the next fetch goes to the network."""
        self._todos_cache.clear()
        self._owners_cache.clear()

    # ---- low-level helpers ----

    async def _send(self, method: str, url: str, *, body: Any = None) -> httpx.Response:
        response = await self._client.request(method, url, json=body)
        response.raise_for_status()
        return response

    async def _request_json(self, method: str, url: str, *, body: Any = None) -> Any:
        return _decode(await self._send(method, url, body=body))

    async def _with_retries(self, call: Callable[[], Awaitable[T]], *, attempts: int, label: str) -> T:
        for attempt in range(1, attempts + 1):
            try:
                return await call()
            except Exception as e:
                if not _is_transient(e) or attempt >= attempts:
                    raise
                logger.info("%s: attempt %d/%d failed (%s), retrying", label, attempt, attempts, e.__class__.__name__)
        raise AssertionError("unreachable")

    # ---- reads ----

    async def fetch_todos(self, *, refresh: bool = False) -> tuple[TodoItem, ...]:
        return await self._todos_cache.get(self._load_todos, refresh=refresh)

    async def fetch_owners(self, *, refresh: bool = False) -> tuple[Owner, ...]:
        return await self._owners_cache.get(self._load_owners, refresh=refresh)

    async def _load_todos(self) -> tuple[TodoItem, ...]:
        async def _call() -> tuple[TodoItem, ...]:
            payload = await self._request_json("GET", "/todos")
            if not isinstance(payload, list):
                raise ValueError("expected a JSON array of todos")
            return tuple(TodoItem.from_json(raw) for raw in payload[: self._fetch_limit])

        try:
            todos = await self._with_retries(_call, attempts=self._read_attempts, label="GET /todos")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Loading todos failed: %s", e)
            raise FetchError("Unable to load todos", resource="todos") from e

        logger.info("Todos loaded: %d", len(todos))
        return todos

    async def _load_owners(self) -> tuple[Owner, ...]:
        async def _call() -> tuple[Owner, ...]:
            payload = await self._request_json("GET", "/users")
            if not isinstance(payload, list):
                raise ValueError("expected a JSON array of users")
            return tuple(Owner.from_json(raw) for raw in payload)

        try:
            owners = await self._with_retries(_call, attempts=self._read_attempts, label="GET /users")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Loading owners failed: %s", e)
            raise FetchError("Unable to load owners", resource="owners") from e

        logger.info("Owners loaded: %d", len(owners))
        return owners

    # ---- writes ----

    async def _write(self, method: str, url: str, *, body: Any, operation: str, message: str) -> Any:
        """
        Send a write as its own task. A cancelled caller only detaches: a request
        already on the wire runs to completion.
        """
        task = asyncio.get_running_loop().create_task(
            self._send_write(method, url, body=body, operation=operation, message=message)
        )
        self._writes.add(task)
        task.add_done_callback(self._writes.discard)
        task.add_done_callback(_consume_result)
        return await asyncio.shield(task)

    async def _send_write(self, method: str, url: str, *, body: Any, operation: str, message: str) -> Any:
        # Only the request is retried; a 2xx is never sent again.
        try:
            response = await self._with_retries(
                lambda: self._send(method, url, body=body),
                attempts=self._write_attempts,
                label=f"{method} {url}",
            )
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise MutationError(message, operation=operation) from e

        try:
            return _decode(response)
        except ValueError as e:
            logger.warning("%s %s: undecodable response: %s", method, url, e)
            raise MutationError(message, operation=operation) from e

    async def create(self, title: str, owner_id: int) -> TodoItem:
        body = {"title": title, "userId": owner_id, "completed": False}
        payload = await self._write("POST", "/todos", body=body, operation="create", message="Unable to create the todo")

        merged = dict(body)
        if isinstance(payload, dict):
            merged.update(payload)
        try:
            created = TodoItem.from_json(merged)
        except ValueError as e:
            raise MutationError("Unable to create the todo", operation="create") from e

        logger.info("Todo created remotely: id=%s", created.id)
        return created

    async def replace(self, todo_id: int, partial: Mapping[str, Any]) -> dict[str, Any]:
        payload = await self._write(
            "PUT",
            f"/todos/{todo_id}",
            body=to_wire_partial(partial),
            operation="update",
            message="Unable to update the todo",
        )
        logger.info("Todo updated remotely: id=%s", todo_id)
        return payload if isinstance(payload, dict) else {}

    async def delete(self, todo_id: int) -> None:
        await self._write(
            "DELETE",
            f"/todos/{todo_id}",
            body=None,
            operation="delete",
            message="Unable to delete the todo",
        )
        logger.info("Todo deleted remotely: id=%s", todo_id)

    async def patch_completion(self, todo_id: int, completed: bool) -> dict[str, Any]:
        payload = await self._write(
            "PATCH",
            f"/todos/{todo_id}",
            body={"completed": completed},
            operation="toggle",
            message="Unable to toggle the todo",
        )
        logger.info("Todo completion patched remotely: id=%s completed=%s", todo_id, completed)
        return payload if isinstance(payload, dict) else {}
