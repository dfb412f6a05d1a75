"""Deferred: a memoized, chainable wrapper around an eventual value.

Every filesystem operation returns a :class:`Deferred`, so a pipeline such as::

    files = await walk("docs").filter(is_markdown).map(read)

is built before anything is awaited. Each transform returns a new
``Deferred``; the original is resolved at most once no matter how many
chains hang off it.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable, Generator, Iterable, Mapping
from typing import Any, Generic, TypeVar

T = TypeVar("T")


async def settle(value: Any) -> Any:
    """Await *value* until it is no longer awaitable.

    Deferreds are awaitable, so a Deferred of a Deferred flattens to the
    innermost value.
    """
    while inspect.isawaitable(value):
        value = await value
    return value


async def _run(source: Any) -> Any:
    if not inspect.isawaitable(source) and callable(source):
        source = source()
    return await settle(source)


def _as_list(value: Any, operation: str) -> list[Any]:
    if isinstance(value, (str, bytes, bytearray, Mapping)) or not isinstance(
        value, Iterable
    ):
        raise TypeError(
            f"Cannot {operation} a non-list value of type {type(value).__name__!r}"
        )
    return list(value)


class Deferred(Generic[T]):
    """Awaitable wrapper around a value, a zero-argument callable, an
    awaitable, or another ``Deferred``.

    The source is not touched until the first ``await``. The resulting task
    is kept, so later awaits (and every chain built from this instance) share
    one resolution.
    """

    __slots__ = ("_source", "_task")

    def __init__(self, source: Any = None) -> None:
        self._source = source
        self._task: asyncio.Future[Any] | None = None

    def _future(self) -> asyncio.Future[Any]:
        if self._task is None:
            source, self._source = self._source, None
            self._task = asyncio.ensure_future(_run(source))
        return self._task

    def begin(self) -> Deferred[T]:
        """Start resolving now if an event loop is running, else on first await."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return self
        self._future()
        return self

    def __await__(self) -> Generator[Any, None, T]:
        return self._future().__await__()

    def __repr__(self) -> str:
        if self._task is None:
            state = "pending"
        elif not self._task.done():
            state = "running"
        elif self._task.cancelled():
            state = "cancelled"
        elif self._task.exception() is not None:
            state = f"failed: {self._task.exception()!r}"
        else:
            state = f"resolved: {self._task.result()!r}"
        return f"<Deferred {state}>"

    # -- whole-value transforms --

    def then(self, fn: Callable[[Any], Any]) -> Deferred[Any]:
        async def run() -> Any:
            return await settle(fn(await self))

        return Deferred(run)

    def catch(
        self,
        handler: Callable[[BaseException], Any],
        exc_type: type[BaseException] | tuple[type[BaseException], ...] = Exception,
    ) -> Deferred[Any]:
        """Recover from failures of type *exc_type*; others still propagate."""

        async def run() -> Any:
            try:
                return await self
            except exc_type as exc:
                return await settle(handler(exc))

        return Deferred(run)

    # -- list transforms --

    def map(self, fn: Callable[[Any], Any]) -> Deferred[list[Any]]:
        """Apply *fn* to every element concurrently, keeping input order."""

        async def run() -> list[Any]:
            items = _as_list(await self, "map")
            return list(await asyncio.gather(*(settle(fn(item)) for item in items)))

        return Deferred(run)

    def filter(self, predicate: Callable[[Any], Any]) -> Deferred[list[Any]]:
        async def run() -> list[Any]:
            items = _as_list(await self, "filter")
            keep = await asyncio.gather(*(settle(predicate(item)) for item in items))
            return [item for item, ok in zip(items, keep) if ok]

        return Deferred(run)

    def reduce(self, fn: Callable[[Any, Any], Any], initial: Any) -> Deferred[Any]:
        """Left fold. Each accumulator is awaited before the next step runs."""

        async def run() -> Any:
            items = _as_list(await self, "reduce")
            acc = await settle(initial)
            for item in items:
                acc = await settle(fn(acc, item))
            return acc

        return Deferred(run)

    def first(self) -> Deferred[Any]:
        async def run() -> Any:
            items = _as_list(await self, "take the first element of")
            return items[0] if items else None

        return Deferred(run)

    shift = first

    def sorted(
        self, key: Callable[[Any], Any] | None = None, reverse: bool = False
    ) -> Deferred[list[Any]]:
        async def run() -> list[Any]:
            return sorted(_as_list(await self, "sort"), key=key, reverse=reverse)

        return Deferred(run)

    # -- forwarding sugar --

    def __getattr__(self, name: str) -> Deferred[Any]:
        if name.startswith("_"):
            raise AttributeError(name)

        async def run() -> Any:
            return getattr(await self, name)

        return Deferred(run)

    def __call__(self, *args: Any, **kwargs: Any) -> Deferred[Any]:
        async def run() -> Any:
            target = await self
            return await settle(target(*args, **kwargs))

        return Deferred(run)


def deferred(source: Any = None) -> Deferred[Any]:
    """Wrap *source* in a :class:`Deferred` (returned as-is if it already is one)."""
    if isinstance(source, Deferred):
        return source
    return Deferred(source)
