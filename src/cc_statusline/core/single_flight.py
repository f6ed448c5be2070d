"""Coalesce concurrent fetches that share a key.

The first caller for a key starts the work; callers arriving while it is in
flight await the same task and see the same outcome, value or exception.
The registration is dropped the moment the task settles, so the next call
starts a fresh fetch. Results are not retained; pair with TTLCache for that.

// [LAW:single-enforcer] In-flight bookkeeping happens only in SingleFlight.execute().
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class SingleFlight(Generic[T]):
    def __init__(self) -> None:
        self._pending: dict[str, asyncio.Task[T]] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    async def execute(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._pending[key] = task
            task.add_done_callback(lambda done, k=key: self._forget(k, done))
        # shield: one waiter being cancelled must not cancel the shared fetch.
        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Task[T]) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        # Mark the exception retrieved even if every waiter went away.
        if not task.cancelled():
            task.exception()
