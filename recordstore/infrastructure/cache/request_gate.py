"""Request gate: collapse concurrent identical fetches into one.

The first caller for a key starts the fetch as a task; every caller that
arrives while it is in flight awaits the same task and gets the same result
or exception. The key is released when the task finishes, so the next
non-overlapping call fetches again.

Scope is one process and one event loop. The in-flight table is only
touched from the loop thread between awaits, so it needs no lock.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable
from functools import partial
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestGate:
    """Per-key deduplication of in-flight async calls.

    Waiters await the shared task through asyncio.shield: a cancelled or
    timed-out caller leaves immediately without cancelling the fetch the
    other callers are waiting on. The optional timeout bounds the shared
    fetch itself; when it expires every waiter gets TimeoutError.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._calls: dict[Hashable, asyncio.Task[Any]] = {}
        self._timeout = timeout

    @property
    def in_flight(self) -> int:
        """Number of keys with a fetch currently running."""
        return len(self._calls)

    def is_in_flight(self, key: Hashable) -> bool:
        return key in self._calls

    async def run_once(self, key: Hashable, fn: Callable[[], Awaitable[T]]) -> T:
        """Run fn for key unless a call for key is already in flight; share its outcome.

        Args:
            key: Deduplication key (e.g. record id).
            fn: Zero-argument coroutine function performing the fetch.

        Returns:
            The result of the single fn() execution.

        Raises:
            Whatever fn() raised, to every waiter; TimeoutError when the gate
            timeout expires; CancelledError when this caller is cancelled.
        """
        task = self._calls.get(key)
        if task is None:
            task = asyncio.get_running_loop().create_task(self._run(fn))
            self._calls[key] = task
            # Registered before any waiter's shield callback, so the key is
            # released before a waiter resumes.
            task.add_done_callback(partial(self._release, key))
        else:
            logger.debug("Joining in-flight fetch for key %s", key)
        return await asyncio.shield(task)

    def forget(self, key: Hashable) -> None:
        """Stop sharing the in-flight fetch for key; the next caller starts a new one.

        Callers already waiting keep waiting on the old fetch.
        """
        self._calls.pop(key, None)

    async def _run(self, fn: Callable[[], Awaitable[T]]) -> T:
        if self._timeout is None:
            return await fn()
        async with asyncio.timeout(self._timeout):
            return await fn()

    def _release(self, key: Hashable, task: asyncio.Task[Any]) -> None:
        if self._calls.get(key) is task:
            del self._calls[key]
        if task.cancelled():
            return
        # Retrieve the exception so it is not reported as never retrieved
        # when every waiter has already gone away.
        exc = task.exception()
        if exc is not None:
            logger.debug("In-flight fetch for key %s failed: %r", key, exc)
