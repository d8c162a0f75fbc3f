"""Coroutine-safe primitives used across the project."""

from __future__ import annotations

import asyncio
from concurrent.futures import Executor
from functools import partial
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from utils.log_config import get_logger

log = get_logger(__name__)

T = TypeVar("T")


async def run_blocking(executor: Optional[Executor], fn: Callable[..., T], *args: Any) -> T:
    """
    Run *fn* off the event loop.

    Without an executor this is ``asyncio.to_thread``.  A caller-owned
    executor lets the caller walk away from a stuck call: ``asyncio.run``
    only joins the loop's default pool.
    """
    if executor is None:
        return await asyncio.to_thread(fn, *args)
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, partial(fn, *args))


class SingleFlight(Generic[T]):
    """
    At most one in-flight execution of an expensive coroutine.

    The first caller starts the work; callers arriving while it runs
    await the same task and receive the same outcome (or exception).
    Once the task settles the next ``run()`` starts a fresh execution.
    """

    def __init__(self) -> None:
        self._task: Optional[asyncio.Future] = None
        self._executions = 0

    async def run(self, factory: Callable[[], Awaitable[T]]) -> T:
        task = self._task
        if task is None:
            task = asyncio.ensure_future(factory())
            self._task = task
            self._executions += 1
            task.add_done_callback(self._release)
        else:
            log.debug("Joining in-flight execution")
        # one impatient caller must not cancel the shared work
        return await asyncio.shield(task)

    def _release(self, task: asyncio.Future) -> None:
        if self._task is task:
            self._task = None

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def executions(self) -> int:
        return self._executions

    def __repr__(self) -> str:
        return f"SingleFlight(in_flight={self.in_flight}, executions={self._executions})"
