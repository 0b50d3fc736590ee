"""Timer abstraction for card animations.

The card controller schedules its exit and shake timeouts through a
Scheduler rather than a UI toolkit, so the same state machine runs under
asyncio, in a terminal session, or under a manually advanced clock in
tests.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Coroutine, Protocol

from sortie.logging import get_logger

logger = get_logger(__name__)

# Fixed animation timings, in seconds
EXIT_DELAY = 0.2
SHAKE_DURATION = 0.18


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Schedules callbacks and background coroutines."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay`` seconds."""
        ...

    def spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        """Run ``coro`` to completion in the background."""
        ...


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop
        self._tasks: set[asyncio.Task] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback)

    def spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = self.loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Background task failed: {error}", exc_info=error)

    async def drain(self) -> None:
        """Wait for every spawned coroutine to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
