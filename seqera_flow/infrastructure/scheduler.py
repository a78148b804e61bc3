"""A cancellable, strictly sequential repeating task."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

PollAction = Callable[[], Awaitable[None]]
ErrorCallback = Callable[[Exception], None]


def _current_task() -> asyncio.Task | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class PollScheduler:
    """Runs one action immediately and then every ``interval`` seconds.

    The next run is armed only after the previous one has settled, so two runs
    of the same scheduler never overlap. At most one loop is alive per
    scheduler: :meth:`start` replaces any running loop. Exceptions raised by
    the action are logged, handed to ``on_error`` and polling carries on.
    """

    def __init__(self, name: str = "poll", *, on_error: ErrorCallback | None = None) -> None:
        self.name = name
        self.on_error = on_error
        self._task: asyncio.Task | None = None
        self._last_task: asyncio.Task | None = None
        self.ticks = 0

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, interval: float, action: PollAction) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.stop()
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(interval, action), name=f"{self.name}-scheduler")
        self._last_task = self._task

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        # Called from within the action: the loop exits once the action returns.
        if task is not _current_task():
            task.cancel()

    async def join(self) -> None:
        """Wait until the most recently started loop has finished."""

        task = self._last_task
        if task is not None:
            await asyncio.wait({task})

    async def _run(self, interval: float, action: PollAction) -> None:
        me = asyncio.current_task()
        while self._task is me:
            self.ticks += 1
            try:
                await action()
            except Exception as exc:
                logger.exception("%s: poll tick %d failed", self.name, self.ticks)
                if self.on_error is not None:
                    try:
                        self.on_error(exc)
                    except Exception:
                        logger.exception("%s: error callback failed", self.name)
            if self._task is not me:
                break
            await asyncio.sleep(interval)


__all__ = ["PollScheduler"]
