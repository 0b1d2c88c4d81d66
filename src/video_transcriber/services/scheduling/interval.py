from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger("scheduling")

TickCallback = Callable[[], Union[None, Awaitable[Any]]]
StopCondition = Union[bool, Callable[[], bool]]


def _evaluate(stop_condition: StopCondition) -> bool:
    return bool(stop_condition()) if callable(stop_condition) else bool(stop_condition)


class IntervalHandle:
    """Handle to one repeating timer. Cancelling is idempotent."""

    def __init__(self, task: Optional[asyncio.Task] = None) -> None:
        self._task = task

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None


class IntervalScheduler:
    """Runs a callback every ``period_ms`` on the running event loop.

    The scheduler owns at most one timer. Each call to :meth:`schedule`
    releases the previous timer before deciding whether to start a new one,
    so reconfiguring never leaves a stray timer behind. Ticks are strictly
    sequential: the next sleep only begins once the callback (and anything
    it awaits) has finished.
    """

    def __init__(self) -> None:
        self._handle = IntervalHandle()

    @property
    def active(self) -> bool:
        return self._handle.active

    def schedule(
        self,
        callback: TickCallback,
        period_ms: Optional[int],
        stop_condition: StopCondition = False,
    ) -> IntervalHandle:
        """(Re)configure the timer.

        ``stop_condition`` may be a bool or a zero-argument callable. It is
        evaluated now; if it holds (or ``period_ms`` is None) no timer is
        started. A callable condition is re-checked after every tick and ends
        the timer for good once it holds.
        """

        self._handle.cancel()

        if period_ms is None or _evaluate(stop_condition):
            self._handle = IntervalHandle()
            return self._handle

        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run(callback, period_ms / 1000.0, stop_condition))
        self._handle = IntervalHandle(task)
        return self._handle

    def cancel(self) -> None:
        self._handle.cancel()

    async def _run(self, callback: TickCallback, period: float, stop_condition: StopCondition) -> None:
        while True:
            await asyncio.sleep(period)
            try:
                result = callback()
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Interval callback raised; continuing on next tick")
            if callable(stop_condition) and stop_condition():
                return
