"""Debounced input.

Delays acting on a value until it has stopped changing for a quiescence
window, so a search runs once the user pauses typing instead of on every
keystroke.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

DebounceCallback = Callable[[str], Awaitable[Any] | Any]


class Debouncer:
    """Emits the latest pushed value after ``window`` seconds of quiet.

    Pushing again before the window elapses discards the pending emission
    and restarts the timer. Once the window has elapsed the emission is no
    longer pending: a later push does not interrupt a callback that is
    already running. A value equal to the last emitted one is not emitted
    again.

    Args:
        window: Quiescence window in seconds
        callback: Called with the stabilized value (sync or async)
        initial: Starting stabilized value
    """

    def __init__(
        self,
        window: float,
        callback: DebounceCallback | None = None,
        initial: str = "",
    ) -> None:
        self.window = window
        self.callback = callback
        self._value = initial
        self._pending_value: str | None = None
        self._timer: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def value(self) -> str:
        """The stabilized value."""
        return self._value

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def push(self, value: str) -> None:
        """Accept a raw input value and restart the quiescence timer."""
        self.cancel()
        self._pending_value = value
        self._timer = asyncio.create_task(self._wait_then_emit(value))
        self._tasks.add(self._timer)
        self._timer.add_done_callback(self._on_task_done)

    def cancel(self) -> None:
        """Drop any pending emission."""
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None
        self._pending_value = None

    async def flush(self) -> None:
        """Emit the pending value now instead of waiting out the window."""
        value = self._pending_value
        self.cancel()
        if value is not None:
            await self._emit(value)

    async def join(self) -> None:
        """Wait until no timer or emission is outstanding."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _wait_then_emit(self, value: str) -> None:
        await asyncio.sleep(self.window)
        self._timer = None
        self._pending_value = None
        await self._emit(value)

    async def _emit(self, value: str) -> None:
        if value == self._value:
            return
        self._value = value
        logger.debug("debounce_emitted", value=value)
        if self.callback is None:
            return
        result = self.callback(value)
        if inspect.isawaitable(result):
            await result

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("debounce_callback_failed", error=str(error), exc_info=error)
