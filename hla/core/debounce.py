"""Debounced value commits for search input."""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Cancel-and-restart timer that commits the last submitted value.

    Every ``submit`` cancels the pending timer and starts a new one. Only the
    value present when the timer fires is passed to the callback. Coroutine
    callbacks are scheduled as tasks on the running loop.
    """

    def __init__(self, delay: float, callback: Callable[[T], Awaitable[None] | None]) -> None:
        """Initialize the debouncer.

        Args:
            delay: Quiet period in seconds before a value is committed
            callback: Called with the committed value
        """
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        self.delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._value: T | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        """True while a value is waiting for the timer to fire."""
        return self._handle is not None

    @property
    def last_task(self) -> asyncio.Task[None] | None:
        """Task running the most recent coroutine callback, if any."""
        return self._task

    def submit(self, value: T) -> None:
        """Record a new value and restart the timer."""
        self._value = value
        if self._handle is not None:
            self._handle.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        """Drop the pending value without committing it."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._value = None

    def flush(self) -> None:
        """Commit the pending value immediately."""
        if self._handle is None:
            return
        self._handle.cancel()
        self._fire()

    def _fire(self) -> None:
        self._handle = None
        value = self._value
        self._value = None
        logger.debug(f"Debounced value committed: {value!r}")
        result = self._callback(value)  # type: ignore[arg-type]
        if inspect.isawaitable(result):
            self._task = asyncio.ensure_future(result)
