"""Event registration and dispatch for transport listeners."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

_LOGGER = logging.getLogger(__name__)

EventCallback = Callable[[Any], Any]


class EventDispatcher:
    """Map event names to callbacks, invoked in registration order.

    Registrations accumulate for the lifetime of the dispatcher; there is no
    removal. Coroutine callbacks are scheduled on the running loop.
    """

    def __init__(self) -> None:
        self._callbacks: defaultdict[str, list[EventCallback]] = defaultdict(list)
        self._tasks: set[asyncio.Task[Any]] = set()

    def on(self, event: str, callback: EventCallback) -> None:
        """Register ``callback`` for ``event``."""
        self._callbacks[event].append(callback)

    def listeners(self, event: str) -> tuple[EventCallback, ...]:
        return tuple(self._callbacks.get(event, ()))

    def dispatch(self, event: str, payload: Any) -> None:
        """Invoke every callback registered for ``event`` with ``payload``."""
        for callback in self.listeners(event):
            result = callback(payload)
            if inspect.iscoroutine(result):
                task = asyncio.ensure_future(result)
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)
