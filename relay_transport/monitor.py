"""Network connectivity monitor.

The monitor emits ``"online"`` when connectivity comes back and ``"offline"``
when it is lost. It is passive until :meth:`NetworkMonitor.start` is called
with a probe URL configured; :meth:`NetworkMonitor.emit` can be used to feed
it signals from elsewhere.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable

import aiohttp

from .errors import RelayConfigError

_LOGGER = logging.getLogger(__name__)


class NetworkMonitor:
    """Emit online/offline transitions based on an HTTP reachability probe."""

    def __init__(
        self,
        probe_url: str | None = None,
        *,
        interval: float = 5.0,
        timeout: float = 3.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._probe_url = probe_url
        self._interval = interval
        self._timeout = timeout
        self._session = session
        self._owns_session = False
        self._callbacks: defaultdict[str, list[Callable[[], None]]] = defaultdict(
            list
        )
        self._online: bool | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def online(self) -> bool | None:
        """Last observed connectivity, or None before the first probe."""
        return self._online

    def on(self, event: str, callback: Callable[[], None]) -> None:
        """Register ``callback`` for ``"online"`` or ``"offline"``."""
        self._callbacks[event].append(callback)

    def emit(self, event: str) -> None:
        """Invoke every callback registered for ``event``."""
        for callback in tuple(self._callbacks.get(event, ())):
            callback()

    def start(self) -> None:
        """Start probing in the background."""
        if not self._probe_url:
            raise RelayConfigError("NetworkMonitor needs a probe_url to start")
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._probe_loop())

    async def stop(self) -> None:
        """Stop probing and release the owned HTTP session."""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
            self._owns_session = False

    async def probe(self) -> bool:
        """Return True when the probe URL answers at all."""
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        try:
            async with self._session.head(
                self._probe_url,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                allow_redirects=False,
            ):
                return True
        except TimeoutError:
            return False
        except aiohttp.ClientError as err:
            _LOGGER.debug("Probe of %s failed: %s", self._probe_url, err)
            return False

    def update(self, online: bool) -> None:
        """Record a connectivity observation and emit on transitions."""
        previous = self._online
        self._online = online
        if previous is None or previous == online:
            return
        _LOGGER.info("Network is %s", "online" if online else "offline")
        self.emit("online" if online else "offline")

    async def _probe_loop(self) -> None:
        while True:
            self.update(await self.probe())
            await asyncio.sleep(self._interval)
