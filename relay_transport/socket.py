"""Callback-driven WebSocket handle for the relay transport.

A ``RelaySocket`` starts connecting as soon as it is constructed and reports
progress through four replaceable hooks: ``on_open``, ``on_message``,
``on_error`` and ``on_close``. Its ``ready_state`` follows the familiar
CONNECTING/OPEN/CLOSING/CLOSED sequence.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import IntEnum
from typing import Any

from websockets.asyncio.client import ClientConnection
from websockets.exceptions import ConnectionClosed

from .errors import RelayClientError, RelayConnectionError
from .ws import connect_websocket

_LOGGER = logging.getLogger(__name__)

Connector = Callable[..., Awaitable[ClientConnection]]


class ReadyState(IntEnum):
    """Socket ready states, numbered as on the wire-level WebSocket API."""

    CONNECTING = 0
    OPEN = 1
    CLOSING = 2
    CLOSED = 3


def noop(*_args: Any) -> None:
    """Hook that ignores its arguments."""


class RelaySocket:
    """Single WebSocket connection driven by an asyncio task.

    Must be constructed while an event loop is running. Hooks may be assigned
    right after construction; the connection attempt starts on the next loop
    iteration.
    """

    def __init__(
        self,
        url: str,
        *,
        ping_interval: float | None = 20,
        connect_timeout: float = 15.0,
        connector: Connector = connect_websocket,
    ) -> None:
        self.url = url
        self.ready_state = ReadyState.CONNECTING

        self.on_open: Callable[[], None] = noop
        self.on_message: Callable[[str], None] = noop
        self.on_error: Callable[[BaseException], None] = noop
        self.on_close: Callable[[], None] = noop

        self._ping_interval = ping_interval
        self._connect_timeout = connect_timeout
        self._connector = connector
        self._ws: ClientConnection | None = None
        self._outbox: asyncio.Queue[str] = asyncio.Queue()
        self._writer: asyncio.Task[None] | None = None
        self._closer: asyncio.Task[None] | None = None
        self._closed_notified = False
        self._task = asyncio.get_running_loop().create_task(self._run())
        self._task.add_done_callback(lambda _task: self._finish())

    def send(self, data: str) -> None:
        """Queue a text frame for transmission."""
        if self.ready_state is not ReadyState.OPEN:
            raise RelayConnectionError("WebSocket is not connected")
        self._outbox.put_nowait(data)

    def close(self) -> None:
        """Start closing the connection; ``on_close`` fires once it is down."""
        if self.ready_state in (ReadyState.CLOSING, ReadyState.CLOSED):
            return
        self.ready_state = ReadyState.CLOSING
        if self._ws is None:
            self._task.cancel()
        else:
            self._closer = asyncio.get_running_loop().create_task(self._ws.close())

    async def wait_closed(self) -> None:
        """Wait until the connection task has finished."""
        try:
            await asyncio.shield(self._task)
        except asyncio.CancelledError:
            if not self._task.cancelled():
                raise

    async def _run(self) -> None:
        try:
            self._ws = await self._connector(
                self.url,
                ping_interval=self._ping_interval,
                timeout=self._connect_timeout,
            )
        except RelayClientError as err:
            _LOGGER.debug("Connection to %s failed: %s", self.url, err)
            self.on_error(err)
            self._finish()
            return
        except asyncio.CancelledError:
            self._finish()
            raise

        if self.ready_state is ReadyState.CLOSING:
            await self._ws.close()
            self._finish()
            return

        self.ready_state = ReadyState.OPEN
        self._writer = asyncio.create_task(self._write_loop())
        try:
            self.on_open()
            await self._read_loop()
        finally:
            self._writer.cancel()
            self._finish()

    async def _read_loop(self) -> None:
        assert self._ws is not None
        try:
            async for frame in self._ws:
                if isinstance(frame, bytes):
                    continue
                if self.ready_state is not ReadyState.OPEN:
                    continue
                try:
                    self.on_message(frame)
                except Exception:
                    _LOGGER.exception("Message handler failed for %s", self.url)
        except ConnectionClosed:
            pass
        except Exception as err:
            self.on_error(err)

    async def _write_loop(self) -> None:
        assert self._ws is not None
        while True:
            data = await self._outbox.get()
            try:
                await self._ws.send(data)
            except ConnectionClosed:
                return
            except Exception as err:
                self.on_error(err)
                self.close()
                return

    def _finish(self) -> None:
        self.ready_state = ReadyState.CLOSED
        if self._closed_notified:
            return
        self._closed_notified = True
        self.on_close()
