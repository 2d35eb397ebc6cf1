"""Reconnecting pub/sub transport for a relay endpoint.

This module owns the connection state machine. It handles:
- Connection creation, promotion and silent closing
- Timed reconnection after every unexpected close
- Buffering envelopes while disconnected and replaying them on open
- Re-subscribing configured topics on every (re)connection
- Acknowledging every inbound envelope and dispatching it to listeners

All public methods are synchronous and must be called from the event loop
thread. A running loop is required whenever a connection attempt starts.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from enum import Enum
from functools import partial
from typing import Any, Protocol

from .config import TransportOptions
from .errors import (
    EnvelopeDecodeError,
    RelayConfigError,
    RelaySocketError,
    RelayTopicError,
)
from .events import EventCallback, EventDispatcher
from .monitor import NetworkMonitor
from .protocol import (
    Envelope,
    build_ack,
    build_publish,
    build_subscribe,
    decode_envelope,
    encode_envelope,
)
from .retry import FixedDelayRetry, RetryPolicy
from .socket import ReadyState, RelaySocket, noop
from .url import Environment, get_websocket_url

_LOGGER = logging.getLogger(__name__)


class SocketHandle(Protocol):
    """What the transport needs from a connection handle."""

    ready_state: int
    on_open: Callable[[], None]
    on_message: Callable[[str], None]
    on_error: Callable[[BaseException], None]
    on_close: Callable[[], None]

    def send(self, data: str) -> None: ...

    def close(self) -> None: ...


SocketFactory = Callable[[str], SocketHandle | None]


class ConnectionState(Enum):
    """Read-only projection of the active connection's ready state."""

    ABSENT = "absent"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


_READY_STATES = {
    ReadyState.CONNECTING: ConnectionState.CONNECTING,
    ReadyState.OPEN: ConnectionState.OPEN,
    ReadyState.CLOSING: ConnectionState.CLOSING,
    ReadyState.CLOSED: ConnectionState.CLOSED,
}


class SocketTransport:
    """Publish/subscribe client that survives disconnects.

    Usage:
        transport = SocketTransport(
            url="https://relay.example.com", protocol="wc", version=1,
            subscriptions=["client-id"],
        )
        transport.on("message", handle_envelope)
        transport.open()
        transport.send("payload", "peer-id")
        transport.close()
    """

    def __init__(
        self,
        *,
        url: str,
        protocol: str = "",
        version: int = 1,
        subscriptions: Iterable[str] | None = None,
        net_monitor: NetworkMonitor | None = None,
        retry_policy: RetryPolicy | None = None,
        socket_factory: SocketFactory | None = None,
        environment: Environment | None = None,
        ping_interval: float | None = 20,
        connect_timeout: float = 15.0,
    ) -> None:
        """Initialize transport.

        Args:
            url: Base relay endpoint; http(s) schemes are upgraded to ws(s)
            protocol: Protocol name appended to the connection URL
            version: Protocol version appended to the connection URL
            subscriptions: Topics subscribed on every connection
            net_monitor: Source of "online" signals (default: passive NetworkMonitor)
            retry_policy: Reconnect delay policy (default: 0.5s forever)
            socket_factory: Builds a connection handle from a URL (default: RelaySocket)
            environment: Runtime descriptor for the URL (default: detected)
            ping_interval: Keepalive ping interval for the default socket
            connect_timeout: Connect timeout for the default socket

        Raises:
            RelayConfigError: If url is missing or not a string
        """
        if not url or not isinstance(url, str):
            raise RelayConfigError("Missing or invalid WebSocket url")

        self._url = url
        self._protocol = protocol
        self._version = version
        self._environment = environment

        # Connection slots
        self._socket: SocketHandle | None = None
        self._next_socket: SocketHandle | None = None
        self._socket_factory: SocketFactory = socket_factory or partial(
            RelaySocket, ping_interval=ping_interval, connect_timeout=connect_timeout
        )

        # Retry
        self._retry_policy: RetryPolicy = retry_policy or FixedDelayRetry()
        self._retry_handle: asyncio.TimerHandle | None = None
        self._retry_attempts = 0

        # Outbound traffic
        self._queue: list[Envelope] = []
        self._configured_subscriptions: tuple[str, ...] = tuple(subscriptions or ())
        self._subscriptions: list[str] = list(self._configured_subscriptions)

        self._events = EventDispatcher()

        self._net_monitor = net_monitor if net_monitor is not None else NetworkMonitor()
        self._net_monitor.on("online", self._handle_online)

    @classmethod
    def from_options(cls, options: TransportOptions, **kwargs: Any) -> SocketTransport:
        """Build a transport from loaded options.

        Extra keyword arguments (net_monitor, socket_factory, environment) are
        passed through to the constructor.
        """
        return cls(
            url=options.url,
            protocol=options.protocol,
            version=options.version,
            subscriptions=options.subscriptions,
            retry_policy=kwargs.pop("retry_policy", options.retry_policy),
            ping_interval=options.ping_interval,
            connect_timeout=options.connect_timeout,
            **kwargs,
        )

    async def __aenter__(self) -> SocketTransport:
        self.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Public API: Status
    # -------------------------------------------------------------------------

    @property
    def url(self) -> str:
        return self._url

    @property
    def ready_state(self) -> int:
        """Ready state of the active connection, or -1 when there is none."""
        return int(self._socket.ready_state) if self._socket is not None else -1

    @property
    def state(self) -> ConnectionState:
        if self._socket is None:
            return ConnectionState.ABSENT
        return _READY_STATES[ReadyState(self._socket.ready_state)]

    @property
    def connecting(self) -> bool:
        return self.ready_state == ReadyState.CONNECTING

    @property
    def connected(self) -> bool:
        return self.ready_state == ReadyState.OPEN

    @property
    def closing(self) -> bool:
        return self.ready_state == ReadyState.CLOSING

    @property
    def closed(self) -> bool:
        return self.ready_state == ReadyState.CLOSED

    @property
    def queued(self) -> tuple[Envelope, ...]:
        """Envelopes waiting for a connection, oldest first."""
        return tuple(self._queue)

    @property
    def subscriptions(self) -> tuple[str, ...]:
        """Topics that will be subscribed on the next connection."""
        return tuple(self._subscriptions)

    # -------------------------------------------------------------------------
    # Public API: Connection Management
    # -------------------------------------------------------------------------

    def open(self) -> None:
        """Start a connection attempt unless one is already pending."""
        self._socket_create()

    def close(self) -> None:
        """Close the connection without reconnecting.

        Any scheduled retry and any in-flight attempt are dropped as well. A
        later call to :meth:`open` starts over.
        """
        _LOGGER.info("[%s] Closing transport", self._url)
        if self._retry_handle is not None:
            self._retry_handle.cancel()
            self._retry_handle = None

        if self._next_socket is not None:
            pending = self._next_socket
            self._next_socket = None
            pending.on_open = noop
            pending.on_close = noop
            pending.close()

        self._socket_close()

    # -------------------------------------------------------------------------
    # Public API: Messaging
    # -------------------------------------------------------------------------

    def send(
        self, message: str, topic: str | None = None, silent: bool = False
    ) -> None:
        """Publish ``message`` on ``topic``, queueing it while disconnected.

        Raises:
            RelayTopicError: If topic is missing or not a string
        """
        if not topic or not isinstance(topic, str):
            raise RelayTopicError("Missing or invalid topic field")

        self._socket_send(build_publish(message, topic, silent=silent))

    def subscribe(self, topic: str) -> None:
        """Subscribe to ``topic``, queueing the request while disconnected."""
        self._socket_send(build_subscribe(topic))

    def on(self, event: str, callback: EventCallback) -> None:
        """Register a callback for ``"message"`` or ``"error"`` events.

        Message callbacks receive the decoded :class:`Envelope`; error callbacks
        receive the exception reported by the socket.
        """
        self._events.on(event, callback)

    # -------------------------------------------------------------------------
    # Internal: Connection State Machine
    # -------------------------------------------------------------------------

    def _socket_create(self) -> None:
        if self._next_socket is not None:
            return

        url = get_websocket_url(
            self._url, self._protocol, self._version, environment=self._environment
        )
        _LOGGER.info("[%s] Connecting to %s", self._url, url)

        try:
            socket = self._socket_factory(url)
        except RuntimeError as err:
            raise RelaySocketError("Failed to create socket") from err
        if socket is None:
            raise RelaySocketError("Failed to create socket")

        self._next_socket = socket
        socket.on_message = self._socket_receive
        socket.on_open = partial(self._socket_open, socket)
        socket.on_error = self._socket_error
        socket.on_close = partial(self._socket_closed, socket)

    def _socket_open(self, socket: SocketHandle) -> None:
        """Promote a freshly opened socket to active and drain the queue."""
        self._socket_close()
        self._socket = socket
        if self._next_socket is socket:
            self._next_socket = None
        self._retry_attempts = 0

        _LOGGER.info("[%s] Connection open", self._url)
        self._queue_subscriptions()
        self._push_queue()

    def _socket_close(self) -> None:
        """Close the active socket without triggering a reconnect."""
        if self._socket is not None:
            self._socket.on_close = noop
            self._socket.close()

    def _socket_closed(self, socket: SocketHandle) -> None:
        if self._next_socket is socket:
            self._next_socket = None
        _LOGGER.info("[%s] Connection closed", self._url)
        self._schedule_retry()

    def _schedule_retry(self) -> None:
        if self._retry_handle is not None:
            return

        self._retry_attempts += 1
        delay = self._retry_policy.next_delay(self._retry_attempts)
        if delay is None:
            _LOGGER.warning(
                "[%s] Giving up after %d reconnect attempts",
                self._url,
                self._retry_attempts - 1,
            )
            return

        _LOGGER.debug(
            "[%s] Reconnecting in %.2fs (attempt %d)",
            self._url,
            delay,
            self._retry_attempts,
        )
        self._retry_handle = asyncio.get_running_loop().call_later(delay, self._retry)

    def _retry(self) -> None:
        self._retry_handle = None
        self._socket_create()

    def _handle_online(self) -> None:
        _LOGGER.debug("[%s] Network online", self._url)
        self._socket_create()

    # -------------------------------------------------------------------------
    # Internal: Envelopes
    # -------------------------------------------------------------------------

    def _socket_send(self, envelope: Envelope) -> None:
        """Transmit on the active socket if it is open, otherwise queue."""
        message = encode_envelope(envelope)

        if self._socket is not None and self._socket.ready_state == ReadyState.OPEN:
            self._socket.send(message)
        else:
            _LOGGER.debug(
                "[%s] Queued %s for %s", self._url, envelope.type.value, envelope.topic
            )
            self._queue.append(envelope)
            self._socket_create()

    def _socket_receive(self, data: str) -> None:
        try:
            envelope = decode_envelope(data)
        except EnvelopeDecodeError as err:
            _LOGGER.debug("[%s] Discarding frame: %s", self._url, err)
            return

        self._socket_send(build_ack(envelope.topic))

        if self.connected:
            self._events.dispatch("message", envelope)

    def _socket_error(self, error: BaseException) -> None:
        _LOGGER.warning("[%s] Socket error: %s", self._url, error)
        self._events.dispatch("error", error)

    def _queue_subscriptions(self) -> None:
        """Put a subscribe envelope for every configured topic at the queue head."""
        self._queue[:0] = [build_subscribe(topic) for topic in self._subscriptions]
        self._subscriptions = list(self._configured_subscriptions)

    def _push_queue(self) -> None:
        queue = self._queue
        self._queue = []
        for envelope in queue:
            self._socket_send(envelope)
