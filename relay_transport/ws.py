"""WebSocket helpers for the relay transport."""

from __future__ import annotations

import asyncio
from urllib.parse import urlsplit

import websockets
from websockets.asyncio.client import ClientConnection
from websockets.exceptions import (
    InvalidHandshake,
    InvalidURI,
    WebSocketException,
)

from .errors import (
    RelayConfigError,
    RelayConnectionError,
    RelayHandshakeError,
    RelayTimeout,
)

SOCKET_SCHEMES = ("ws", "wss")

# Relay envelopes are small JSON objects; anything near this is a broken peer.
DEFAULT_MAX_FRAME_SIZE = 2**20


async def connect_websocket(
    url: str,
    *,
    ping_interval: float | None = 20,
    timeout: float = 15.0,
    max_size: int | None = DEFAULT_MAX_FRAME_SIZE,
) -> ClientConnection:
    """Connect to a relay WebSocket endpoint.

    Args:
        url: Connection URL as built by ``get_websocket_url``
        ping_interval: Interval for ping frames
        timeout: Connection timeout
        max_size: Largest inbound frame accepted; None disables the limit

    Raises:
        RelayConfigError: If url does not use a ws:// or wss:// scheme
        RelayTimeout: If the handshake does not finish within timeout
        RelayHandshakeError: If the relay rejects the handshake
        RelayConnectionError: If the network connection fails
    """
    scheme = urlsplit(url).scheme
    if scheme not in SOCKET_SCHEMES:
        raise RelayConfigError(f"Relay URL must use ws:// or wss://, got {scheme!r}")

    try:
        return await asyncio.wait_for(
            websockets.connect(
                url,
                ping_interval=ping_interval,
                close_timeout=5,
                max_size=max_size,
            ),
            timeout=timeout,
        )
    except TimeoutError as err:
        raise RelayTimeout(f"Connecting to {url} timed out") from err
    except (InvalidHandshake, InvalidURI) as err:
        raise RelayHandshakeError(f"Relay rejected the handshake: {err}") from err
    except (OSError, WebSocketException) as err:
        raise RelayConnectionError(f"Connecting to {url} failed: {err}") from err
