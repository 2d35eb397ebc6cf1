"""Reconnecting pub/sub WebSocket transport for relay endpoints."""

__version__ = "0.1.0"

from .config import TransportOptions, load_options
from .errors import (
    EnvelopeDecodeError,
    RelayClientError,
    RelayConfigError,
    RelayConnectionError,
    RelayHandshakeError,
    RelaySocketError,
    RelayTimeout,
    RelayTopicError,
)
from .events import EventDispatcher
from .monitor import NetworkMonitor
from .protocol import (
    Envelope,
    EnvelopeType,
    build_ack,
    build_publish,
    build_subscribe,
    decode_envelope,
    encode_envelope,
)
from .retry import FixedDelayRetry, RetryPolicy
from .socket import ReadyState, RelaySocket
from .transport import ConnectionState, SocketTransport
from .url import Environment, detect_environment, get_websocket_url
from .ws import connect_websocket

__all__ = [
    "ConnectionState",
    "Envelope",
    "EnvelopeDecodeError",
    "EnvelopeType",
    "Environment",
    "EventDispatcher",
    "FixedDelayRetry",
    "NetworkMonitor",
    "ReadyState",
    "RelayClientError",
    "RelayConfigError",
    "RelayConnectionError",
    "RelayHandshakeError",
    "RelaySocket",
    "RelaySocketError",
    "RelayTimeout",
    "RelayTopicError",
    "RetryPolicy",
    "SocketTransport",
    "TransportOptions",
    "__version__",
    "build_ack",
    "build_publish",
    "build_subscribe",
    "connect_websocket",
    "decode_envelope",
    "detect_environment",
    "encode_envelope",
    "get_websocket_url",
    "load_options",
]
