"""Client error types for relay transport interactions."""

from __future__ import annotations


class RelayClientError(Exception):
    """Base error for relay transport failures."""


class RelayConfigError(RelayClientError, ValueError):
    """Transport configuration is missing or invalid."""


class RelayTopicError(RelayClientError, ValueError):
    """Envelope topic is missing or not a string."""


class RelaySocketError(RelayClientError):
    """Connection handle could not be constructed."""


class RelayTimeout(RelayClientError):
    """Timeout while connecting to the relay endpoint."""


class RelayConnectionError(RelayClientError):
    """Network connection to the relay endpoint failed."""


class RelayHandshakeError(RelayClientError):
    """WebSocket handshake failed."""


class EnvelopeDecodeError(RelayClientError, ValueError):
    """Inbound frame is not a valid envelope."""
