"""Transport configuration loading.

Options are plain data: they can be built in code, from a mapping, or from a
YAML file such as::

    url: https://relay.example.com
    protocol: wc
    version: 1
    subscriptions:
      - client-topic
    retry_delay: 0.5
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .errors import RelayConfigError
from .retry import DEFAULT_RETRY_DELAY, FixedDelayRetry


@dataclass(frozen=True)
class TransportOptions:
    """Configuration for a :class:`~relay_transport.transport.SocketTransport`.

    Attributes:
        url: Base relay endpoint (http, https, ws or wss).
        protocol: Protocol name embedded in every connection URL.
        version: Protocol version embedded in every connection URL.
        subscriptions: Topics re-subscribed on every connection.
        retry_delay: Seconds between reconnect attempts.
        max_retries: Attempts allowed between successful opens; None is unbounded.
        ping_interval: Keepalive ping interval in seconds; None disables pings.
        connect_timeout: Seconds allowed for each connection attempt.
    """

    url: str
    protocol: str = ""
    version: int = 1
    subscriptions: tuple[str, ...] = ()
    retry_delay: float = DEFAULT_RETRY_DELAY
    max_retries: int | None = None
    ping_interval: float | None = 20
    connect_timeout: float = 15.0

    def __post_init__(self) -> None:
        if not self.url or not isinstance(self.url, str):
            raise RelayConfigError("Missing or invalid WebSocket url")
        if any(not isinstance(topic, str) for topic in self.subscriptions):
            raise RelayConfigError("Subscriptions must be topic strings")
        if self.retry_delay < 0:
            raise RelayConfigError("retry_delay must not be negative")

    @property
    def retry_policy(self) -> FixedDelayRetry:
        return FixedDelayRetry(delay=self.retry_delay, max_attempts=self.max_retries)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TransportOptions:
        """Build options from a mapping, ignoring unknown keys."""
        subscriptions = data.get("subscriptions") or ()
        if isinstance(subscriptions, str):
            raise RelayConfigError("subscriptions must be a list of topics")

        try:
            return cls(
                url=data.get("url"),  # type: ignore[arg-type]
                protocol=str(data.get("protocol", "")),
                version=data.get("version", 1),
                subscriptions=tuple(subscriptions),
                retry_delay=float(data.get("retry_delay", DEFAULT_RETRY_DELAY)),
                max_retries=data.get("max_retries"),
                ping_interval=data.get("ping_interval", 20),
                connect_timeout=float(data.get("connect_timeout", 15.0)),
            )
        except RelayConfigError:
            raise
        except (TypeError, ValueError) as err:
            raise RelayConfigError(f"Invalid transport options: {err}") from err


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning an empty dict for empty files."""
    with open(path) as f:
        try:
            return yaml.safe_load(f) or {}
        except yaml.YAMLError as err:
            raise RelayConfigError(f"Invalid YAML in {path}") from err


def load_options(path: Path | str) -> TransportOptions:
    """Load transport options from a YAML file.

    Raises:
        RelayConfigError: If the file is not a mapping or the options are invalid.
    """
    data = _load_yaml(Path(path))
    if not isinstance(data, dict):
        raise RelayConfigError(f"{path} does not contain a mapping")
    return TransportOptions.from_mapping(data)
