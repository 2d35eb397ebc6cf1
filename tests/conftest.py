"""Pytest configuration and fixtures for relay_transport tests."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from relay_transport.socket import ReadyState, noop
from relay_transport.url import Environment


class FakeSocket:
    """Scriptable connection handle standing in for RelaySocket."""

    def __init__(self, url: str) -> None:
        self.url = url
        self.ready_state = ReadyState.CONNECTING
        self.sent: list[str] = []
        self.close_calls = 0
        self.on_open = noop
        self.on_message = noop
        self.on_error = noop
        self.on_close = noop

    def send(self, data: str) -> None:
        self.sent.append(data)

    def close(self) -> None:
        self.close_calls += 1
        self.ready_state = ReadyState.CLOSED
        self.on_close()

    # Test drivers

    def accept(self) -> None:
        """Simulate the handshake completing."""
        self.ready_state = ReadyState.OPEN
        self.on_open()

    def receive(self, data: str) -> None:
        self.on_message(data)

    def fail(self, error: BaseException) -> None:
        self.on_error(error)

    def drop(self) -> None:
        """Simulate the relay or network closing the connection."""
        self.ready_state = ReadyState.CLOSED
        self.on_close()

    def envelopes(self) -> list[dict[str, Any]]:
        return [json.loads(data) for data in self.sent]


class FakeSocketFactory:
    """Socket factory that records every handle it creates."""

    def __init__(self) -> None:
        self.sockets: list[FakeSocket] = []

    def __call__(self, url: str) -> FakeSocket:
        socket = FakeSocket(url)
        self.sockets.append(socket)
        return socket

    @property
    def last(self) -> FakeSocket:
        return self.sockets[-1]


@pytest.fixture
def socket_factory() -> FakeSocketFactory:
    return FakeSocketFactory()


@pytest.fixture
def environment() -> Environment:
    return Environment(name="cpython")


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock aiohttp ClientSession."""
    import aiohttp

    return MagicMock(spec=aiohttp.ClientSession)


def create_mock_response(status: int = 200) -> AsyncMock:
    """Create a configured mock response usable as an async context manager.

    Args:
        status: HTTP status code

    Returns:
        Configured AsyncMock response
    """
    response = AsyncMock()
    response.status = status
    response.__aenter__.return_value = response
    response.__aexit__.return_value = None
    return response
