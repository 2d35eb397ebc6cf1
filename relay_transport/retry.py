"""Reconnect retry policies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

DEFAULT_RETRY_DELAY = 0.5


class RetryPolicy(Protocol):
    """Decide how long to wait before the next connection attempt."""

    def next_delay(self, attempt: int) -> float | None:
        """Return the delay in seconds for ``attempt`` (1-based), or None to stop."""


@dataclass(frozen=True)
class FixedDelayRetry:
    """Retry after a constant delay.

    Attributes:
        delay: Seconds to wait before each attempt.
        max_attempts: Attempts allowed between successful opens. None retries
            forever.
    """

    delay: float = DEFAULT_RETRY_DELAY
    max_attempts: int | None = None

    def next_delay(self, attempt: int) -> float | None:
        if self.max_attempts is not None and attempt > self.max_attempts:
            return None
        return self.delay
