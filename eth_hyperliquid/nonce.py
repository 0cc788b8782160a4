"""Nonce generation.

Hyperliquid nonces are wall clock milliseconds since the Unix epoch.
The exchange keeps a window of the highest nonces seen per signer and
rejects a request whose nonce is not larger than those, so callers
sending in rapid succession should serialise their calls.

The clock is injected, so tests can pin time::

    from eth_hyperliquid.nonce import FixedClock, NonceGenerator

    nonces = NonceGenerator(FixedClock(1_700_000_000_000))
    assert nonces.next_nonce() == 1_700_000_000_000
"""

from datetime import UTC, datetime
from typing import Protocol

from eth_hyperliquid.actions import UINT64_MAX
from eth_hyperliquid.errors import ClockError


class Clock(Protocol):
    """Time source with one operation."""

    def now_ms(self) -> int:
        """Milliseconds since the Unix epoch."""


class SystemClock:
    """Reads the host wall clock."""

    def now_ms(self) -> int:
        return int(datetime.now(UTC).timestamp() * 1_000)


class FixedClock:
    """Always returns the same time. For tests and replays."""

    def __init__(self, timestamp_ms: int):
        self.timestamp_ms = timestamp_ms

    def now_ms(self) -> int:
        return self.timestamp_ms


class NonceGenerator:
    """Produce request nonces from a clock.

    No state is kept between calls: each call reads the clock again.
    """

    def __init__(self, clock: Clock | None = None):
        self.clock = clock or SystemClock()

    def next_nonce(self) -> int:
        """Current time in milliseconds.

        :raise ClockError:
            The clock is before the epoch or beyond the 64-bit range
        """
        now = self.clock.now_ms()
        if now < 0:
            raise ClockError(f"Clock reads {now} ms, before the Unix epoch")
        if now > UINT64_MAX:
            raise ClockError(f"Clock reads {now} ms, does not fit 64 bits")
        return now
