"""Nonce generation from an injected clock."""

import time

import pytest

from eth_hyperliquid.errors import ClockError
from eth_hyperliquid.nonce import FixedClock, NonceGenerator, SystemClock


def test_fixed_clock_nonce():
    nonces = NonceGenerator(FixedClock(1_700_000_000_000))
    assert nonces.next_nonce() == 1_700_000_000_000
    assert nonces.next_nonce() == 1_700_000_000_000


def test_system_clock_is_milliseconds():
    before = int(time.time() * 1000)
    nonce = NonceGenerator().next_nonce()
    after = int(time.time() * 1000)
    assert before - 1 <= nonce <= after + 1
    assert isinstance(SystemClock().now_ms(), int)


def test_clock_before_epoch():
    with pytest.raises(ClockError):
        NonceGenerator(FixedClock(-1)).next_nonce()


def test_clock_beyond_64_bits():
    with pytest.raises(ClockError):
        NonceGenerator(FixedClock(2**64)).next_nonce()
