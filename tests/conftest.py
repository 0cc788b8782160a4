"""Shared pytest fixtures for Hyperliquid tests.

This module provides common fixtures used across all test modules.
"""

from unittest.mock import MagicMock

import pytest
from eth_account import Account
from eth_account.signers.local import LocalAccount
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK

from eth_hyperliquid.actions import Limit, Order, OrderRequest, Tif
from eth_hyperliquid.nonce import FixedClock

#: Well known throwaway test key, never fund it
TEST_PRIVATE_KEY = "0xe908f86dbb4d55ac876378565aafeabc187f6690f046459397b17d9b9a19688e"

#: Fixed nonce used across tests
TEST_NONCE = 1_700_000_000_000


class ScriptedConnection:
    """In-memory stand-in for a sync websocket connection.

    ``recv()`` plays back ``frames`` and then reports a normal close.
    Every sent frame is recorded in ``sent``.
    """

    def __init__(self, frames: list | None = None, fail_send_after: int | None = None):
        self.frames = list(frames or [])
        self.sent = []
        self.closed = False
        self.fail_send_after = fail_send_after

    def send(self, frame):
        if self.fail_send_after is not None and len(self.sent) >= self.fail_send_after:
            raise ConnectionClosedError(None, None)
        self.sent.append(frame)

    def recv(self):
        if self.frames:
            frame = self.frames.pop(0)
            if isinstance(frame, Exception):
                raise frame
            return frame
        raise ConnectionClosedOK(None, None)

    def close(self):
        self.closed = True


@pytest.fixture
def test_account() -> LocalAccount:
    return Account.from_key(TEST_PRIVATE_KEY)


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock(TEST_NONCE)


@pytest.fixture
def limit_buy() -> OrderRequest:
    """Limit buy of 0.1 ETH at 1700."""
    return OrderRequest(
        asset=4,
        is_buy=True,
        limit_px="1700",
        sz="0.1",
        reduce_only=False,
        order_type=Limit(Tif.gtc),
    )


@pytest.fixture
def order_action(limit_buy) -> Order:
    return Order(orders=(limit_buy,))


@pytest.fixture
def mock_session() -> MagicMock:
    """requests session replying ``{}`` to every POST.

    Set ``mock_session.post.return_value.json.return_value`` to script the reply.
    """
    session = MagicMock()
    session.post.return_value.json.return_value = {}
    return session


@pytest.fixture
def scripted_connection() -> ScriptedConnection:
    return ScriptedConnection()


@pytest.fixture
def connect_factory(scripted_connection):
    """Websocket connect function handing out :py:func:`scripted_connection`."""

    def _connect(url, open_timeout=None):
        return scripted_connection

    return _connect
