"""Read-only checks against the Hyperliquid testnet.

Run with a testnet key:

.. code-block:: shell

    export HYPERLIQUID_PRIVATE_KEY=0x...
    pytest tests/test_live_api.py
"""

import os

import pytest
from eth_account import Account

from eth_hyperliquid.chain import Chain
from eth_hyperliquid.config import HyperliquidConfig
from eth_hyperliquid.events import AllMidsEvent
from eth_hyperliquid.info import Info, candles_to_dataframe
from eth_hyperliquid.session import create_hyperliquid_session
from eth_hyperliquid.subscription import AllMids, Channel
from eth_hyperliquid.websocket import HyperliquidWebsocket

HYPERLIQUID_PRIVATE_KEY = os.environ.get("HYPERLIQUID_PRIVATE_KEY")

pytestmark = pytest.mark.skipif(
    not HYPERLIQUID_PRIVATE_KEY,
    reason="Set HYPERLIQUID_PRIVATE_KEY to run live testnet tests",
)


@pytest.fixture(scope="module")
def info(tmp_path_factory) -> Info:
    session = create_hyperliquid_session(rate_limit_db_path=tmp_path_factory.mktemp("rate") / "rate-limit.sqlite")
    return Info(HyperliquidConfig.for_chain(Chain.arbitrum_testnet), session=session)


def test_metadata_and_mids(info):
    meta = info.metadata()
    assert len(meta["universe"]) > 0

    mids = info.mids()
    assert meta["universe"][0]["name"] in mids


def test_user_state(info):
    account = Account.from_key(HYPERLIQUID_PRIVATE_KEY)
    state = info.user_state(account.address)
    assert "marginSummary" in state


def test_candles(info):
    mids = info.mids()
    assert mids
    now = info.l2_book("BTC")["time"]
    candles = info.candle_snapshot("BTC", "1h", now - 24 * 3600 * 1000, now)
    df = candles_to_dataframe(candles)
    assert len(df) > 0


def test_websocket_mids():
    ws = HyperliquidWebsocket(HyperliquidConfig.testnet().ws_endpoint)
    ws.connect()
    ws.subscribe([Channel(1, AllMids())])

    received = []

    def handle(event):
        if isinstance(event, AllMidsEvent):
            received.append(event)
            ws.close()

    ws.dispatch(handle)
    assert len(received) == 1
    assert not ws.is_connected
