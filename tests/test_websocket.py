"""Subscription multiplexer against a scripted in-memory transport."""

import json

import pytest
from websockets.exceptions import ConnectionClosedError, InvalidHandshake

from eth_hyperliquid.constants import WEBSOCKET_GREETING
from eth_hyperliquid.errors import DecodeError, EncodingError, NotConnected, NotSubscribed, TransportError
from eth_hyperliquid.events import AllMidsEvent, NotificationEvent, Pong
from eth_hyperliquid.subscription import AllMids, Candle, Channel, L2Book, Trades, UserEvents
from eth_hyperliquid.websocket import HyperliquidWebsocket

URL = "wss://api.hyperliquid-testnet.xyz/ws"


@pytest.fixture
def ws(connect_factory) -> HyperliquidWebsocket:
    ws = HyperliquidWebsocket(URL, connect_factory=connect_factory)
    ws.connect()
    return ws


def _sent(connection) -> list[dict]:
    return [json.loads(frame) for frame in connection.sent]


def _mids_frame(price: str) -> str:
    return json.dumps({"channel": "allMids", "data": {"mids": {"BTC": price}}})


def test_subscribe_sends_frames(ws, scripted_connection):
    ws.subscribe([Channel(1, L2Book("BTC")), Channel(2, Candle("ETH", "1m"))])

    assert _sent(scripted_connection) == [
        {"method": "subscribe", "subscription": {"type": "l2Book", "coin": "BTC"}},
        {"method": "subscribe", "subscription": {"type": "candle", "coin": "ETH", "interval": "1m"}},
    ]
    assert set(ws.channels) == {1, 2}


def test_resubscribe_same_id_keeps_latest(ws):
    ws.subscribe([Channel(1, L2Book("BTC"))])
    ws.subscribe([Channel(1, Trades("ETH"))])
    assert len(ws.channels) == 1
    assert ws.channels[1].subscription == Trades("ETH")


def test_unsubscribe_unknown_id(ws, scripted_connection):
    ws.subscribe([Channel(1, L2Book("BTC"))])
    sent_before = list(scripted_connection.sent)

    with pytest.raises(NotSubscribed) as exc_info:
        ws.unsubscribe([1, 99])

    assert exc_info.value.channel_id == 99
    assert set(ws.channels) == {1}
    assert scripted_connection.sent == sent_before


def test_unsubscribe(ws, scripted_connection):
    ws.subscribe([Channel(1, L2Book("BTC")), Channel(2, AllMids())])
    ws.unsubscribe([1])
    assert set(ws.channels) == {2}
    assert _sent(scripted_connection)[-1] == {"method": "unsubscribe", "subscription": {"type": "l2Book", "coin": "BTC"}}


def test_unsubscribe_repeated_id(ws, scripted_connection):
    ws.subscribe([Channel(1, AllMids()), Channel(2, L2Book("BTC"))])
    sent_before = len(scripted_connection.sent)

    ws.unsubscribe([1, 1])

    assert set(ws.channels) == {2}
    assert len(scripted_connection.sent) == sent_before + 1
    assert _sent(scripted_connection)[-1] == {"method": "unsubscribe", "subscription": {"type": "allMids"}}


def test_unsubscribe_all_drains(ws, scripted_connection):
    ws.subscribe([Channel(i, Trades(f"COIN{i}")) for i in range(10)])
    ws.unsubscribe_all()
    assert ws.channels == {}
    assert sum(1 for frame in _sent(scripted_connection) if frame["method"] == "unsubscribe") == 10


def test_channels_is_a_snapshot(ws):
    ws.subscribe([Channel(1, AllMids())])
    snapshot = ws.channels
    snapshot.clear()
    assert set(ws.channels) == {1}


def test_disconnect_tolerates_send_failure(ws, scripted_connection):
    ws.subscribe([Channel(i, Trades(f"COIN{i}")) for i in range(5)])
    # Two unsubscribes go out, the third send fails
    scripted_connection.fail_send_after = len(scripted_connection.sent) + 2

    ws.disconnect()

    assert not ws.is_connected
    assert ws.channels == {}
    assert scripted_connection.closed


def test_disconnect_closes_transport(ws, scripted_connection):
    ws.subscribe([Channel(1, AllMids())])
    ws.disconnect()
    assert scripted_connection.closed
    assert not ws.is_connected
    assert _sent(scripted_connection)[-1]["method"] == "unsubscribe"


def test_operations_need_connection(connect_factory):
    ws = HyperliquidWebsocket(URL, connect_factory=connect_factory)
    with pytest.raises(NotConnected):
        ws.subscribe([Channel(1, AllMids())])
    with pytest.raises(NotConnected):
        ws.dispatch(lambda event: None)
    # Disconnecting twice is fine
    ws.disconnect()
    ws.disconnect()


def test_connect_failure():
    def _fail(url, open_timeout=None):
        raise InvalidHandshake("Bad gateway")

    ws = HyperliquidWebsocket(URL, connect_factory=_fail)
    with pytest.raises(TransportError):
        ws.connect()
    assert not ws.is_connected


def test_connect_twice(ws):
    with pytest.raises(TransportError):
        ws.connect()


def test_send_failure_drops_registry(ws, scripted_connection):
    ws.subscribe([Channel(1, AllMids())])
    scripted_connection.fail_send_after = 0
    with pytest.raises(TransportError):
        ws.subscribe([Channel(2, Trades("ETH"))])
    assert not ws.is_connected
    assert ws.channels == {}


def test_bad_topic_sends_nothing(ws, scripted_connection):
    with pytest.raises(EncodingError):
        ws.subscribe([Channel(1, AllMids()), Channel(2, UserEvents("not-an-address"))])
    assert scripted_connection.sent == []
    assert ws.channels == {}


def test_dispatch_in_order(ws, scripted_connection):
    scripted_connection.frames = [
        WEBSOCKET_GREETING,
        _mids_frame("1"),
        json.dumps({"channel": "notification", "data": {"notification": "hello"}}),
        _mids_frame("2"),
        '{"channel": "pong"}',
    ]
    received = []

    ws.dispatch(received.append)

    assert received == [
        AllMidsEvent(mids={"BTC": "1"}),
        NotificationEvent(notification="hello"),
        AllMidsEvent(mids={"BTC": "2"}),
        Pong(),
    ]
    # Normal close from the server
    assert not ws.is_connected


def test_dispatch_stops_at_malformed_frame(ws, scripted_connection):
    scripted_connection.frames = [
        _mids_frame("1"),
        _mids_frame("2"),
        '{"channel": "allMids", "data": {"nope": 1}}',
        _mids_frame("4"),
    ]
    received = []

    with pytest.raises(DecodeError):
        ws.dispatch(received.append)

    assert [event.mids["BTC"] for event in received] == ["1", "2"]
    # The frame after the bad one was never read
    assert scripted_connection.frames == [_mids_frame("4")]


def test_dispatch_transport_failure(ws, scripted_connection):
    ws.subscribe([Channel(1, AllMids())])
    scripted_connection.frames = [_mids_frame("1"), ConnectionClosedError(None, None)]
    received = []

    with pytest.raises(TransportError):
        ws.dispatch(received.append)

    assert len(received) == 1
    assert not ws.is_connected
    assert ws.channels == {}
    assert scripted_connection.closed


def test_ping(ws, scripted_connection):
    ws.ping()
    assert _sent(scripted_connection) == [{"method": "ping"}]
