"""Inbound websocket frame decoding."""

import json

import pytest

from eth_hyperliquid.errors import DecodeError
from eth_hyperliquid.events import (
    AllMidsEvent,
    CandleEvent,
    Fills,
    L2BookEvent,
    Liquidation,
    NonUserCancels,
    NotificationEvent,
    OrderUpdatesEvent,
    Pong,
    SubscriptionResponse,
    TradesEvent,
    UserEvent,
    UserFunding,
    WebDataEvent,
    decode_event,
    decode_user_event,
)

FILL = {
    "coin": "ETH",
    "px": "1700.5",
    "sz": "0.1",
    "side": "B",
    "time": 1700000000000,
    "startPosition": "0.0",
    "dir": "Open Long",
    "closedPnl": "0.0",
    "hash": "0x" + "00" * 32,
    "oid": 42,
    "crossed": True,
    "fee": "0.01",
}

ORDER_UPDATE = {
    "order": {
        "coin": "BTC",
        "side": "A",
        "limitPx": "60000",
        "sz": "0.01",
        "oid": 7,
        "timestamp": 1700000000000,
        "origSz": "0.01",
    },
    "status": "open",
    "statusTimestamp": 1700000000001,
}


def _frame(channel: str, data) -> str:
    return json.dumps({"channel": channel, "data": data})


def test_all_mids():
    event = decode_event(_frame("allMids", {"mids": {"BTC": "60000.5", "ETH": "1700"}}))
    assert event == AllMidsEvent(mids={"BTC": "60000.5", "ETH": "1700"})


def test_notification():
    assert decode_event(_frame("notification", {"notification": "Order filled"})) == NotificationEvent("Order filled")


def test_l2_book():
    data = {
        "coin": "BTC",
        "levels": [
            [{"px": "59999", "sz": "1.5", "n": 3}],
            [{"px": "60001", "sz": "0.5", "n": 1}, {"px": "60002", "sz": "2", "n": 4}],
        ],
        "time": 1700000000000,
    }
    event = decode_event(_frame("l2Book", data))
    assert isinstance(event, L2BookEvent)
    assert event.bids[0].px == "59999"
    assert len(event.asks) == 2
    assert event.asks[1].n == 4


def test_l2_book_needs_both_sides():
    with pytest.raises(DecodeError):
        decode_event(_frame("l2Book", {"coin": "BTC", "levels": [[]], "time": 1}))


def test_trades():
    trade = {"coin": "ETH", "side": "B", "px": "1700", "sz": "1", "hash": "0xabc", "time": 1, "tid": 99}
    event = decode_event(_frame("trades", [trade]))
    assert isinstance(event, TradesEvent)
    assert event.trades[0].tid == 99


def test_candle():
    data = {"s": "ETH", "i": "1m", "t": 1, "T": 60000, "o": "1", "c": "2", "h": "3", "l": "0.5", "v": "10", "n": 5}
    event = decode_event(_frame("candle", data))
    assert event == CandleEvent("ETH", "1m", 1, 60000, "1", "2", "3", "0.5", "10", 5)


def test_order_updates_list_and_single():
    listed = decode_event(_frame("orderUpdates", [ORDER_UPDATE]))
    single = decode_event(_frame("orderUpdates", ORDER_UPDATE))
    assert isinstance(listed, OrderUpdatesEvent)
    assert listed == single
    assert listed.updates[0].order.cloid is None


def test_web_data():
    event = decode_event(_frame("webData2", {"user": "0x" + "11" * 20, "clearinghouseState": {}}))
    assert isinstance(event, WebDataEvent)
    assert event.data["clearinghouseState"] == {}


def test_subscription_response_and_pong():
    ack = decode_event(_frame("subscriptionResponse", {"method": "subscribe", "subscription": {"type": "allMids"}}))
    assert ack == SubscriptionResponse(method="subscribe", subscription={"type": "allMids"})
    assert decode_event('{"channel": "pong"}') == Pong()


def test_user_event_tagged():
    event = decode_event(_frame("user", {"fills": [FILL]}))
    assert isinstance(event, UserEvent)
    assert isinstance(event.event, Fills)
    assert event.event.fills[0].oid == 42


def test_user_event_untagged_candidates():
    assert isinstance(decode_user_event([FILL]).event, Fills)
    assert isinstance(decode_user_event([{"oid": 1, "coin": "ETH"}]).event, NonUserCancels)

    funding = {"time": 1, "coin": "ETH", "usdc": "-0.1", "szi": "1", "fundingRate": "0.0001"}
    assert isinstance(decode_user_event(funding).event, UserFunding)

    liquidation = {
        "liq": 1,
        "liquidator": "0x" + "11" * 20,
        "liquidated_user": "0x" + "22" * 20,
        "liquidated_ntl_pos": "100",
        "liquidated_account_value": "10",
    }
    assert isinstance(decode_user_event(liquidation).event, Liquidation)


def test_user_event_overlap_is_flagged():
    """An empty list is both a fill list and a cancel list."""
    with pytest.raises(DecodeError, match="Ambiguous"):
        decode_event(_frame("userEvents", []))


def test_user_event_no_match():
    with pytest.raises(DecodeError):
        decode_user_event({"something": "else"})


def test_bool_is_not_int():
    bad = dict(FILL, oid=True)
    with pytest.raises(DecodeError):
        decode_user_event({"fills": [bad]})


@pytest.mark.parametrize(
    "frame",
    [
        "not json",
        "[1, 2]",
        '{"channel": "unknownChannel", "data": {}}',
        '{"channel": "allMids"}',
        '{"channel": "allMids", "data": {"mids": {"BTC": 1}}}',
        '{"channel": "trades", "data": [{"coin": "ETH"}]}',
    ],
)
def test_malformed_frames(frame):
    with pytest.raises(DecodeError) as exc_info:
        decode_event(frame)
    assert exc_info.value.frame == frame
