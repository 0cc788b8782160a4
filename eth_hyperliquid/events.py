"""Inbound websocket event decoding.

Every frame the server pushes is a JSON object tagged by ``channel``:

.. code-block:: json

    {"channel": "l2Book", "data": {"coin": "BTC", "levels": [[...], [...]], "time": 1700000000000}}

:py:func:`decode_event` maps a frame to one of the event classes below.
Anything that does not match a known shape raises
:py:class:`~eth_hyperliquid.errors.DecodeError`. Frames are never skipped
silently, a mismatch means the wire schema moved.

User events
-----------

The ``user`` channel payload comes in two forms:

- tagged by a wrapper key, e.g. ``{"fills": [...]}``
- untagged, e.g. a bare list of fills

Untagged payloads are decoded by trying every candidate shape. Exactly one
candidate must match. Shapes that overlap (an empty list is both a fill list
and a cancel list) raise :py:class:`~eth_hyperliquid.errors.DecodeError`
instead of picking one.
"""

import json
from dataclasses import dataclass
from typing import Any, Callable

from eth_hyperliquid.errors import DecodeError


class _ShapeMismatch(Exception):
    """Payload does not match a candidate shape."""


def _get(data: dict, key: str, kind: type | tuple[type, ...], optional: bool = False) -> Any:
    if not isinstance(data, dict):
        raise _ShapeMismatch(f"Expected an object, got {type(data).__name__}")
    if key not in data:
        if optional:
            return None
        raise _ShapeMismatch(f"Missing field {key}")
    value = data[key]
    if value is None and optional:
        return None
    # bool is an int subclass, keep them apart
    if isinstance(value, bool) and bool not in (kind if isinstance(kind, tuple) else (kind,)):
        raise _ShapeMismatch(f"Field {key} has type bool")
    if not isinstance(value, kind):
        raise _ShapeMismatch(f"Field {key} has type {type(value).__name__}")
    return value


def _list(data: Any, decode_item: Callable[[Any], Any]) -> tuple:
    if not isinstance(data, list):
        raise _ShapeMismatch(f"Expected a list, got {type(data).__name__}")
    return tuple(decode_item(item) for item in data)


@dataclass(frozen=True, slots=True)
class AllMidsEvent:
    #: Coin → mid price
    mids: dict[str, str]


@dataclass(frozen=True, slots=True)
class NotificationEvent:
    notification: str


@dataclass(frozen=True, slots=True)
class WebDataEvent:
    """Frontend state snapshot.

    The payload is large and changes often, so it is kept as decoded JSON.
    """

    user: str | None
    data: dict


@dataclass(frozen=True, slots=True)
class CandleEvent:
    coin: str
    interval: str
    open_time: int
    close_time: int
    open: str
    close: str
    high: str
    low: str
    volume: str
    trades: int


@dataclass(frozen=True, slots=True)
class Level:
    px: str
    sz: str
    #: Number of orders at this level
    n: int


@dataclass(frozen=True, slots=True)
class L2BookEvent:
    coin: str
    bids: tuple[Level, ...]
    asks: tuple[Level, ...]
    time: int


@dataclass(frozen=True, slots=True)
class Trade:
    coin: str
    side: str
    px: str
    sz: str
    hash: str
    time: int
    tid: int | None = None


@dataclass(frozen=True, slots=True)
class TradesEvent:
    trades: tuple[Trade, ...]


@dataclass(frozen=True, slots=True)
class BasicOrder:
    coin: str
    side: str
    limit_px: str
    sz: str
    oid: int
    timestamp: int
    orig_sz: str
    cloid: str | None = None


@dataclass(frozen=True, slots=True)
class OrderUpdate:
    order: BasicOrder
    status: str
    status_timestamp: int


@dataclass(frozen=True, slots=True)
class OrderUpdatesEvent:
    updates: tuple[OrderUpdate, ...]


@dataclass(frozen=True, slots=True)
class Fill:
    coin: str
    px: str
    sz: str
    side: str
    time: int
    start_position: str
    dir: str
    closed_pnl: str
    hash: str
    oid: int
    crossed: bool
    fee: str


@dataclass(frozen=True, slots=True)
class Fills:
    fills: tuple[Fill, ...]


@dataclass(frozen=True, slots=True)
class UserFunding:
    time: int
    coin: str
    usdc: str
    szi: str
    funding_rate: str


@dataclass(frozen=True, slots=True)
class Liquidation:
    liq: int
    liquidator: str
    liquidated_user: str
    liquidated_ntl_pos: str
    liquidated_account_value: str


@dataclass(frozen=True, slots=True)
class NonUserCancel:
    oid: int
    coin: str


@dataclass(frozen=True, slots=True)
class NonUserCancels:
    cancels: tuple[NonUserCancel, ...]


UserEventPayload = Fills | UserFunding | Liquidation | NonUserCancels


@dataclass(frozen=True, slots=True)
class UserEvent:
    event: UserEventPayload


@dataclass(frozen=True, slots=True)
class SubscriptionResponse:
    """Server acknowledgement of a subscribe or unsubscribe frame."""

    method: str
    subscription: dict


@dataclass(frozen=True, slots=True)
class Pong:
    """Reply to a keepalive ping."""


Event = (
    AllMidsEvent
    | NotificationEvent
    | WebDataEvent
    | CandleEvent
    | L2BookEvent
    | TradesEvent
    | OrderUpdatesEvent
    | UserEvent
    | SubscriptionResponse
    | Pong
)


def _decode_all_mids(data) -> AllMidsEvent:
    mids = _get(data, "mids", dict)
    for coin, px in mids.items():
        if not isinstance(px, str):
            raise _ShapeMismatch(f"Mid price of {coin} is not a string")
    return AllMidsEvent(mids=dict(mids))


def _decode_notification(data) -> NotificationEvent:
    return NotificationEvent(notification=_get(data, "notification", str))


def _decode_web_data(data) -> WebDataEvent:
    if not isinstance(data, dict):
        raise _ShapeMismatch("Web data is not an object")
    return WebDataEvent(user=_get(data, "user", str, optional=True), data=data)


def _decode_candle(data) -> CandleEvent:
    return CandleEvent(
        coin=_get(data, "s", str),
        interval=_get(data, "i", str),
        open_time=_get(data, "t", int),
        close_time=_get(data, "T", int),
        open=_get(data, "o", str),
        close=_get(data, "c", str),
        high=_get(data, "h", str),
        low=_get(data, "l", str),
        volume=_get(data, "v", str),
        trades=_get(data, "n", int),
    )


def _decode_level(data) -> Level:
    return Level(px=_get(data, "px", str), sz=_get(data, "sz", str), n=_get(data, "n", int))


def _decode_l2_book(data) -> L2BookEvent:
    levels = _get(data, "levels", list)
    if len(levels) != 2:
        raise _ShapeMismatch(f"Expected bid and ask sides, got {len(levels)}")
    bids, asks = levels
    return L2BookEvent(
        coin=_get(data, "coin", str),
        bids=_list(bids, _decode_level),
        asks=_list(asks, _decode_level),
        time=_get(data, "time", int),
    )


def _decode_trade(data) -> Trade:
    return Trade(
        coin=_get(data, "coin", str),
        side=_get(data, "side", str),
        px=_get(data, "px", str),
        sz=_get(data, "sz", str),
        hash=_get(data, "hash", str),
        time=_get(data, "time", int),
        tid=_get(data, "tid", int, optional=True),
    )


def _decode_trades(data) -> TradesEvent:
    return TradesEvent(trades=_list(data, _decode_trade))


def _decode_order_update(data) -> OrderUpdate:
    order = _get(data, "order", dict)
    return OrderUpdate(
        order=BasicOrder(
            coin=_get(order, "coin", str),
            side=_get(order, "side", str),
            limit_px=_get(order, "limitPx", str),
            sz=_get(order, "sz", str),
            oid=_get(order, "oid", int),
            timestamp=_get(order, "timestamp", int),
            orig_sz=_get(order, "origSz", str),
            cloid=_get(order, "cloid", str, optional=True),
        ),
        status=_get(data, "status", str),
        status_timestamp=_get(data, "statusTimestamp", int),
    )


def _decode_order_updates(data) -> OrderUpdatesEvent:
    if isinstance(data, dict):
        # Older servers push a single update per frame
        return OrderUpdatesEvent(updates=(_decode_order_update(data),))
    return OrderUpdatesEvent(updates=_list(data, _decode_order_update))


def _decode_fill(data) -> Fill:
    return Fill(
        coin=_get(data, "coin", str),
        px=_get(data, "px", str),
        sz=_get(data, "sz", str),
        side=_get(data, "side", str),
        time=_get(data, "time", int),
        start_position=_get(data, "startPosition", str),
        dir=_get(data, "dir", str),
        closed_pnl=_get(data, "closedPnl", str),
        hash=_get(data, "hash", str),
        oid=_get(data, "oid", int),
        crossed=_get(data, "crossed", bool),
        fee=_get(data, "fee", str),
    )


def _decode_fills(data) -> Fills:
    return Fills(fills=_list(data, _decode_fill))


def _decode_user_funding(data) -> UserFunding:
    return UserFunding(
        time=_get(data, "time", int),
        coin=_get(data, "coin", str),
        usdc=_get(data, "usdc", str),
        szi=_get(data, "szi", str),
        funding_rate=_get(data, "fundingRate", str),
    )


def _decode_liquidation(data) -> Liquidation:
    return Liquidation(
        liq=_get(data, "liq", int),
        liquidator=_get(data, "liquidator", str),
        liquidated_user=_get(data, "liquidated_user", str),
        liquidated_ntl_pos=_get(data, "liquidated_ntl_pos", str),
        liquidated_account_value=_get(data, "liquidated_account_value", str),
    )


def _decode_non_user_cancel(data) -> NonUserCancel:
    # Exact key set, otherwise every fill would also look like a cancel
    if not isinstance(data, dict) or set(data.keys()) != {"oid", "coin"}:
        raise _ShapeMismatch("Not a non-user cancel")
    return NonUserCancel(oid=_get(data, "oid", int), coin=_get(data, "coin", str))


def _decode_non_user_cancels(data) -> NonUserCancels:
    return NonUserCancels(cancels=_list(data, _decode_non_user_cancel))


#: Candidate shapes of an untagged user event, in trial order
USER_EVENT_CANDIDATES: dict[str, Callable[[Any], UserEventPayload]] = {
    "fills": _decode_fills,
    "funding": _decode_user_funding,
    "liquidation": _decode_liquidation,
    "nonUserCancel": _decode_non_user_cancels,
}


def decode_user_event(data: Any) -> UserEvent:
    """Decode the payload of the ``user`` channel.

    :raise DecodeError:
        No candidate matched, or more than one did
    """
    if isinstance(data, dict) and len(data) == 1:
        (tag, inner), = data.items()
        decoder = USER_EVENT_CANDIDATES.get(tag)
        if decoder is not None:
            try:
                return UserEvent(event=decoder(inner))
            except _ShapeMismatch as e:
                raise DecodeError(f"Malformed {tag} user event: {e}") from e

    matches = []
    for name, decoder in USER_EVENT_CANDIDATES.items():
        try:
            matches.append((name, decoder(data)))
        except _ShapeMismatch:
            continue

    if not matches:
        raise DecodeError("User event matches no known shape")

    if len(matches) > 1:
        names = ", ".join(name for name, _ in matches)
        raise DecodeError(f"Ambiguous user event, matches: {names}")

    return UserEvent(event=matches[0][1])


#: Channel name → payload decoder
CHANNEL_DECODERS: dict[str, Callable[[Any], Event]] = {
    "allMids": _decode_all_mids,
    "notification": _decode_notification,
    "webData2": _decode_web_data,
    "candle": _decode_candle,
    "l2Book": _decode_l2_book,
    "trades": _decode_trades,
    "orderUpdates": _decode_order_updates,
}


def decode_event(frame: str | bytes) -> Event:
    """Decode one inbound text frame.

    :param frame:
        Raw frame text

    :raise DecodeError:
        Invalid JSON, unknown channel or a payload of the wrong shape
    """
    try:
        message = json.loads(frame)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Frame is not JSON: {e}", frame) from e

    if not isinstance(message, dict):
        raise DecodeError("Frame is not a JSON object", frame)

    channel = message.get("channel")

    if channel == "pong":
        return Pong()

    if "data" not in message:
        raise DecodeError(f"Frame on channel {channel!r} has no data", frame)

    data = message["data"]

    try:
        if channel == "subscriptionResponse":
            return SubscriptionResponse(
                method=_get(data, "method", str),
                subscription=_get(data, "subscription", dict),
            )

        if channel in ("user", "userEvents"):
            try:
                return decode_user_event(data)
            except DecodeError as e:
                raise DecodeError(str(e), frame) from e

        decoder = CHANNEL_DECODERS.get(channel)
        if decoder is None:
            raise DecodeError(f"Unknown channel {channel!r}", frame)

        return decoder(data)
    except _ShapeMismatch as e:
        raise DecodeError(f"Malformed {channel} frame: {e}", frame) from e
