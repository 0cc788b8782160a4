"""Websocket subscription topics and channels.

A *channel* is a caller chosen numeric id paired with a subscription topic.
The id is local to :py:class:`eth_hyperliquid.websocket.HyperliquidWebsocket`,
the exchange only ever sees the topic:

.. code-block:: json

    {"method": "subscribe", "subscription": {"type": "l2Book", "coin": "BTC"}}
"""

import abc
import json
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from eth_hyperliquid.actions import check_address


class Method(Enum):
    subscribe = "subscribe"
    unsubscribe = "unsubscribe"


class Subscription(abc.ABC):
    """Subscription topic."""

    #: Value of the ``type`` field on the wire
    subscription_type: ClassVar[str]

    def to_wire(self) -> dict:
        return {"type": self.subscription_type}


@dataclass(frozen=True, slots=True)
class AllMids(Subscription):
    """Mid prices of all coins."""

    subscription_type: ClassVar[str] = "allMids"


@dataclass(frozen=True, slots=True)
class Notification(Subscription):
    subscription_type: ClassVar[str] = "notification"

    user: str

    def to_wire(self) -> dict:
        return {"type": self.subscription_type, "user": check_address(self.user, "user")}


@dataclass(frozen=True, slots=True)
class OrderUpdates(Subscription):
    subscription_type: ClassVar[str] = "orderUpdates"

    user: str

    def to_wire(self) -> dict:
        return {"type": self.subscription_type, "user": check_address(self.user, "user")}


@dataclass(frozen=True, slots=True)
class UserEvents(Subscription):
    """Fills, funding payments, liquidations and cancels of one user."""

    subscription_type: ClassVar[str] = "userEvents"

    user: str

    def to_wire(self) -> dict:
        return {"type": self.subscription_type, "user": check_address(self.user, "user")}


@dataclass(frozen=True, slots=True)
class WebData(Subscription):
    """Aggregate user state as the web frontend sees it."""

    subscription_type: ClassVar[str] = "webData2"

    user: str

    def to_wire(self) -> dict:
        return {"type": self.subscription_type, "user": check_address(self.user, "user")}


@dataclass(frozen=True, slots=True)
class L2Book(Subscription):
    subscription_type: ClassVar[str] = "l2Book"

    coin: str

    def to_wire(self) -> dict:
        return {"type": self.subscription_type, "coin": self.coin}


@dataclass(frozen=True, slots=True)
class Trades(Subscription):
    subscription_type: ClassVar[str] = "trades"

    coin: str

    def to_wire(self) -> dict:
        return {"type": self.subscription_type, "coin": self.coin}


@dataclass(frozen=True, slots=True)
class Candle(Subscription):
    subscription_type: ClassVar[str] = "candle"

    coin: str

    #: Candle width, e.g. ``1m``, ``15m``, ``1h``, ``1d``
    interval: str

    def to_wire(self) -> dict:
        return {"type": self.subscription_type, "coin": self.coin, "interval": self.interval}


@dataclass(frozen=True, slots=True)
class Channel:
    """Subscription tracked under a caller chosen id."""

    id: int
    subscription: Subscription


def encode_subscription_frame(method: Method, subscription: Subscription) -> str:
    """Text frame subscribing or unsubscribing a topic."""
    return json.dumps({"method": method.value, "subscription": subscription.to_wire()})
