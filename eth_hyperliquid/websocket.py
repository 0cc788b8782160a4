"""Websocket subscription multiplexer.

One :py:class:`HyperliquidWebsocket` owns one websocket connection and a
registry of logical channels multiplexed over it.

- ``subscribe()`` is idempotent per channel id: subscribing an id again
  replaces its topic.

- ``unsubscribe()`` only sends frames for ids the registry knows about,
  unknown ids raise :py:class:`~eth_hyperliquid.errors.NotSubscribed`
  before anything goes on the wire.

- ``dispatch()`` reads frames in arrival order and calls the handler for
  each decoded event before reading the next one, so handlers never run
  concurrently.

There is no automatic reconnection. When the connection drops, the
registry is discarded and the caller re-subscribes after a new ``connect()``.

The instance is single-owner: subscribe, unsubscribe and dispatch must not be
called concurrently. The one exception is :py:meth:`HyperliquidWebsocket.close`,
which may be called from another thread to stop a blocking ``dispatch()``.

Example::

    from eth_hyperliquid.subscription import Channel, L2Book, Trades
    from eth_hyperliquid.websocket import HyperliquidWebsocket

    ws = HyperliquidWebsocket("wss://api.hyperliquid-testnet.xyz/ws")
    ws.connect()
    ws.subscribe([
        Channel(1, L2Book("BTC")),
        Channel(2, Trades("ETH")),
    ])

    def handle(event):
        print(event)

    ws.dispatch(handle)  # Blocks until the connection closes
"""

import logging
from typing import Callable, Iterable

from websockets.exceptions import ConnectionClosedOK, WebSocketException
from websockets.sync.client import connect as websocket_connect

from eth_hyperliquid.constants import WEBSOCKET_GREETING
from eth_hyperliquid.errors import NotConnected, NotSubscribed, TransportError
from eth_hyperliquid.events import Event, decode_event
from eth_hyperliquid.subscription import Channel, Method, encode_subscription_frame

logger = logging.getLogger(__name__)

#: Default websocket handshake timeout in seconds
DEFAULT_OPEN_TIMEOUT = 10.0

#: Exceptions the websocket transport raises on connection failure
TRANSPORT_EXCEPTIONS = (WebSocketException, OSError, TimeoutError)


class HyperliquidWebsocket:
    """Subscription multiplexer over one websocket connection.

    States: disconnected (initial) and connected, see :py:attr:`is_connected`.
    """

    def __init__(
        self,
        url: str,
        connect_factory: Callable = websocket_connect,
        open_timeout: float = DEFAULT_OPEN_TIMEOUT,
    ):
        """
        :param url:
            Websocket endpoint, see :py:class:`eth_hyperliquid.config.HyperliquidConfig`

        :param connect_factory:
            Opens the transport. Takes the URL and returns an object with
            ``send()``, ``recv()`` and ``close()``.
            Defaults to :py:func:`websockets.sync.client.connect`.

        :param open_timeout:
            Handshake timeout in seconds
        """
        self.url = url
        self.connect_factory = connect_factory
        self.open_timeout = open_timeout
        self.connection = None
        self._channels: dict[int, Channel] = {}

    def __repr__(self):
        state = "connected" if self.is_connected else "disconnected"
        return f"<HyperliquidWebsocket {self.url} {state}, {len(self._channels)} channels>"

    @property
    def is_connected(self) -> bool:
        return self.connection is not None

    @property
    def channels(self) -> dict[int, Channel]:
        """Snapshot of the channel registry."""
        return dict(self._channels)

    def connect(self):
        """Open the websocket connection.

        :raise TransportError:
            Handshake failed, the instance stays disconnected
        """
        if self.is_connected:
            raise TransportError(f"Already connected to {self.url}")

        try:
            connection = self.connect_factory(self.url, open_timeout=self.open_timeout)
        except TRANSPORT_EXCEPTIONS as e:
            raise TransportError(f"Could not connect to {self.url}: {e}") from e

        self.connection = connection
        logger.info("Connected to %s", self.url)

    def _require_connection(self):
        if self.connection is None:
            raise NotConnected(f"Not connected to {self.url}")
        return self.connection

    def _drop(self):
        """Close the connection best-effort and forget it with every channel riding on it."""
        connection = self.connection
        self.connection = None
        if connection is not None:
            try:
                connection.close()
            except TRANSPORT_EXCEPTIONS as e:
                logger.warning("Closing %s failed: %s", self.url, e)
        if self._channels:
            logger.info("Discarding %d channels of %s", len(self._channels), self.url)
        self._channels.clear()

    def _send(self, frame: str):
        connection = self._require_connection()
        try:
            connection.send(frame)
        except TRANSPORT_EXCEPTIONS as e:
            self._drop()
            raise TransportError(f"Send to {self.url} failed: {e}") from e

    def subscribe(self, channels: Iterable[Channel]):
        """Subscribe channels.

        Re-subscribing an existing id overwrites its topic.

        :raise NotConnected:
            Called while disconnected

        :raise TransportError:
            Send failed, the instance is now disconnected
        """
        self._require_connection()

        # Encode everything first so a bad topic sends nothing
        frames = [(channel, encode_subscription_frame(Method.subscribe, channel.subscription)) for channel in channels]

        for channel, frame in frames:
            self._send(frame)
            if channel.id in self._channels:
                logger.debug("Channel %d re-subscribed, topic %s", channel.id, channel.subscription)
            self._channels[channel.id] = channel

    def unsubscribe(self, ids: Iterable[int]):
        """Unsubscribe channels by id.

        :raise NotSubscribed:
            An id is not in the registry. Nothing is sent and nothing is removed.

        :raise NotConnected:
            Called while disconnected
        """
        # Repeated ids unsubscribe once
        ids = list(dict.fromkeys(ids))
        for channel_id in ids:
            if channel_id not in self._channels:
                raise NotSubscribed(channel_id)

        self._require_connection()

        for channel_id in ids:
            channel = self._channels[channel_id]
            self._send(encode_subscription_frame(Method.unsubscribe, channel.subscription))
            del self._channels[channel_id]

    def unsubscribe_all(self):
        """Unsubscribe every tracked channel.

        The registry is empty afterwards, also when a send fails.
        """
        self._require_connection()
        while self._channels:
            channel_id, channel = next(iter(self._channels.items()))
            del self._channels[channel_id]
            self._send(encode_subscription_frame(Method.unsubscribe, channel.subscription))

    def ping(self):
        """Send an application level keepalive. The server answers with ``pong``."""
        self._send('{"method": "ping"}')

    def close(self):
        """Close the transport without unsubscribing.

        Safe to call from another thread to stop :py:meth:`dispatch`.
        """
        self._drop()

    def disconnect(self):
        """Unsubscribe everything and close the connection.

        Unsubscribing is best-effort: a transport failure is logged
        and the instance still ends up disconnected.
        """
        if not self.is_connected:
            self._drop()
            return

        try:
            self.unsubscribe_all()
        except TransportError as e:
            logger.warning("Unsubscribe before disconnect failed: %s", e)

        self.close()
        logger.info("Disconnected from %s", self.url)

    def dispatch(self, handler: Callable[[Event], None]):
        """Read frames and call ``handler`` for each decoded event, in order.

        Returns when the server closes the connection normally.

        :raise NotConnected:
            Called while disconnected

        :raise DecodeError:
            A frame did not decode. The loop stops at that frame.

        :raise TransportError:
            The connection failed, the instance is now disconnected
        """
        connection = self._require_connection()

        while True:
            try:
                frame = connection.recv()
            except ConnectionClosedOK:
                logger.info("Connection to %s closed", self.url)
                self._drop()
                return
            except TRANSPORT_EXCEPTIONS as e:
                self._drop()
                raise TransportError(f"Receive from {self.url} failed: {e}") from e

            if isinstance(frame, bytes):
                logger.debug("Ignoring %d byte binary frame", len(frame))
                continue

            if frame == WEBSOCKET_GREETING:
                continue

            event = decode_event(frame)
            handler(event)
