"""Exceptions raised by the Hyperliquid client.

All exceptions derive from :py:class:`HyperliquidError`, so callers can catch
the whole family with one ``except`` clause, or pick the variant they want to
react to.

- Signing pipeline: :py:class:`EncodingError`, :py:class:`ChainNotSupported`,
  :py:class:`SigningError`, :py:class:`ClockError`

- Transport: :py:class:`TransportError`, :py:class:`NotConnected`,
  :py:class:`ExchangeAPIError`

- Streaming: :py:class:`NotSubscribed`, :py:class:`DecodeError`
"""


class HyperliquidError(Exception):
    """Base class for all errors raised by this package."""


class EncodingError(HyperliquidError):
    """An action could not be canonically serialised.

    Raised before anything is signed or sent.
    """


class ChainNotSupported(HyperliquidError):
    """The chain has no signing domain mapping for the requested signing mode."""

    def __init__(self, chain, mode: str):
        self.chain = chain
        self.mode = mode
        super().__init__(f"Chain {chain!r} not supported: no {mode} mapping")


class SigningError(HyperliquidError):
    """The account refused or failed to produce a signature."""


class ClockError(HyperliquidError):
    """The clock reading cannot be turned into a nonce."""


class TransportError(HyperliquidError):
    """Connection level failure on the REST or websocket path."""


class NotConnected(TransportError):
    """Websocket operation attempted while disconnected."""


class ExchangeAPIError(HyperliquidError):
    """The exchange answered with an error status.

    :param response:
        Decoded JSON body of the reply
    """

    def __init__(self, message: str, response: dict | None = None):
        self.response = response
        super().__init__(message)


class NotSubscribed(HyperliquidError):
    """Unsubscribe requested for a channel id the multiplexer does not track."""

    def __init__(self, channel_id: int):
        self.channel_id = channel_id
        super().__init__(f"Not subscribed to channel with id {channel_id}")


class DecodeError(HyperliquidError):
    """An inbound websocket frame did not match any known event shape.

    :param frame:
        The raw frame text, for diagnostics
    """

    def __init__(self, message: str, frame: str | bytes | None = None):
        self.frame = frame
        super().__init__(message)
