"""Hyperliquid exchange client.

Sign and send trading actions to the Hyperliquid perpetuals exchange,
query market data and stream live events.

- :py:mod:`eth_hyperliquid.exchange`: place orders, cancel, transfer
- :py:mod:`eth_hyperliquid.info`: market data and account state
- :py:mod:`eth_hyperliquid.websocket`: subscription multiplexer for live events
- :py:mod:`eth_hyperliquid.signing`: EIP-712 signing of actions, usable without the transport
"""
