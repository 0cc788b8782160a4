"""Endpoint configuration.

Pick endpoints by network::

    config = HyperliquidConfig.mainnet()

or from the environment::

    export HYPERLIQUID_NETWORK=testnet
    export HYPERLIQUID_REST_ENDPOINT=https://my-node.example.com  # optional override

    config = HyperliquidConfig.from_environment()
"""

import os
from dataclasses import dataclass

from eth_hyperliquid.chain import Chain, normalise_chain
from eth_hyperliquid.constants import (
    HYPERLIQUID_API_URL,
    HYPERLIQUID_LOCAL_API_URL,
    HYPERLIQUID_LOCAL_WS_URL,
    HYPERLIQUID_TESTNET_API_URL,
    HYPERLIQUID_TESTNET_WS_URL,
    HYPERLIQUID_WS_URL,
)


@dataclass(slots=True)
class HyperliquidConfig:
    """REST and websocket endpoints of one network."""

    #: Base URL of the ``/info`` and ``/exchange`` endpoints
    rest_endpoint: str

    #: Websocket URL
    ws_endpoint: str

    @classmethod
    def mainnet(cls) -> "HyperliquidConfig":
        return cls(rest_endpoint=HYPERLIQUID_API_URL, ws_endpoint=HYPERLIQUID_WS_URL)

    @classmethod
    def testnet(cls) -> "HyperliquidConfig":
        return cls(rest_endpoint=HYPERLIQUID_TESTNET_API_URL, ws_endpoint=HYPERLIQUID_TESTNET_WS_URL)

    @classmethod
    def local(cls) -> "HyperliquidConfig":
        return cls(rest_endpoint=HYPERLIQUID_LOCAL_API_URL, ws_endpoint=HYPERLIQUID_LOCAL_WS_URL)

    @classmethod
    def for_chain(cls, chain: Chain | str) -> "HyperliquidConfig":
        """Default endpoints of a chain.

        :param chain:
            :py:class:`Chain` member or its value, e.g. ``"Arbitrum"``

        :raise ChainNotSupported:
            Not a known chain value
        """
        match normalise_chain(chain, "endpoint"):
            case Chain.arbitrum:
                return cls.mainnet()
            case Chain.arbitrum_testnet | Chain.arbitrum_goerli:
                return cls.testnet()
            case Chain.dev:
                return cls.local()

    @classmethod
    def from_environment(cls, environ: dict | None = None) -> "HyperliquidConfig":
        """Read configuration from environment variables.

        - ``HYPERLIQUID_NETWORK``: ``mainnet``, ``testnet`` (default) or ``local``
        - ``HYPERLIQUID_REST_ENDPOINT``: override the REST base URL
        - ``HYPERLIQUID_WS_ENDPOINT``: override the websocket URL

        :raise ValueError:
            Unknown network name
        """
        if environ is None:
            environ = os.environ

        network = environ.get("HYPERLIQUID_NETWORK", "testnet").lower()
        factories = {
            "mainnet": cls.mainnet,
            "testnet": cls.testnet,
            "local": cls.local,
        }
        if network not in factories:
            raise ValueError(f"Unknown HYPERLIQUID_NETWORK {network!r}, use one of {', '.join(factories)}")

        config = factories[network]()
        config.rest_endpoint = environ.get("HYPERLIQUID_REST_ENDPOINT", config.rest_endpoint)
        config.ws_endpoint = environ.get("HYPERLIQUID_WS_ENDPOINT", config.ws_endpoint)
        return config
