"""Constants for the Hyperliquid client.

Shared constants used across the modules
(:py:mod:`~eth_hyperliquid.signing`, :py:mod:`~eth_hyperliquid.session`,
:py:mod:`~eth_hyperliquid.config`, etc.).
"""

from pathlib import Path

#: Hyperliquid mainnet API URL
HYPERLIQUID_API_URL = "https://api.hyperliquid.xyz"

#: Hyperliquid testnet API URL
HYPERLIQUID_TESTNET_API_URL = "https://api.hyperliquid-testnet.xyz"

#: Local node API URL, used with :py:attr:`~eth_hyperliquid.chain.Chain.dev`
HYPERLIQUID_LOCAL_API_URL = "http://localhost:3001"

#: Hyperliquid mainnet websocket URL
HYPERLIQUID_WS_URL = "wss://api.hyperliquid.xyz/ws"

#: Hyperliquid testnet websocket URL
HYPERLIQUID_TESTNET_WS_URL = "wss://api.hyperliquid-testnet.xyz/ws"

#: Local node websocket URL
HYPERLIQUID_LOCAL_WS_URL = "ws://localhost:3001/ws"

#: Path of the info endpoint
INFO_PATH = "/info"

#: Path of the exchange endpoint
EXCHANGE_PATH = "/exchange"

#: Default SQLite database path for rate limiting state.
#:
#: Using SQLite ensures thread-safe rate limiting across multiple threads
#: sharing one session.
HYPERLIQUID_RATE_LIMIT_SQLITE_DATABASE = Path("~/.tradingstrategy/hyperliquid/rate-limit.sqlite").expanduser()

#: Default number of retries for API requests
DEFAULT_RETRIES = 5

#: Default backoff factor for retries (seconds)
DEFAULT_BACKOFF_FACTOR = 0.5

#: Default rate limit for Hyperliquid API requests per second.
#:
#: Hyperliquid has a limit of 1200 weight per minute per IP.
#: Most info endpoints have weight 20, so: 1200 / 20 = 60 requests/minute = 1 request/second.
#:
#: See https://hyperliquid.gitbook.io/hyperliquid-docs/for-developers/api/rate-limits-and-user-limits
DEFAULT_REQUESTS_PER_SECOND = 1.0

#: Default HTTP timeout in seconds
DEFAULT_HTTP_TIMEOUT = 30.0

#: Placeholder verifying contract used by all Hyperliquid signing domains
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

#: EIP-712 domain name for actions signed through the agent wrapper
AGENT_DOMAIN_NAME = "Exchange"

#: EIP-712 domain name for user signed (human-readable) actions
DIRECT_DOMAIN_NAME = "HyperliquidSignTransaction"

#: EIP-712 domain version shared by both domains
DOMAIN_VERSION = "1"

#: Chain id the wallet signs user signed actions with.
#:
#: The same value is used for mainnet and testnet,
#: the network is separated by the signed ``hyperliquidChain`` field.
SIGNATURE_CHAIN_ID = 0x66EEE

#: EIP-712 domain type definition
EIP712_DOMAIN_TYPE = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]

#: EIP-712 type of the phantom agent wrapping a connection id
AGENT_TYPE = [
    {"name": "source", "type": "string"},
    {"name": "connectionId", "type": "bytes32"},
]

#: EIP-712 types of user signed actions, keyed by primary type
DIRECT_MESSAGE_TYPES = {
    "HyperliquidTransaction:UsdSend": [
        {"name": "hyperliquidChain", "type": "string"},
        {"name": "destination", "type": "string"},
        {"name": "amount", "type": "string"},
        {"name": "time", "type": "uint64"},
    ],
    "HyperliquidTransaction:Withdraw": [
        {"name": "hyperliquidChain", "type": "string"},
        {"name": "destination", "type": "string"},
        {"name": "amount", "type": "string"},
        {"name": "time", "type": "uint64"},
    ],
    "HyperliquidTransaction:ApproveAgent": [
        {"name": "hyperliquidChain", "type": "string"},
        {"name": "agentAddress", "type": "address"},
        {"name": "agentName", "type": "string"},
        {"name": "nonce", "type": "uint64"},
    ],
}

#: Greeting text frame the server sends right after the websocket handshake
WEBSOCKET_GREETING = "Websocket connection established."
