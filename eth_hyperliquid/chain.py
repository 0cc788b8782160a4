"""Network contexts and their signing domains.

Hyperliquid accepts two kinds of EIP-712 signatures and each has its own
domain table:

- **Agent domain**: keyed by a numeric chain id. Used for every action that
  is hashed into a connection id (orders, cancels, leverage, sub-accounts...).

- **Direct domain**: keyed by a logical network name (``Mainnet``, ``Testnet``).
  Used for user signed actions (USD sends, withdrawals, agent approval).

Adding a network means adding a row to :py:data:`AGENT_SIGNING_DOMAINS`
and/or :py:data:`DIRECT_SIGNING_DOMAINS`. Lookups never fall back to a
default: unmapped values raise :py:class:`~eth_hyperliquid.errors.ChainNotSupported`.
"""

from dataclasses import dataclass
from enum import Enum

from eth_hyperliquid.constants import (
    AGENT_DOMAIN_NAME,
    DIRECT_DOMAIN_NAME,
    DOMAIN_VERSION,
    SIGNATURE_CHAIN_ID,
    ZERO_ADDRESS,
)
from eth_hyperliquid.errors import ChainNotSupported


class Chain(Enum):
    """Network the client talks to.

    #: Local development node
    dev = "Dev"

    #: Production network
    arbitrum = "Arbitrum"

    #: Public test network
    arbitrum_testnet = "ArbitrumTestnet"

    #: Legacy test network, agent signing only
    arbitrum_goerli = "ArbitrumGoerli"
    """

    dev = "Dev"
    arbitrum = "Arbitrum"
    arbitrum_testnet = "ArbitrumTestnet"
    arbitrum_goerli = "ArbitrumGoerli"

    def is_mainnet(self) -> bool:
        return self == Chain.arbitrum


@dataclass(frozen=True, slots=True)
class AgentSigningDomain:
    """EIP-712 domain for connection id signatures."""

    #: Numeric chain id put in the domain separator
    chain_id: int

    #: Short tag signed as ``Agent.source``
    source: str

    name: str = AGENT_DOMAIN_NAME
    version: str = DOMAIN_VERSION
    verifying_contract: str = ZERO_ADDRESS

    def as_domain_data(self) -> dict:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chain_id,
            "verifyingContract": self.verifying_contract,
        }


@dataclass(frozen=True, slots=True)
class DirectSigningDomain:
    """EIP-712 domain for user signed actions."""

    #: Logical network name, signed as ``hyperliquidChain``
    network: str

    #: Chain id the wallet signs with
    signature_chain_id: int = SIGNATURE_CHAIN_ID

    name: str = DIRECT_DOMAIN_NAME
    version: str = DOMAIN_VERSION
    verifying_contract: str = ZERO_ADDRESS

    def as_domain_data(self) -> dict:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.signature_chain_id,
            "verifyingContract": self.verifying_contract,
        }

    @property
    def signature_chain_id_hex(self) -> str:
        """Chain id as carried in the action, e.g. ``0x66eee``."""
        return hex(self.signature_chain_id)


#: Agent signing domains per chain.
#:
#: Every network has a distinct chain id, so a signature can not be replayed
#: on another network.
AGENT_SIGNING_DOMAINS: dict[Chain, AgentSigningDomain] = {
    Chain.arbitrum: AgentSigningDomain(chain_id=42161, source="a"),
    Chain.arbitrum_testnet: AgentSigningDomain(chain_id=421614, source="b"),
    Chain.arbitrum_goerli: AgentSigningDomain(chain_id=421613, source="b"),
    Chain.dev: AgentSigningDomain(chain_id=1337, source="b"),
}

#: Direct signing domains, keyed by logical network name
DIRECT_SIGNING_DOMAINS: dict[str, DirectSigningDomain] = {
    "Mainnet": DirectSigningDomain(network="Mainnet"),
    "Testnet": DirectSigningDomain(network="Testnet"),
}

#: Which logical network each chain signs user actions on.
#:
#: Goerli is not mapped: user signed actions were never enabled there.
DIRECT_NETWORKS: dict[Chain, str] = {
    Chain.arbitrum: "Mainnet",
    Chain.arbitrum_testnet: "Testnet",
    Chain.dev: "Testnet",
}


def normalise_chain(chain: Chain | str, mode: str) -> Chain:
    """Turn a chain value such as ``"Arbitrum"`` into a :py:class:`Chain` member.

    :raise ChainNotSupported:
        Not a known chain value
    """
    if isinstance(chain, Chain):
        return chain
    try:
        return Chain(chain)
    except ValueError as e:
        raise ChainNotSupported(chain, mode) from e


def get_agent_domain(chain: Chain | str) -> AgentSigningDomain:
    """Resolve the agent signing domain of a chain.

    :param chain:
        :py:class:`Chain` member or its value, e.g. ``"Arbitrum"``

    :raise ChainNotSupported:
        The chain has no agent domain
    """
    chain = normalise_chain(chain, "agent")
    try:
        return AGENT_SIGNING_DOMAINS[chain]
    except KeyError as e:
        raise ChainNotSupported(chain, "agent") from e


def get_direct_domain(chain: Chain | str) -> DirectSigningDomain:
    """Resolve the user signed action domain of a chain.

    :raise ChainNotSupported:
        The chain has no logical network mapping
    """
    chain = normalise_chain(chain, "direct")
    try:
        network = DIRECT_NETWORKS[chain]
        return DIRECT_SIGNING_DOMAINS[network]
    except KeyError as e:
        raise ChainNotSupported(chain, "direct") from e
