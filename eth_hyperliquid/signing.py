"""Chain scoped EIP-712 signing of exchange actions.

Hyperliquid authenticates actions in one of two mutually exclusive ways,
and the signer exposes one entry point for each, with different inputs:

**Agent mode** (:py:meth:`ChainScopedSigner.sign_agent`)

The connection id of the action (see :py:mod:`eth_hyperliquid.connection_id`)
is wrapped in a phantom agent struct and signed under the ``Exchange``
domain of the chain:

.. code-block:: text

    Agent(string source, bytes32 connectionId)

Used for orders, cancels, modifications, leverage and margin updates,
sub-account administration, referrer and scheduled cancels.

**Direct mode** (:py:meth:`ChainScopedSigner.sign_direct`)

The human-readable payload is signed as is under the
``HyperliquidSignTransaction`` domain. The network is identified by its
logical name (``Mainnet`` or ``Testnet``) in the signed ``hyperliquidChain``
field. No connection id is computed. Used for USD sends, bridge
withdrawals and agent approval.

Example::

    from eth_account import Account

    from eth_hyperliquid.chain import Chain
    from eth_hyperliquid.connection_id import action_connection_id
    from eth_hyperliquid.signing import ChainScopedSigner

    signer = ChainScopedSigner(Account.from_key(private_key), Chain.arbitrum_testnet)
    connection_id = action_connection_id(action, nonce)
    signature = signer.sign_agent(connection_id)

A wrong chain is never guessed:
:py:class:`~eth_hyperliquid.errors.ChainNotSupported` is raised
for values without a domain.
"""

import logging
from dataclasses import dataclass

from eth_account import Account
from eth_account.messages import SignableMessage, encode_typed_data
from eth_account.signers.local import LocalAccount
from eth_typing import HexAddress
from hexbytes import HexBytes

from eth_hyperliquid.actions import DirectAction
from eth_hyperliquid.chain import AgentSigningDomain, Chain, DirectSigningDomain, get_agent_domain, get_direct_domain
from eth_hyperliquid.constants import AGENT_TYPE, DIRECT_MESSAGE_TYPES, EIP712_DOMAIN_TYPE
from eth_hyperliquid.errors import EncodingError, SigningError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Signature:
    """ECDSA signature as the exchange expects it."""

    r: int
    s: int
    v: int

    def to_wire(self) -> dict:
        return {
            "r": "0x" + self.r.to_bytes(32, "big").hex(),
            "s": "0x" + self.s.to_bytes(32, "big").hex(),
            "v": self.v,
        }

    @classmethod
    def from_wire(cls, data: dict) -> "Signature":
        return cls(r=int(data["r"], 16), s=int(data["s"], 16), v=int(data["v"]))

    def vrs(self) -> tuple[int, int, int]:
        return self.v, self.r, self.s


@dataclass(frozen=True, slots=True)
class UserSignedPayload:
    """Human-readable payload of a direct mode action, bound to one network.

    Build with :py:func:`build_direct_payload`.
    """

    action: DirectAction
    domain: DirectSigningDomain

    #: The signed EIP-712 message
    message: dict

    @property
    def primary_type(self) -> str:
        return self.action.primary_type

    def to_typed_data(self) -> dict:
        return {
            "types": {
                "EIP712Domain": EIP712_DOMAIN_TYPE,
                self.primary_type: DIRECT_MESSAGE_TYPES[self.primary_type],
            },
            "primaryType": self.primary_type,
            "domain": self.domain.as_domain_data(),
            "message": self.message,
        }

    def to_wire(self) -> dict:
        """The action as carried in the request."""
        return {
            "type": self.action.action_type,
            "hyperliquidChain": self.domain.network,
            "signatureChainId": self.domain.signature_chain_id_hex,
            **self.action.wire_fields(),
        }


def build_direct_payload(action: DirectAction, chain: Chain | str) -> UserSignedPayload:
    """Bind a direct mode action to the network of a chain.

    :raise ChainNotSupported:
        The chain has no logical network
    """
    if not isinstance(action, DirectAction):
        raise EncodingError(f"Not a user signed action: {action!r}")
    domain = get_direct_domain(chain)
    message = {"hyperliquidChain": domain.network, **action.message_fields()}
    return UserSignedPayload(action=action, domain=domain, message=message)


def encode_agent_message(domain: AgentSigningDomain, connection_id: bytes) -> SignableMessage:
    """EIP-712 signable message of the phantom agent."""
    connection_id = HexBytes(connection_id)
    if len(connection_id) != 32:
        raise EncodingError(f"Connection id must be 32 bytes, got {len(connection_id)}")

    typed_data = {
        "types": {
            "EIP712Domain": EIP712_DOMAIN_TYPE,
            "Agent": AGENT_TYPE,
        },
        "primaryType": "Agent",
        "domain": domain.as_domain_data(),
        "message": {
            "source": domain.source,
            "connectionId": bytes(connection_id),
        },
    }
    return encode_typed_data(full_message=typed_data)


def encode_direct_message(payload: UserSignedPayload) -> SignableMessage:
    """EIP-712 signable message of a user signed payload."""
    return encode_typed_data(full_message=payload.to_typed_data())


class ChainScopedSigner:
    """Signs actions for one chain with one account.

    - The account is any object with ``address`` and
      :py:meth:`eth_account.signers.local.LocalAccount.sign_message`,
      e.g. a local key or a hardware backed signer.

    - Stateless apart from the account, can be shared across threads.
    """

    def __init__(self, account: LocalAccount, chain: Chain | str):
        """
        :param account:
            Key holding signer

        :param chain:
            Network the signatures are valid on
        """
        self.account = account
        self.chain = chain

    def __repr__(self):
        return f"<ChainScopedSigner {self.address} on {self.chain}>"

    @property
    def address(self) -> HexAddress:
        return self.account.address

    def _sign(self, signable: SignableMessage) -> Signature:
        try:
            signed = self.account.sign_message(signable)
        except Exception as e:
            raise SigningError(f"Account {self.address} failed to sign: {e}") from e
        return Signature(r=signed.r, s=signed.s, v=signed.v)

    def sign_agent(self, connection_id: bytes) -> Signature:
        """Sign a connection id in agent mode.

        :param connection_id:
            32 bytes from :py:func:`eth_hyperliquid.connection_id.derive_connection_id`

        :raise ChainNotSupported:
            No agent domain for the chain

        :raise SigningError:
            The account failed
        """
        domain = get_agent_domain(self.chain)
        signable = encode_agent_message(domain, connection_id)
        logger.debug(
            "Signing connection id %s with %s, chain id %d",
            HexBytes(connection_id).hex(),
            self.address,
            domain.chain_id,
        )
        return self._sign(signable)

    def sign_direct(self, payload: UserSignedPayload) -> Signature:
        """Sign a user signed payload in direct mode.

        :param payload:
            From :py:func:`build_direct_payload`, must be bound to this signer's chain

        :raise ChainNotSupported:
            No direct domain for the chain

        :raise SigningError:
            The account failed, or the payload was built for another network
        """
        domain = get_direct_domain(self.chain)
        if payload.domain != domain:
            raise SigningError(f"Payload is bound to {payload.domain.network}, signer is on {domain.network}")
        logger.debug("Signing %s with %s on %s", payload.primary_type, self.address, domain.network)
        return self._sign(encode_direct_message(payload))

    def build_direct_payload(self, action: DirectAction) -> UserSignedPayload:
        return build_direct_payload(action, self.chain)


def recover_agent_signer(chain: Chain | str, connection_id: bytes, signature: Signature) -> HexAddress:
    """Recover the address that signed a connection id."""
    signable = encode_agent_message(get_agent_domain(chain), connection_id)
    return Account.recover_message(signable, vrs=signature.vrs())


def recover_direct_signer(payload: UserSignedPayload, signature: Signature) -> HexAddress:
    """Recover the address that signed a user signed payload."""
    return Account.recover_message(encode_direct_message(payload), vrs=signature.vrs())
