"""Authenticated exchange request envelope."""

from dataclasses import dataclass

from eth_hyperliquid.actions import AgentAction, check_address
from eth_hyperliquid.signing import Signature, UserSignedPayload


@dataclass(frozen=True, slots=True)
class ExchangeRequest:
    """Body of a ``POST /exchange`` call.

    Immutable, built once by :py:func:`build_request` and handed to the transport.
    """

    action: AgentAction | UserSignedPayload
    nonce: int
    signature: Signature
    vault_address: str | None = None

    def to_wire(self) -> dict:
        """JSON body. ``vaultAddress`` is left out entirely when there is no vault."""
        wire = {
            "action": self.action.to_wire(),
            "nonce": self.nonce,
            "signature": self.signature.to_wire(),
        }
        if self.vault_address is not None:
            wire["vaultAddress"] = self.vault_address
        return wire


def build_request(
    action: AgentAction | UserSignedPayload,
    nonce: int,
    signature: Signature,
    vault_address: str | None = None,
) -> ExchangeRequest:
    """Wrap a signed action into a request.

    :param vault_address:
        Must be the same vault the connection id was derived with
    """
    if vault_address is not None:
        vault_address = check_address(vault_address, "vaultAddress")
    return ExchangeRequest(action=action, nonce=nonce, signature=signature, vault_address=vault_address)
