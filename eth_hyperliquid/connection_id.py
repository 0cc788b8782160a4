"""Connection id derivation.

The connection id binds one action to one nonce and one optional vault::

    keccak256(encoded_action || uint64_be(nonce) || vault_marker)

    vault_marker = 0x00                      # no vault
                 = 0x01 || 20 address bytes  # trading for a vault

The order of the parts and the marker byte must match the exchange exactly.
A mismatch does not fail locally: the exchange recovers a different signer
and rejects the request.
"""

from eth_utils import keccak
from hexbytes import HexBytes

from eth_hyperliquid.actions import UINT64_MAX, AgentAction, check_address
from eth_hyperliquid.encoding import encode_action
from eth_hyperliquid.errors import EncodingError


def encode_vault_marker(vault_address: str | None) -> bytes:
    """Encode vault presence flag and address bytes."""
    if vault_address is None:
        return b"\x00"
    address = check_address(vault_address, "vaultAddress")
    return b"\x01" + bytes.fromhex(address[2:])


def derive_connection_id(
    encoded_action: bytes,
    nonce: int,
    vault_address: str | None = None,
) -> HexBytes:
    """Hash canonical action bytes, nonce and vault into a connection id.

    Pure function: the same inputs always give the same 32 bytes.

    :param encoded_action:
        Output of :py:func:`eth_hyperliquid.encoding.encode_action`

    :param nonce:
        Request nonce, milliseconds

    :param vault_address:
        Vault the action trades for, or ``None``

    :raise EncodingError:
        The nonce does not fit 64 bits or the vault address is malformed
    """
    if isinstance(nonce, bool) or not isinstance(nonce, int) or not 0 <= nonce <= UINT64_MAX:
        raise EncodingError(f"Nonce must be an unsigned 64-bit integer: {nonce!r}")

    data = bytes(encoded_action) + nonce.to_bytes(8, "big") + encode_vault_marker(vault_address)
    return HexBytes(keccak(data))


def action_connection_id(
    action: AgentAction,
    nonce: int,
    vault_address: str | None = None,
) -> HexBytes:
    """Encode an action and derive its connection id."""
    return derive_connection_id(encode_action(action), nonce, vault_address)
