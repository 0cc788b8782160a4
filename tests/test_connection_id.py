"""Connection id derivation: determinism, sensitivity and vault marker."""

import itertools

import pytest
from eth_utils import keccak

from eth_hyperliquid.actions import Cancel, CancelRequest, Limit, Order, OrderRequest, Tif
from eth_hyperliquid.connection_id import action_connection_id, derive_connection_id, encode_vault_marker
from eth_hyperliquid.constants import ZERO_ADDRESS
from eth_hyperliquid.encoding import encode_action
from eth_hyperliquid.errors import EncodingError

VAULT = "0x1111111111111111111111111111111111111111"
OTHER_VAULT = "0x2222222222222222222222222222222222222222"


def _order(**overrides) -> Order:
    fields = dict(
        asset=4,
        is_buy=True,
        limit_px="1700",
        sz="0.1",
        reduce_only=False,
        order_type=Limit(Tif.gtc),
    )
    fields.update(overrides)
    return Order(orders=(OrderRequest(**fields),))


def test_layout(order_action):
    """Hash input is encoded action, big-endian nonce, then the vault marker."""
    encoded = encode_action(order_action)
    nonce = 0x0102030405060708

    expected = keccak(encoded + bytes([1, 2, 3, 4, 5, 6, 7, 8]) + b"\x00")
    assert derive_connection_id(encoded, nonce) == expected

    expected_vault = keccak(encoded + nonce.to_bytes(8, "big") + b"\x01" + bytes.fromhex("11" * 20))
    assert derive_connection_id(encoded, nonce, VAULT) == expected_vault


def test_deterministic(order_action, fixed_clock):
    nonce = fixed_clock.now_ms()
    first = action_connection_id(order_action, nonce, VAULT)
    second = action_connection_id(order_action, nonce, VAULT)
    assert first == second
    assert len(first) == 32


def test_sensitive_to_every_input():
    """No two distinct inputs of the corpus collide."""
    actions = [
        _order(),
        _order(asset=5),
        _order(is_buy=False),
        _order(limit_px="1701"),
        _order(sz="0.2"),
        _order(reduce_only=True),
        _order(order_type=Limit(Tif.ioc)),
        Cancel(cancels=(CancelRequest(asset=4, oid=1),)),
    ]
    nonces = [1_700_000_000_000, 1_700_000_000_001]
    vaults = [None, VAULT, OTHER_VAULT]

    ids = set()
    for action, nonce, vault in itertools.product(actions, nonces, vaults):
        ids.add(action_connection_id(action, nonce, vault))

    assert len(ids) == len(actions) * len(nonces) * len(vaults)


def test_absent_vault_differs_from_zero_address(order_action):
    nonce = 1_700_000_000_000
    assert action_connection_id(order_action, nonce, None) != action_connection_id(order_action, nonce, ZERO_ADDRESS)


def test_vault_marker():
    assert encode_vault_marker(None) == b"\x00"
    assert encode_vault_marker(ZERO_ADDRESS) == b"\x01" + b"\x00" * 20
    # Checksummed and lowercase forms hash the same
    assert encode_vault_marker("0x" + "AB" * 20) == encode_vault_marker("0x" + "ab" * 20)


@pytest.mark.parametrize("nonce", [-1, 2**64, True, 1.5])
def test_nonce_out_of_range(order_action, nonce):
    with pytest.raises(EncodingError):
        action_connection_id(order_action, nonce)


def test_bad_vault(order_action):
    with pytest.raises(EncodingError):
        action_connection_id(order_action, 1, "0xnot-an-address")
