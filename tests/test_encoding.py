"""Canonical MessagePack encoding of actions."""

import msgpack
import pytest

from eth_hyperliquid.actions import ScheduleCancel, UpdateLeverage, UsdSend
from eth_hyperliquid.encoding import encode_action
from eth_hyperliquid.errors import EncodingError


def test_encode_preserves_key_order(order_action):
    """Decoding the bytes gives the wire dict back, keys in the same order."""
    encoded = encode_action(order_action)
    decoded = msgpack.unpackb(encoded, raw=False)
    assert decoded == order_action.to_wire()
    assert list(decoded.keys()) == ["type", "orders", "grouping"]
    assert list(decoded["orders"][0].keys()) == ["a", "b", "p", "s", "r", "t"]


def test_encode_is_deterministic(order_action):
    assert encode_action(order_action) == encode_action(order_action)


def test_encode_fixmap_header():
    # 4 keys -> msgpack fixmap 0x84, first key "type" as fixstr
    encoded = encode_action(UpdateLeverage(asset=1, is_cross=True, leverage=5))
    assert encoded[0] == 0x84
    assert encoded[1:6] == b"\xa4type"


def test_absent_field_not_packed_as_nil():
    encoded = encode_action(ScheduleCancel())
    assert encoded == msgpack.packb({"type": "scheduleCancel"})
    assert b"\xc0" not in encoded


def test_direct_action_has_no_hash_encoding():
    action = UsdSend(destination="0x" + "11" * 20, amount="1", time=1)
    with pytest.raises(EncodingError):
        encode_action(action)


def test_non_action_rejected():
    with pytest.raises(EncodingError):
        encode_action({"type": "order"})


def test_invalid_field_raises_before_packing():
    with pytest.raises(EncodingError):
        encode_action(UpdateLeverage(asset=-1, is_cross=True, leverage=5))
