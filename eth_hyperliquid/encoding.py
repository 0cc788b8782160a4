"""Canonical action encoding.

The connection id of an action is computed over the MessagePack form of its
wire dict. The exchange recomputes the same bytes on its side, so the
encoding must be deterministic:

- keys appear in the order fixed by the action's ``to_wire()``, never in
  construction order
- absent optional fields are omitted, never packed as nil
- strings are packed as MessagePack ``str``, bytes never appear

The encoded form is internal: it is hashed, never sent.
"""

import logging

import msgpack

from eth_hyperliquid.actions import AgentAction, DirectAction
from eth_hyperliquid.errors import EncodingError

logger = logging.getLogger(__name__)


def encode_action(action: AgentAction) -> bytes:
    """Serialise an action to its canonical bytes.

    :param action:
        Any :py:class:`~eth_hyperliquid.actions.AgentAction`

    :return:
        MessagePack bytes

    :raise EncodingError:
        A field is out of range or not representable,
        or the action is user signed and must not be hashed
    """
    if isinstance(action, DirectAction):
        raise EncodingError(f"{action.action_type} is signed directly and has no canonical hash encoding")

    if not isinstance(action, AgentAction):
        raise EncodingError(f"Not an exchange action: {action!r}")

    wire = action.to_wire()

    try:
        encoded = msgpack.packb(wire, use_bin_type=True)
    except (TypeError, ValueError, OverflowError) as e:
        raise EncodingError(f"Could not pack {action.action_type}: {e}") from e

    logger.debug("Encoded %s action to %d bytes", action.action_type, len(encoded))
    return encoded
