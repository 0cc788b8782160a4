"""Hyperliquid exchange actions.

Every mutating call to the ``/exchange`` endpoint carries one *action*.
Actions form a closed set of immutable value objects, split in two families
by the way the exchange authenticates them:

- :py:class:`AgentAction`: canonically encoded, hashed into a connection id
  and signed through the agent wrapper.
  See :py:mod:`eth_hyperliquid.encoding` and :py:mod:`eth_hyperliquid.connection_id`.

- :py:class:`DirectAction`: signed directly as human-readable EIP-712 data.
  These are never hashed.

Each action knows its wire form. ``to_wire()`` output has a fixed key order
and omits absent optional fields, because the exchange hashes the same
structure byte-by-byte on its side.

Example::

    from eth_hyperliquid.actions import Limit, Order, OrderRequest, Tif

    order = OrderRequest(
        asset=4,
        is_buy=True,
        limit_px="1700",
        sz="0.1",
        reduce_only=False,
        order_type=Limit(Tif.gtc),
    )
    action = Order(orders=(order,))
    wire = action.to_wire()
"""

import abc
import re
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from eth_utils import is_address
from hexbytes import HexBytes
from web3 import Web3

from eth_hyperliquid.errors import EncodingError

UINT32_MAX = 2**32 - 1
UINT64_MAX = 2**64 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

#: Price and size strings, e.g. ``1700``, ``0.01``
DECIMAL_STRING = re.compile(r"[0-9]+(\.[0-9]+)?")


def check_decimal_string(value: str, field: str) -> str:
    """Validate a price or size string.

    The string goes to the wire as is, we only check it is a plain
    non-negative decimal: no sign, exponent or whitespace.
    """
    if not isinstance(value, str):
        raise EncodingError(f"{field} must be a decimal string, got {type(value).__name__}: {value!r}")
    if not DECIMAL_STRING.fullmatch(value):
        raise EncodingError(f"{field} is not a plain decimal number: {value!r}")
    return value


def check_uint(value: int, field: str, maximum: int = UINT64_MAX) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"{field} must be an integer, got {value!r}")
    if not 0 <= value <= maximum:
        raise EncodingError(f"{field} out of range: {value}")
    return value


def check_int64(value: int, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"{field} must be an integer, got {value!r}")
    if not INT64_MIN <= value <= INT64_MAX:
        raise EncodingError(f"{field} out of int64 range: {value}")
    return value


def check_bool(value: bool, field: str) -> bool:
    if not isinstance(value, bool):
        raise EncodingError(f"{field} must be a bool, got {value!r}")
    return value


def check_address(value: str, field: str) -> str:
    """Validate an address and return it lowercased, as hashed by the exchange."""
    if not isinstance(value, str) or not is_address(value):
        raise EncodingError(f"{field} is not a valid address: {value!r}")
    return value.lower()


def check_str(value: str, field: str) -> str:
    if not isinstance(value, str):
        raise EncodingError(f"{field} must be a string, got {value!r}")
    return value


def checksum_address(value: str, field: str) -> str:
    """Validate an address and return its EIP-55 form."""
    if not isinstance(value, str) or not is_address(value):
        raise EncodingError(f"{field} is not a valid address: {value!r}")
    return Web3.to_checksum_address(value)


@dataclass(frozen=True, slots=True, repr=False)
class Cloid:
    """Client order id.

    A caller chosen 16-byte identifier, an alternative key
    to the exchange assigned order id.

    Example::

        cloid = Cloid.from_int(1)
        assert cloid.to_raw() == "0x00000000000000000000000000000001"
    """

    #: 16 raw bytes
    raw: bytes

    def __post_init__(self):
        raw = bytes(self.raw)
        if len(raw) != 16:
            raise EncodingError(f"Cloid must be 16 bytes, got {len(raw)}")
        object.__setattr__(self, "raw", raw)

    @classmethod
    def from_int(cls, value: int) -> "Cloid":
        check_uint(value, "cloid", 2**128 - 1)
        return cls(value.to_bytes(16, "big"))

    @classmethod
    def from_str(cls, value: str) -> "Cloid":
        try:
            raw = HexBytes(value)
        except ValueError as e:
            raise EncodingError(f"Cloid is not hex: {value!r}") from e
        return cls(raw)

    def to_raw(self) -> str:
        return "0x" + self.raw.hex()

    def __repr__(self):
        return f"<Cloid {self.to_raw()}>"


class Tif(Enum):
    """Time in force of a limit order.

    #: Good til cancelled
    gtc = "Gtc"

    #: Immediate or cancel
    ioc = "Ioc"

    #: Add liquidity only (post only)
    alo = "Alo"
    """

    gtc = "Gtc"
    ioc = "Ioc"
    alo = "Alo"


class TpSl(Enum):
    """Take profit or stop loss trigger."""

    tp = "tp"
    sl = "sl"


class Grouping(Enum):
    """How the orders of one order action relate to each other."""

    na = "na"
    normal_tpsl = "normalTpsl"
    position_tpsl = "positionTpsl"


@dataclass(frozen=True, slots=True)
class Limit:
    """Limit order type."""

    tif: Tif

    def to_wire(self) -> dict:
        return {"limit": {"tif": self.tif.value}}


@dataclass(frozen=True, slots=True)
class Trigger:
    """Trigger (take profit / stop loss) order type."""

    trigger_px: str
    is_market: bool
    tpsl: TpSl

    def to_wire(self) -> dict:
        return {
            "trigger": {
                "isMarket": check_bool(self.is_market, "isMarket"),
                "triggerPx": check_decimal_string(self.trigger_px, "triggerPx"),
                "tpsl": self.tpsl.value,
            }
        }


OrderType = Limit | Trigger


@dataclass(frozen=True, slots=True)
class OrderRequest:
    """One order inside an :py:class:`Order` or :py:class:`Modify` action.

    Prices and sizes are strings, already quantised by the caller.
    See :py:func:`eth_hyperliquid.utils.parse_price` and :py:func:`eth_hyperliquid.utils.parse_size`.
    """

    #: Asset index from the ``meta`` universe
    asset: int
    is_buy: bool
    limit_px: str
    sz: str
    reduce_only: bool
    order_type: OrderType
    cloid: Cloid | None = None

    def to_wire(self) -> dict:
        wire = {
            "a": check_uint(self.asset, "asset", UINT32_MAX),
            "b": check_bool(self.is_buy, "isBuy"),
            "p": check_decimal_string(self.limit_px, "limitPx"),
            "s": check_decimal_string(self.sz, "sz"),
            "r": check_bool(self.reduce_only, "reduceOnly"),
            "t": self.order_type.to_wire(),
        }
        if self.cloid is not None:
            wire["c"] = self.cloid.to_raw()
        return wire


@dataclass(frozen=True, slots=True)
class CancelRequest:
    asset: int
    oid: int

    def to_wire(self) -> dict:
        return {
            "a": check_uint(self.asset, "asset", UINT32_MAX),
            "o": check_uint(self.oid, "oid"),
        }


@dataclass(frozen=True, slots=True)
class CancelByCloidRequest:
    asset: int
    cloid: Cloid

    def to_wire(self) -> dict:
        return {
            "asset": check_uint(self.asset, "asset", UINT32_MAX),
            "cloid": self.cloid.to_raw(),
        }


@dataclass(frozen=True, slots=True)
class ModifyRequest:
    """Replace a resting order, identified by exchange order id or cloid."""

    oid: int | Cloid
    order: OrderRequest

    def to_wire(self) -> dict:
        if isinstance(self.oid, Cloid):
            oid = self.oid.to_raw()
        else:
            oid = check_uint(self.oid, "oid")
        return {"oid": oid, "order": self.order.to_wire()}


def _freeze(instance, field: str):
    # Frozen dataclasses still accept lists, store them as tuples
    value = getattr(instance, field)
    if not isinstance(value, tuple):
        object.__setattr__(instance, field, tuple(value))


class AgentAction(abc.ABC):
    """Action authenticated through a connection id.

    Subclasses declare their wire tag in :py:attr:`action_type`.
    """

    #: Value of the ``type`` field on the wire
    action_type: ClassVar[str]

    @abc.abstractmethod
    def to_wire(self) -> dict:
        """Exchange dict with the fixed key order, ``type`` first."""


class DirectAction(abc.ABC):
    """Action the user signs directly as human-readable EIP-712 data.

    The network fields (``hyperliquidChain``, ``signatureChainId``) are filled
    in by :py:func:`eth_hyperliquid.signing.build_direct_payload`.
    """

    #: Value of the ``type`` field on the wire
    action_type: ClassVar[str]

    #: EIP-712 primary type, see :py:data:`eth_hyperliquid.constants.DIRECT_MESSAGE_TYPES`
    primary_type: ClassVar[str]

    @abc.abstractmethod
    def message_fields(self) -> dict:
        """All signed fields except ``hyperliquidChain``."""

    def wire_fields(self) -> dict:
        """Fields carried in the request action.

        Same as the signed fields unless the action has optional fields.
        """
        return self.message_fields()


@dataclass(frozen=True, slots=True)
class Order(AgentAction):
    """Place one or more orders."""

    action_type: ClassVar[str] = "order"

    orders: tuple[OrderRequest, ...]
    grouping: Grouping = Grouping.na

    def __post_init__(self):
        _freeze(self, "orders")

    def to_wire(self) -> dict:
        return {
            "type": self.action_type,
            "orders": [o.to_wire() for o in self.orders],
            "grouping": self.grouping.value,
        }


@dataclass(frozen=True, slots=True)
class Cancel(AgentAction):
    action_type: ClassVar[str] = "cancel"

    cancels: tuple[CancelRequest, ...]

    def __post_init__(self):
        _freeze(self, "cancels")

    def to_wire(self) -> dict:
        return {
            "type": self.action_type,
            "cancels": [c.to_wire() for c in self.cancels],
        }


@dataclass(frozen=True, slots=True)
class CancelByCloid(AgentAction):
    action_type: ClassVar[str] = "cancelByCloid"

    cancels: tuple[CancelByCloidRequest, ...]

    def __post_init__(self):
        _freeze(self, "cancels")

    def to_wire(self) -> dict:
        return {
            "type": self.action_type,
            "cancels": [c.to_wire() for c in self.cancels],
        }


@dataclass(frozen=True, slots=True)
class Modify(AgentAction):
    action_type: ClassVar[str] = "modify"

    oid: int | Cloid
    order: OrderRequest

    def to_wire(self) -> dict:
        return {"type": self.action_type, **ModifyRequest(self.oid, self.order).to_wire()}


@dataclass(frozen=True, slots=True)
class BatchModify(AgentAction):
    action_type: ClassVar[str] = "batchModify"

    modifies: tuple[ModifyRequest, ...]

    def __post_init__(self):
        _freeze(self, "modifies")

    def to_wire(self) -> dict:
        return {
            "type": self.action_type,
            "modifies": [m.to_wire() for m in self.modifies],
        }


@dataclass(frozen=True, slots=True)
class UpdateLeverage(AgentAction):
    action_type: ClassVar[str] = "updateLeverage"

    asset: int
    is_cross: bool
    leverage: int

    def to_wire(self) -> dict:
        return {
            "type": self.action_type,
            "asset": check_uint(self.asset, "asset", UINT32_MAX),
            "isCross": check_bool(self.is_cross, "isCross"),
            "leverage": check_uint(self.leverage, "leverage", UINT32_MAX),
        }


@dataclass(frozen=True, slots=True)
class UpdateIsolatedMargin(AgentAction):
    """Add or remove isolated margin.

    ``ntli`` is the signed USD amount scaled by 1e6.
    """

    action_type: ClassVar[str] = "updateIsolatedMargin"

    asset: int
    is_buy: bool
    ntli: int

    def to_wire(self) -> dict:
        return {
            "type": self.action_type,
            "asset": check_uint(self.asset, "asset", UINT32_MAX),
            "isBuy": check_bool(self.is_buy, "isBuy"),
            "ntli": check_int64(self.ntli, "ntli"),
        }


@dataclass(frozen=True, slots=True)
class CreateSubAccount(AgentAction):
    action_type: ClassVar[str] = "createSubAccount"

    name: str

    def to_wire(self) -> dict:
        return {"type": self.action_type, "name": check_str(self.name, "name")}


@dataclass(frozen=True, slots=True)
class SubAccountModify(AgentAction):
    """Rename a sub-account."""

    action_type: ClassVar[str] = "subAccountModify"

    sub_account_user: str
    name: str

    def to_wire(self) -> dict:
        return {
            "type": self.action_type,
            "subAccountUser": check_address(self.sub_account_user, "subAccountUser"),
            "name": check_str(self.name, "name"),
        }


@dataclass(frozen=True, slots=True)
class SubAccountTransfer(AgentAction):
    """Move USD between the master account and a sub-account.

    ``usd`` is scaled by 1e6, e.g. ``1_000_000`` is one dollar.
    """

    action_type: ClassVar[str] = "subAccountTransfer"

    sub_account_user: str
    is_deposit: bool
    usd: int

    def to_wire(self) -> dict:
        return {
            "type": self.action_type,
            "subAccountUser": check_address(self.sub_account_user, "subAccountUser"),
            "isDeposit": check_bool(self.is_deposit, "isDeposit"),
            "usd": check_uint(self.usd, "usd"),
        }


@dataclass(frozen=True, slots=True)
class SetReferrer(AgentAction):
    action_type: ClassVar[str] = "setReferrer"

    code: str

    def to_wire(self) -> dict:
        return {"type": self.action_type, "code": check_str(self.code, "code")}


@dataclass(frozen=True, slots=True)
class ScheduleCancel(AgentAction):
    """Dead man's switch: cancel all open orders at ``time``.

    Without ``time`` the scheduled cancel is removed.
    """

    action_type: ClassVar[str] = "scheduleCancel"

    time: int | None = None

    def to_wire(self) -> dict:
        wire = {"type": self.action_type}
        if self.time is not None:
            wire["time"] = check_uint(self.time, "time")
        return wire


@dataclass(frozen=True, slots=True)
class TwapOrder(AgentAction):
    action_type: ClassVar[str] = "twapOrder"

    asset: int
    is_buy: bool
    sz: str
    reduce_only: bool
    #: Duration in minutes
    minutes: int
    randomize: bool

    def to_wire(self) -> dict:
        return {
            "type": self.action_type,
            "twap": {
                "a": check_uint(self.asset, "asset", UINT32_MAX),
                "b": check_bool(self.is_buy, "isBuy"),
                "s": check_decimal_string(self.sz, "sz"),
                "r": check_bool(self.reduce_only, "reduceOnly"),
                "m": check_uint(self.minutes, "minutes", UINT32_MAX),
                "t": check_bool(self.randomize, "randomize"),
            },
        }


@dataclass(frozen=True, slots=True)
class TwapCancel(AgentAction):
    action_type: ClassVar[str] = "twapCancel"

    asset: int
    twap_id: int

    def to_wire(self) -> dict:
        return {
            "type": self.action_type,
            "a": check_uint(self.asset, "asset", UINT32_MAX),
            "t": check_uint(self.twap_id, "twapId"),
        }


@dataclass(frozen=True, slots=True)
class UsdSend(DirectAction):
    """Send USD to another account on the exchange."""

    action_type: ClassVar[str] = "usdSend"
    primary_type: ClassVar[str] = "HyperliquidTransaction:UsdSend"

    destination: str
    amount: str
    #: Milliseconds, same as the request nonce
    time: int

    def message_fields(self) -> dict:
        return {
            "destination": checksum_address(self.destination, "destination"),
            "amount": check_decimal_string(self.amount, "amount"),
            "time": check_uint(self.time, "time"),
        }


@dataclass(frozen=True, slots=True)
class Withdraw(DirectAction):
    """Withdraw USD through the bridge to an address on the settlement chain."""

    action_type: ClassVar[str] = "withdraw3"
    primary_type: ClassVar[str] = "HyperliquidTransaction:Withdraw"

    destination: str
    amount: str
    time: int

    def message_fields(self) -> dict:
        return {
            "destination": checksum_address(self.destination, "destination"),
            "amount": check_decimal_string(self.amount, "amount"),
            "time": check_uint(self.time, "time"),
        }


@dataclass(frozen=True, slots=True)
class ApproveAgent(DirectAction):
    """Allow another key to trade on behalf of the account.

    The agent can place orders but can not move funds.
    """

    action_type: ClassVar[str] = "approveAgent"
    primary_type: ClassVar[str] = "HyperliquidTransaction:ApproveAgent"

    agent_address: str
    nonce: int
    agent_name: str | None = None

    def message_fields(self) -> dict:
        return {
            "agentAddress": checksum_address(self.agent_address, "agentAddress"),
            "agentName": self.agent_name or "",
            "nonce": check_uint(self.nonce, "nonce"),
        }

    def wire_fields(self) -> dict:
        fields = self.message_fields()
        if self.agent_name is None:
            del fields["agentName"]
        return fields
