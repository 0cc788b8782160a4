"""Trading and account actions against the Hyperliquid ``/exchange`` endpoint.

:py:class:`Exchange` wires the signing pipeline to the transport. For each call:

1. Take a nonce from the clock, see :py:class:`eth_hyperliquid.nonce.NonceGenerator`
2. Build the action, see :py:mod:`eth_hyperliquid.actions`
3. Sign it in the mode the action family requires, see :py:mod:`eth_hyperliquid.signing`
4. Assemble the request and ``POST`` it

Example::

    from eth_account import Account

    from eth_hyperliquid.actions import Limit, OrderRequest, Tif
    from eth_hyperliquid.chain import Chain, normalise_chain
    from eth_hyperliquid.exchange import Exchange

    exchange = Exchange(Account.from_key(private_key), Chain.arbitrum_testnet)

    result = exchange.place_order(
        OrderRequest(
            asset=4,
            is_buy=True,
            limit_px="1700",
            sz="0.01",
            reduce_only=False,
            order_type=Limit(Tif.gtc),
        )
    )

To build signed requests without sending them, use
:py:meth:`Exchange.sign_agent_action` and :py:meth:`Exchange.sign_direct_action`.

.. note ::

    Nonces are milliseconds. Two calls within the same millisecond
    from the same signer get the same nonce and the exchange rejects the second.
"""

import logging
from typing import Any, Callable

from eth_account.signers.local import LocalAccount
from requests import Session

from eth_hyperliquid.actions import (
    AgentAction,
    ApproveAgent,
    BatchModify,
    Cancel,
    CancelByCloid,
    CancelByCloidRequest,
    CancelRequest,
    Cloid,
    CreateSubAccount,
    DirectAction,
    Grouping,
    Modify,
    ModifyRequest,
    Order,
    OrderRequest,
    ScheduleCancel,
    SetReferrer,
    SubAccountModify,
    SubAccountTransfer,
    TwapCancel,
    TwapOrder,
    UpdateIsolatedMargin,
    UpdateLeverage,
    UsdSend,
    Withdraw,
)
from eth_hyperliquid.chain import Chain, normalise_chain
from eth_hyperliquid.client import HyperliquidClient
from eth_hyperliquid.config import HyperliquidConfig
from eth_hyperliquid.connection_id import action_connection_id
from eth_hyperliquid.constants import EXCHANGE_PATH
from eth_hyperliquid.errors import ExchangeAPIError
from eth_hyperliquid.nonce import Clock, NonceGenerator
from eth_hyperliquid.request import ExchangeRequest, build_request
from eth_hyperliquid.signing import ChainScopedSigner

logger = logging.getLogger(__name__)

#: Scale of USD amounts in margin and sub-account transfers, 1.0 USD = 1_000_000
USD_SCALE = 1_000_000


class Exchange:
    """Sign and send exchange actions for one account on one chain.

    Trading calls (orders, cancels, modifications, leverage, margin,
    scheduled cancel, TWAP) act for ``vault_address`` when one is given.
    Account administration and direct mode transfers always act for the signer.

    :param account:
        Signer, e.g. ``Account.from_key(private_key)``.
        Can also be an approved agent key, see :py:meth:`approve_agent`.

    :param chain:
        Chain the signatures are scoped to

    :param config:
        Endpoints, defaults to the endpoints matching ``chain``

    :param session:
        Shared HTTP session, see :py:func:`eth_hyperliquid.session.create_hyperliquid_session`

    :param clock:
        Nonce time source, defaults to the system clock

    :param vault_address:
        Vault or sub-account to trade for
    """

    def __init__(
        self,
        account: LocalAccount,
        chain: Chain | str,
        config: HyperliquidConfig | None = None,
        session: Session | None = None,
        clock: Clock | None = None,
        vault_address: str | None = None,
        client: HyperliquidClient | None = None,
    ):
        self.chain = normalise_chain(chain, "agent")
        self.signer = ChainScopedSigner(account, self.chain)
        self.config = config or HyperliquidConfig.for_chain(self.chain)
        self.client = client or HyperliquidClient(self.config.rest_endpoint, session=session)
        self.nonces = NonceGenerator(clock)
        self.vault_address = vault_address

    def __repr__(self):
        return f"<Exchange {self.signer.address} on {self.chain.name}, {self.config.rest_endpoint}>"

    @property
    def address(self) -> str:
        return self.signer.address

    def sign_agent_action(self, action: AgentAction, vault_address: str | None = None) -> ExchangeRequest:
        """Build a signed request for an agent mode action.

        :param vault_address:
            Vault to act for. Hashed into the connection id and carried in the request.

        :raise EncodingError:
            The action does not serialise

        :raise ClockError:
            No valid nonce

        :raise SigningError:
            The account failed
        """
        nonce = self.nonces.next_nonce()
        connection_id = action_connection_id(action, nonce, vault_address)
        signature = self.signer.sign_agent(connection_id)
        return build_request(action, nonce, signature, vault_address)

    def sign_direct_action(self, build_action: Callable[[int], DirectAction]) -> ExchangeRequest:
        """Build a signed request for a direct mode action.

        Direct mode actions carry the nonce in their own signed payload
        (``time`` or ``nonce``), so the action is built from the nonce.

        Example::

            request = exchange.sign_direct_action(
                lambda nonce: UsdSend(destination=dest, amount="1", time=nonce)
            )

        :param build_action:
            Takes the nonce and returns the action

        :raise ChainNotSupported:
            The chain has no logical network for direct signing
        """
        nonce = self.nonces.next_nonce()
        action = build_action(nonce)
        payload = self.signer.build_direct_payload(action)
        signature = self.signer.sign_direct(payload)
        return build_request(payload, nonce, signature)

    def post_request(self, request: ExchangeRequest) -> dict:
        """Send a signed request.

        :return:
            The ``response`` part of an ``ok`` reply.
            Per order errors, e.g. insufficient margin, are reported inside
            ``data.statuses`` and are not raised.

        :raise ExchangeAPIError:
            The exchange rejected the whole request
        """
        reply = self.client.post(EXCHANGE_PATH, request.to_wire())
        if not isinstance(reply, dict) or reply.get("status") != "ok":
            message = reply.get("response") if isinstance(reply, dict) else reply
            logger.error("Exchange rejected %s: %s", request.action.to_wire().get("type"), message)
            raise ExchangeAPIError(f"Exchange rejected the request: {message}", response=reply)
        return reply.get("response", {})

    def _agent(self, action: AgentAction, vault_address: str | None = None) -> Any:
        return self.post_request(self.sign_agent_action(action, vault_address))

    def _direct(self, build_action: Callable[[int], DirectAction]) -> Any:
        return self.post_request(self.sign_direct_action(build_action))

    #
    # Orders
    #

    def place_order(self, order: OrderRequest) -> dict:
        """Place one order."""
        return self.place_orders([order])

    def place_orders(self, orders: list[OrderRequest], grouping: Grouping = Grouping.na) -> dict:
        """Place several orders in one action.

        :param grouping:
            :py:attr:`Grouping.normal_tpsl` attaches trigger orders to the first order,
            :py:attr:`Grouping.position_tpsl` to the current position
        """
        return self._agent(Order(orders=tuple(orders), grouping=grouping), self.vault_address)

    def normal_tpsl(
        self,
        order: OrderRequest,
        take_profit: OrderRequest | None = None,
        stop_loss: OrderRequest | None = None,
    ) -> dict:
        """Place an entry order with attached take profit and stop loss.

        The trigger orders only become active once the entry fills.
        """
        orders = [order] + [o for o in (take_profit, stop_loss) if o is not None]
        return self.place_orders(orders, grouping=Grouping.normal_tpsl)

    def cancel_order(self, asset: int, oid: int) -> dict:
        return self.cancel_orders([CancelRequest(asset=asset, oid=oid)])

    def cancel_orders(self, cancels: list[CancelRequest]) -> dict:
        return self._agent(Cancel(cancels=tuple(cancels)), self.vault_address)

    def cancel_order_by_cloid(self, asset: int, cloid: Cloid) -> dict:
        """Cancel an order by its client order id."""
        return self._agent(
            CancelByCloid(cancels=(CancelByCloidRequest(asset=asset, cloid=cloid),)),
            self.vault_address,
        )

    def modify_order(self, oid: int | Cloid, order: OrderRequest) -> dict:
        """Replace an open order."""
        return self._agent(Modify(oid=oid, order=order), self.vault_address)

    def batch_modify_orders(self, modifies: list[ModifyRequest]) -> dict:
        return self._agent(BatchModify(modifies=tuple(modifies)), self.vault_address)

    def schedule_cancel(self, time: int | None = None) -> dict:
        """Cancel all open orders at ``time`` milliseconds. ``None`` removes the schedule."""
        return self._agent(ScheduleCancel(time=time), self.vault_address)

    def twap_order(
        self,
        asset: int,
        is_buy: bool,
        sz: str,
        minutes: int,
        reduce_only: bool = False,
        randomize: bool = False,
    ) -> dict:
        """Execute ``sz`` in slices over ``minutes``."""
        action = TwapOrder(
            asset=asset,
            is_buy=is_buy,
            sz=sz,
            reduce_only=reduce_only,
            minutes=minutes,
            randomize=randomize,
        )
        return self._agent(action, self.vault_address)

    def twap_cancel(self, asset: int, twap_id: int) -> dict:
        return self._agent(TwapCancel(asset=asset, twap_id=twap_id), self.vault_address)

    #
    # Margin
    #

    def update_leverage(self, asset: int, leverage: int, is_cross: bool = True) -> dict:
        return self._agent(UpdateLeverage(asset=asset, is_cross=is_cross, leverage=leverage), self.vault_address)

    def update_isolated_margin(self, asset: int, amount: float) -> dict:
        """Add (positive) or remove (negative) isolated margin.

        :param amount:
            USD
        """
        ntli = round(amount * USD_SCALE)
        return self._agent(UpdateIsolatedMargin(asset=asset, is_buy=True, ntli=ntli), self.vault_address)

    #
    # Transfers, signed in direct mode
    #

    def usd_transfer(self, destination: str, amount: str) -> dict:
        """Send USD to another account.

        :param amount:
            Decimal string, e.g. ``"1.5"``
        """
        return self._direct(lambda nonce: UsdSend(destination=destination, amount=amount, time=nonce))

    def withdraw(self, destination: str, amount: str) -> dict:
        """Withdraw USD through the bridge."""
        return self._direct(lambda nonce: Withdraw(destination=destination, amount=amount, time=nonce))

    def approve_agent(self, agent_address: str, agent_name: str | None = None) -> dict:
        """Authorise an agent key to trade for this account."""
        return self._direct(
            lambda nonce: ApproveAgent(agent_address=agent_address, nonce=nonce, agent_name=agent_name)
        )

    #
    # Account administration
    #

    def create_sub_account(self, name: str) -> dict:
        return self._agent(CreateSubAccount(name=name))

    def sub_account_modify(self, sub_account_user: str, name: str) -> dict:
        """Rename a sub-account."""
        return self._agent(SubAccountModify(sub_account_user=sub_account_user, name=name))

    def sub_account_transfer(self, sub_account_user: str, is_deposit: bool, usd: float) -> dict:
        """Move USD between this account and a sub-account.

        :param is_deposit:
            ``True`` moves funds into the sub-account
        """
        action = SubAccountTransfer(
            sub_account_user=sub_account_user,
            is_deposit=is_deposit,
            usd=round(usd * USD_SCALE),
        )
        return self._agent(action)

    def set_referrer(self, code: str) -> dict:
        return self._agent(SetReferrer(code=code))
