"""Read-only queries against the Hyperliquid ``/info`` endpoint.

Each query posts ``{"type": <query>, ...}`` and returns the decoded JSON as is.

Example::

    from eth_hyperliquid.config import HyperliquidConfig
    from eth_hyperliquid.info import Info, candles_to_dataframe

    info = Info(HyperliquidConfig.testnet())
    mids = info.mids()

    candles = info.candle_snapshot("ETH", "15m", start_time=1690540602225, end_time=1690569402225)
    df = candles_to_dataframe(candles)

`See the info endpoint documentation <https://hyperliquid.gitbook.io/hyperliquid-docs/for-developers/api/info-endpoint>`__.
"""

from typing import Any

import pandas as pd
from requests import Session

from eth_hyperliquid.actions import Cloid, check_address
from eth_hyperliquid.client import HyperliquidClient
from eth_hyperliquid.config import HyperliquidConfig
from eth_hyperliquid.constants import INFO_PATH

#: Columns of :py:func:`candles_to_dataframe` output
CANDLE_COLUMNS = ["open", "high", "low", "close", "volume", "trades"]


class Info:
    """Market data and account state queries.

    :param config:
        Endpoints, defaults to testnet

    :param session:
        Shared HTTP session, see :py:func:`eth_hyperliquid.session.create_hyperliquid_session`

    :param client:
        Prebuilt transport, overrides ``config`` and ``session``
    """

    def __init__(
        self,
        config: HyperliquidConfig | None = None,
        session: Session | None = None,
        client: HyperliquidClient | None = None,
    ):
        self.config = config or HyperliquidConfig.testnet()
        self.client = client or HyperliquidClient(self.config.rest_endpoint, session=session)

    def __repr__(self):
        return f"<Info {self.config.rest_endpoint}>"

    def _query(self, request_type: str, **params) -> Any:
        payload = {"type": request_type}
        payload.update({k: v for k, v in params.items() if v is not None})
        return self.client.post(INFO_PATH, payload)

    def metadata(self) -> dict:
        """Perp universe: asset names, size decimals and max leverage.

        The asset index used in orders is the position in ``universe``.
        """
        return self._query("meta")

    def mids(self) -> dict[str, str]:
        """Mid price of every coin."""
        return self._query("allMids")

    def contexts(self) -> list:
        """Universe and per asset context (funding, open interest, mark price)."""
        return self._query("metaAndAssetCtxs")

    def user_state(self, user: str) -> dict:
        """Margin summary and open positions of a user."""
        return self._query("clearinghouseState", user=check_address(user, "user"))

    def user_states(self, users: list[str]) -> list:
        """:py:meth:`user_state` for several users in one call."""
        return self._query("batchClearinghouseStates", users=[check_address(u, "user") for u in users])

    def open_orders(self, user: str) -> list:
        return self._query("openOrders", user=check_address(user, "user"))

    def frontend_open_orders(self, user: str) -> list:
        """Open orders with the extra fields the web frontend shows, e.g. trigger conditions."""
        return self._query("frontendOpenOrders", user=check_address(user, "user"))

    def user_fills(self, user: str) -> list:
        """Most recent fills of a user."""
        return self._query("userFills", user=check_address(user, "user"))

    def user_fills_by_time(self, user: str, start_time: int, end_time: int | None = None) -> list:
        """Fills of a user in a time range.

        :param start_time:
            Milliseconds, inclusive

        :param end_time:
            Milliseconds, inclusive. Defaults to now on the server side.
        """
        return self._query(
            "userFillsByTime",
            user=check_address(user, "user"),
            startTime=start_time,
            endTime=end_time,
        )

    def user_funding(self, user: str, start_time: int, end_time: int | None = None) -> list:
        """Funding payments of a user in a time range."""
        return self._query(
            "userFunding",
            user=check_address(user, "user"),
            startTime=start_time,
            endTime=end_time,
        )

    def funding_history(self, coin: str, start_time: int, end_time: int | None = None) -> list:
        """Historical funding rates of a coin."""
        return self._query("fundingHistory", coin=coin, startTime=start_time, endTime=end_time)

    def l2_book(self, coin: str) -> dict:
        """Order book snapshot, ``levels`` holds bids then asks."""
        return self._query("l2Book", coin=coin)

    def recent_trades(self, coin: str) -> list:
        return self._query("recentTrades", coin=coin)

    def candle_snapshot(self, coin: str, interval: str, start_time: int, end_time: int) -> list:
        """OHLCV candles.

        :param interval:
            E.g. ``1m``, ``15m``, ``1h``, ``1d``

        :return:
            List of candle dicts, see :py:func:`candles_to_dataframe`
        """
        return self._query(
            "candleSnapshot",
            req={
                "coin": coin,
                "interval": interval,
                "startTime": start_time,
                "endTime": end_time,
            },
        )

    def order_status(self, user: str, oid: int | Cloid) -> dict:
        """Status of one order, looked up by exchange order id or client order id."""
        if isinstance(oid, Cloid):
            oid = oid.to_raw()
        return self._query("orderStatus", user=check_address(user, "user"), oid=oid)

    def sub_accounts(self, user: str) -> list | None:
        """Sub-accounts of a master account. ``None`` if there are none."""
        return self._query("subAccounts", user=check_address(user, "user"))

    def spot_meta(self) -> dict:
        """Spot tokens and pairs."""
        return self._query("spotMeta")

    def spot_meta_and_asset_ctxs(self) -> list:
        return self._query("spotMetaAndAssetCtxs")

    def spot_clearinghouse_state(self, user: str) -> dict:
        """Spot token balances of a user."""
        return self._query("spotClearinghouseState", user=check_address(user, "user"))


def candles_to_dataframe(candles: list[dict]) -> pd.DataFrame:
    """Convert :py:meth:`Info.candle_snapshot` output to a DataFrame.

    :return:
        DataFrame indexed by candle open time with columns
        ``open``, ``high``, ``low``, ``close``, ``volume``, ``trades``.
        Prices and volume are floats.
    """
    if not candles:
        return pd.DataFrame(columns=CANDLE_COLUMNS, index=pd.DatetimeIndex([], name="timestamp"))

    df = pd.DataFrame(
        {
            "open": [float(c["o"]) for c in candles],
            "high": [float(c["h"]) for c in candles],
            "low": [float(c["l"]) for c in candles],
            "close": [float(c["c"]) for c in candles],
            "volume": [float(c["v"]) for c in candles],
            "trades": [int(c["n"]) for c in candles],
        },
        index=pd.DatetimeIndex(pd.to_datetime([c["t"] for c in candles], unit="ms"), name="timestamp"),
    )
    return df.sort_index()
