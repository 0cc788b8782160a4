"""Price and size formatting helpers.

Hyperliquid rejects prices and sizes with too much precision:

- Prices can have up to 5 significant figures, but no more than 6 decimals places
- Sizes are rounded to the ``szDecimals`` of the asset,
  see the ``meta`` request of :py:class:`eth_hyperliquid.info.Info`

Both helpers return the string form that goes into
:py:class:`eth_hyperliquid.actions.OrderRequest`.
Trailing zeros are stripped, e.g. ``"1.00"`` becomes ``"1"``. The
exchange hashes the canonical decimal string, so both helpers produce it
directly.
"""

import math

from eth_hyperliquid.actions import UINT64_MAX
from eth_hyperliquid.errors import EncodingError

#: Fixed point scale of the legacy hashing format
HASHING_SCALE = 100_000_000


def _strip_zeros(value: str) -> str:
    if "." in value:
        value = value.rstrip("0").rstrip(".")
    return value


def parse_price(px: float) -> str:
    """Format a price to the accepted number of decimals.

    :raise EncodingError:
        The price is not a positive finite number, or rounds to zero

    Example::

        assert parse_price(1234.5) == "1234.5"
        assert parse_price(1234.56) == "1234.5"
        assert parse_price(0.001234) == "0.001234"
        assert parse_price(1.2345678) == "1.2345"
    """
    if not math.isfinite(px) or px <= 0:
        raise EncodingError(f"Price must be positive: {px}")

    formatted = f"{px:.6f}"

    if formatted.startswith("0."):
        price = _strip_zeros(formatted)
        if price == "0":
            raise EncodingError(f"Price {px} rounds to zero")
        return price

    whole, decimals = formatted.split(".")
    keep = max(5 - len(whole), 0)
    if keep == 0:
        return whole
    return _strip_zeros(f"{whole}.{decimals[:keep]}")


def parse_size(sz: float, sz_decimals: int) -> str:
    """Round a size to the asset size decimals.

    Example::

        assert parse_size(1.001, 3) == "1.001"
        assert parse_size(1.001, 2) == "1"
        assert parse_size(1.0001, 3) == "1"
    """
    return _strip_zeros(f"{sz:.{sz_decimals}f}")


def float_to_int_for_hashing(num: float) -> int:
    """Scale a number to the legacy 1e8 fixed point integer.

    :raise EncodingError:
        The number is not finite or does not fit 64 bits
    """
    if not math.isfinite(num):
        raise EncodingError(f"Cannot hash non-finite number: {num}")
    value = round(num * HASHING_SCALE)
    if not 0 <= value <= UINT64_MAX:
        raise EncodingError(f"Number out of hashing range: {num}")
    return value
