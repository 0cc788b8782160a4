"""HTTP session management for the Hyperliquid REST API.

Session creation with retry logic and rate limiting,
shared by :py:class:`eth_hyperliquid.info.Info` and
:py:class:`eth_hyperliquid.exchange.Exchange`.

Rate limiting is thread-safe using SQLite backend, so the session can be
shared across multiple threads.
"""

import logging
from pathlib import Path

from pyrate_limiter import SQLiteBucket
from requests import Session
from requests_ratelimiter import LimiterAdapter

from eth_hyperliquid.constants import (
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_REQUESTS_PER_SECOND,
    DEFAULT_RETRIES,
    HYPERLIQUID_RATE_LIMIT_SQLITE_DATABASE,
)
from eth_hyperliquid.logging_retry import LoggingRetry

logger = logging.getLogger(__name__)


def create_hyperliquid_session(
    retries: int = DEFAULT_RETRIES,
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
    requests_per_second: float = DEFAULT_REQUESTS_PER_SECOND,
    pool_maxsize: int = 32,
    rate_limit_db_path: Path = HYPERLIQUID_RATE_LIMIT_SQLITE_DATABASE,
    retry_exchange_requests: bool = False,
) -> Session:
    """Create a requests Session configured for the Hyperliquid API.

    - Rate limiting to respect Hyperliquid API throttling (thread-safe via SQLite)
    - Retry logic for transient errors using exponential backoff

    - `See rate limits here <https://hyperliquid.gitbook.io/hyperliquid-docs/for-developers/api/rate-limits-and-user-limits>`__.

    Example::

        from eth_hyperliquid.session import create_hyperliquid_session

        session = create_hyperliquid_session()
        response = session.post("https://api.hyperliquid.xyz/info", json={"type": "allMids"})

    :param retries:
        Maximum number of retry attempts for failed requests
    :param backoff_factor:
        Backoff factor for exponential retry delays
    :param requests_per_second:
        Maximum requests per second to avoid rate limiting.
        Defaults to 1.0 based on Hyperliquid's 1200 weight/minute limit
        with most info endpoints having weight 20.
    :param pool_maxsize:
        Maximum number of connections to keep in the connection pool.
    :param rate_limit_db_path:
        Path to SQLite database for storing rate limit state.
        Defaults to ``~/.tradingstrategy/hyperliquid/rate-limit.sqlite``.
    :param retry_exchange_requests:
        Also retry ``POST`` requests.

        Both ``/info`` and ``/exchange`` are ``POST``. Retrying a signed
        ``/exchange`` call is safe only as long as the exchange deduplicates
        the nonce, so this is off by default and only info calls should use
        a session with it enabled.
    :return:
        Configured requests Session with rate limiting and retry logic
    """
    rate_limit_db_path.parent.mkdir(parents=True, exist_ok=True)

    session = Session()

    allowed_methods = LoggingRetry.DEFAULT_ALLOWED_METHODS
    if retry_exchange_requests:
        allowed_methods = allowed_methods | frozenset(["POST"])

    retry_policy = LoggingRetry(
        total=retries,
        backoff_factor=backoff_factor,
        status_forcelist=[429, 500, 502, 503, 504],
        respect_retry_after_header=True,
        logger=logger,
        allowed_methods=allowed_methods,
    )

    # SQLite bucket keeps the limit shared between all threads using this session
    adapter = LimiterAdapter(
        per_second=requests_per_second,
        max_retries=retry_policy,
        pool_connections=pool_maxsize,
        pool_maxsize=pool_maxsize,
        bucket_class=SQLiteBucket,
        bucket_kwargs={"path": str(rate_limit_db_path)},
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session
