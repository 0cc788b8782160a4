"""Loggable ``Retry()`` adapter for the ``requests`` session.

Hyperliquid throttles by IP weight. When we get throttled, or a node is
flakey, be verbose about the retries instead of stalling quietly.
"""

import logging

from urllib3 import Retry


class LoggingRetry(Retry):
    """``urllib3`` retry policy that logs every retry as a warning.

    Example:

    .. code-block:: python

        from requests.adapters import HTTPAdapter

        retry_policy = LoggingRetry(
            total=5,
            backoff_factor=0.5,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=LoggingRetry.DEFAULT_ALLOWED_METHODS | frozenset(["POST"]),
        )
        session.mount("https://", HTTPAdapter(max_retries=retry_policy))
    """

    def __init__(self, *args, **kwargs):
        self.logger = kwargs.pop("logger", logging.getLogger(__name__))
        super().__init__(*args, **kwargs)

    def new(self, **kwargs):
        # urllib3 clones the policy on every increment, keep our logger
        retry = super().new(**kwargs)
        retry.logger = self.logger
        return retry

    def increment(self, method=None, url=None, response=None, error=None, _pool=None, _stacktrace=None):
        if response:
            status = response.status
            reason = response.reason
        else:
            status = None
            reason = str(error)

        url_shortened = (url or "")[0:96]

        self.logger.warning("Retrying: %s %s (status: %s, reason: %s)", method, url_shortened, status, reason)
        return super().increment(method, url, response, error, _pool, _stacktrace)
