"""JSON-over-HTTP transport for the ``/info`` and ``/exchange`` endpoints."""

import logging
from typing import Any

import requests
from requests import Session

from eth_hyperliquid.constants import DEFAULT_HTTP_TIMEOUT
from eth_hyperliquid.errors import TransportError
from eth_hyperliquid.session import create_hyperliquid_session

logger = logging.getLogger(__name__)


class HyperliquidClient:
    """POST JSON bodies to a Hyperliquid REST node.

    :param base_url:
        E.g. ``https://api.hyperliquid.xyz``, see :py:class:`eth_hyperliquid.config.HyperliquidConfig`

    :param session:
        Use :py:func:`eth_hyperliquid.session.create_hyperliquid_session`.
        A default rate limited session is created if not given.

    :param timeout:
        HTTP request timeout in seconds
    """

    def __init__(
        self,
        base_url: str,
        session: Session | None = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or create_hyperliquid_session()
        self.timeout = timeout

    def __repr__(self):
        return f"<HyperliquidClient {self.base_url}>"

    def post(self, path: str, payload: dict) -> Any:
        """POST a JSON body and return the decoded reply.

        :param path:
            ``/info`` or ``/exchange``

        :param payload:
            JSON serialisable body

        :return:
            Decoded JSON response

        :raise TransportError:
            Connection failure, HTTP error status or a reply that is not JSON
        """
        url = f"{self.base_url}{path}"

        logger.debug("Making request to %s with payload: %s", url, payload)

        try:
            response = self.session.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            body = e.response.text if e.response is not None else ""
            raise TransportError(f"{url} replied {e}: {body[:200]}") from e
        except requests.RequestException as e:
            raise TransportError(f"Request to {url} failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"{url} did not reply with JSON: {response.text[:200]!r}") from e
