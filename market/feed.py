"""Price feed boundary and the Finnhub REST implementation.

Only this module knows about HTTP, JSON bodies and API keys. Callers see a
price, a ``StockProfile``, or one of the ``FeedError`` subclasses.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Protocol

import requests

from models.config import FeedConfig
from models.stock import StockProfile
from utility.errors import RateLimitExceeded, TransientFeedError

logger = logging.getLogger(__name__)

# Finnhub signals throttling with a plain HTTP 429.
RATE_LIMIT_STATUS = 429


class PriceFeed(Protocol):
    def fetch_quote(self, ticker: str) -> float:
        """Current price of *ticker*.

        Raises ``RateLimitExceeded`` or ``TransientFeedError``.
        """
        ...

    def fetch_profile(self, ticker: str) -> StockProfile:
        """Company name and industry of *ticker*.

        Raises ``RateLimitExceeded`` or ``TransientFeedError``.
        """
        ...


class FinnhubPriceFeed:
    """``PriceFeed`` backed by the Finnhub ``/quote`` and ``/stock/profile2`` endpoints."""

    def __init__(
        self,
        config: FeedConfig,
        api_key: str,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = config.base_url.rstrip("/")
        self._timeout = config.timeout_seconds
        self._api_key = api_key
        self._session = session or requests.Session()

    def fetch_quote(self, ticker: str) -> float:
        body = self._get("/quote", ticker)
        try:
            price = float(body["c"])
        except (KeyError, TypeError, ValueError) as exc:
            raise TransientFeedError(ticker, f"Malformed quote for {ticker}: {body!r}") from exc
        if not math.isfinite(price) or price < 0:
            raise TransientFeedError(ticker, f"Invalid price {price} for {ticker}.")
        logger.debug("Fetched price for %s: %.4f", ticker, price)
        return price

    def fetch_profile(self, ticker: str) -> StockProfile:
        body = self._get("/stock/profile2", ticker)
        if not body:
            # Unknown symbols come back as an empty object.
            raise TransientFeedError(ticker, f"Empty profile for {ticker}.")
        return StockProfile(
            company=body.get("name") or None,
            industry=body.get("finnhubIndustry") or None,
        )

    def close(self) -> None:
        self._session.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get(self, path: str, ticker: str) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        logger.debug("GET %s symbol=%s", url, ticker)
        try:
            response = self._session.get(
                url,
                params={"symbol": ticker, "token": self._api_key},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            # Exception text may contain the request URL and token.
            raise TransientFeedError(
                ticker, f"Request to {path} failed for {ticker}: {type(exc).__name__}"
            ) from exc

        if response.status_code == RATE_LIMIT_STATUS:
            raise RateLimitExceeded(ticker)
        if not response.ok:
            raise TransientFeedError(
                ticker,
                f"{path} returned HTTP {response.status_code} for {ticker}.",
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise TransientFeedError(ticker, f"Non-JSON body from {path} for {ticker}.") from exc
        if not isinstance(body, dict):
            raise TransientFeedError(ticker, f"Unexpected body from {path} for {ticker}.")
        return body
