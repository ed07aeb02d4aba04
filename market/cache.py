"""Process-wide cache of market snapshots.

``MarketCache`` is the one piece of shared mutable state in the simulator: a
background refresher writes it while trade executors read it. Each ticker's
``Stock`` is immutable and is replaced under a lock, so a reader sees either
the previous snapshot or the new one, never a mix. Nothing is atomic across
tickers; a reader may observe a refresh that is halfway through the
watch-list.
"""

from __future__ import annotations

import logging
import math
import threading
from collections.abc import Callable, Sequence
from datetime import datetime, timezone

from market.feed import PriceFeed
from models.stock import Stock, StockProfile
from utility.errors import FeedError, RateLimitExceeded, TransientFeedError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MarketCache:
    """Latest known price and profile for every ticker on the watch-list."""

    def __init__(
        self,
        feed: PriceFeed,
        tickers: Sequence[str],
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._feed = feed
        self._tickers = tuple(tickers)
        self._clock = clock
        self._lock = threading.Lock()
        self._stocks: dict[str, Stock] = {}
        self._last_refreshed: datetime | None = None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def tickers(self) -> tuple[str, ...]:
        return self._tickers

    @property
    def last_refreshed(self) -> datetime | None:
        """Completion time of the last refresh that was not aborted."""
        return self._last_refreshed

    def get_stock(self, ticker: str) -> Stock | None:
        """Return the cached snapshot for *ticker*, or ``None``. Never hits the network."""
        with self._lock:
            return self._stocks.get(ticker)

    def snapshot(self) -> dict[str, Stock]:
        with self._lock:
            return dict(self._stocks)

    def prices(self) -> dict[str, float]:
        with self._lock:
            return {ticker: stock.market_price for ticker, stock in self._stocks.items()}

    def __contains__(self, ticker: object) -> bool:
        with self._lock:
            return ticker in self._stocks

    def __len__(self) -> int:
        with self._lock:
            return len(self._stocks)

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    def refresh_all(self) -> dict[str, Stock]:
        """Fetch quote and profile for every ticker and return the whole cache.

        A profile failure keeps the ticker's previous profile (unresolved for
        a new ticker). A transient quote failure skips the ticker this cycle.
        ``RateLimitExceeded`` on a quote aborts the batch and propagates;
        tickers already written keep their new snapshot.
        """
        logger.info("Refreshing %d ticker(s) with profiles.", len(self._tickers))
        updated = 0
        for ticker in self._tickers:
            price = self._fetch_price(ticker)
            if price is None:
                continue
            profile = self._fetch_profile(ticker)
            self._store(ticker, price, profile, keep_profile=profile is None)
            updated += 1

        self._last_refreshed = self._clock()
        logger.info("Refresh complete: %d/%d ticker(s) updated.", updated, len(self._tickers))
        return self.snapshot()

    def refresh_prices(self) -> dict[str, float]:
        """Fetch quotes only and return the current price of every cached ticker.

        Same skip/abort rules as ``refresh_all``. A ticker seen for the first
        time is cached with an unresolved profile.
        """
        logger.info("Refreshing prices for %d ticker(s).", len(self._tickers))
        updated = 0
        for ticker in self._tickers:
            price = self._fetch_price(ticker)
            if price is None:
                continue
            self._store(ticker, price, None, keep_profile=True)
            updated += 1

        self._last_refreshed = self._clock()
        logger.info("Price refresh complete: %d/%d ticker(s) updated.", updated, len(self._tickers))
        return self.prices()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _fetch_price(self, ticker: str) -> float | None:
        try:
            price = self._feed.fetch_quote(ticker)
            if not math.isfinite(price) or price < 0:
                raise TransientFeedError(ticker, f"Invalid price {price} for {ticker}.")
            return price
        except RateLimitExceeded:
            logger.warning("Rate limit hit on quote for %s; aborting refresh.", ticker)
            raise
        except TransientFeedError as exc:
            logger.warning("Skipping %s this cycle: %s", ticker, exc)
            return None

    def _fetch_profile(self, ticker: str) -> StockProfile | None:
        try:
            return self._feed.fetch_profile(ticker)
        except FeedError as exc:
            logger.warning("Profile unavailable for %s: %s", ticker, exc)
            return None

    def _store(
        self,
        ticker: str,
        price: float,
        profile: StockProfile | None,
        keep_profile: bool,
    ) -> None:
        with self._lock:
            existing = self._stocks.get(ticker)
            if existing is not None and keep_profile:
                stock = existing.with_price(price)
            else:
                stock = Stock(ticker=ticker, market_price=price, profile=profile)
            self._stocks[ticker] = stock
        logger.debug("Cached %s at %.4f (%s)", ticker, price, stock.company)
