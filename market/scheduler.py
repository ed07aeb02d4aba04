"""Background polling of the market cache.

Cycles run ``refresh_all`` until one completes, so profiles get resolved;
after that they run ``refresh_prices`` unless ``profiles_on_every_refresh`` is
set. A rate-limited cycle is not retried straight away: the next cycle waits
for the regular interval plus ``rate_limit_cooldown_seconds``.
"""

from __future__ import annotations

import logging
import threading

from market.cache import MarketCache
from models.config import MarketConfig
from utility.errors import RateLimitExceeded

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Runs refresh cycles on a daemon thread until stopped."""

    def __init__(self, cache: MarketCache, config: MarketConfig) -> None:
        self._cache = cache
        self._interval = config.refresh_interval_seconds
        self._cooldown = config.rate_limit_cooldown_seconds
        self._profiles_every_cycle = config.profiles_on_every_refresh
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._cycles = 0
        self._profiles_pending = True
        self.rate_limited_cycles = 0

    @property
    def cycles(self) -> int:
        return self._cycles

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_cycle(self) -> float:
        """Run one refresh and return the delay before the next one."""
        full = self._profiles_pending or self._profiles_every_cycle
        self._cycles += 1
        try:
            if full:
                self._cache.refresh_all()
            else:
                self._cache.refresh_prices()
        except RateLimitExceeded as exc:
            self.rate_limited_cycles += 1
            logger.warning(
                "Refresh cycle %d rate-limited at %s; backing off %.0fs.",
                self._cycles,
                exc.ticker,
                self._interval + self._cooldown,
            )
            return self._interval + self._cooldown
        if full:
            self._profiles_pending = False
        return self._interval

    def run(self, max_cycles: int | None = None) -> None:
        """Run cycles on the calling thread until stopped or *max_cycles* is reached."""
        completed = 0
        while not self._stop.is_set():
            try:
                delay = self.run_cycle()
            except Exception:
                logger.exception("Refresh cycle %d failed; retrying next interval.", self._cycles)
                delay = self._interval
            completed += 1
            if max_cycles is not None and completed >= max_cycles:
                break
            if self._stop.wait(delay):
                break

    def start(self) -> None:
        if self.running:
            raise RuntimeError("Refresh scheduler is already running.")
        self._stop.clear()
        self._thread = threading.Thread(
            target=self.run,
            name="market-refresh",
            daemon=True,
        )
        self._thread.start()
        logger.info("Market refresh scheduler started (every %.0fs).", self._interval)

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Market refresh scheduler stopped after %d cycle(s).", self._cycles)
