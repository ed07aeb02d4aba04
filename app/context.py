"""Explicit application context.

``build_context`` constructs every component from an ``AppConfig`` and
registers it in the context's ``ServiceRegistry``; components receive their
collaborators as constructor arguments rather than looking up globals.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from app.registry import ServiceRegistry
from app.session import ClientSession
from market.cache import MarketCache
from market.feed import FinnhubPriceFeed, PriceFeed
from market.scheduler import RefreshScheduler
from market.watchlist import load_watchlist
from models.config import AppConfig
from models.trade import Order, TradeResult
from store.user_store import InMemoryUserStore, JsonFileUserStore, UserStore
from trading.buy import ExecuteBuy
from trading.engine import TradePresenter, UserLocks
from trading.sell import ExecuteSell

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything one process needs, wired once at startup."""

    config: AppConfig
    feed: PriceFeed
    cache: MarketCache
    store: UserStore
    buy: ExecuteBuy
    sell: ExecuteSell
    scheduler: RefreshScheduler
    session: ClientSession = field(default_factory=ClientSession)
    registry: ServiceRegistry = field(default_factory=ServiceRegistry)

    def __post_init__(self) -> None:
        self.registry.register(PriceFeed, self.feed)
        self.registry.register(MarketCache, self.cache)
        self.registry.register(UserStore, self.store)
        self.registry.register(ExecuteBuy, self.buy)
        self.registry.register(ExecuteSell, self.sell)
        self.registry.register(RefreshScheduler, self.scheduler)
        self.registry.register(ClientSession, self.session)

    def submit(self, side: str, ticker: str, quantity: int, credential: str | None = None) -> TradeResult:
        """Route an order for the signed-in user (or *credential*) to the right executor."""
        executor = {"buy": self.buy, "sell": self.sell}.get(side.lower())
        if executor is None:
            raise ValueError(f"Unknown order side '{side}'.")
        order = Order(
            credential=credential or self.session.require_credential(),
            ticker=ticker.upper(),
            quantity=quantity,
        )
        return executor.execute(order)


def read_api_key(env_var: str) -> str:
    """Load ``.env`` / ``.env.local`` and return *env_var*.

    Raises ``RuntimeError`` if the variable is unset.
    """
    load_dotenv()
    load_dotenv(".env.local", override=True)
    api_key = os.getenv(env_var)
    if not api_key:
        raise RuntimeError(f"Environment variable {env_var} is not set.")
    return api_key


def build_context(
    config: AppConfig,
    feed: PriceFeed | None = None,
    store: UserStore | None = None,
    presenter: TradePresenter | None = None,
) -> AppContext:
    """Construct and wire all components described by *config*.

    *feed* and *store* override the configured implementations (tests pass
    fakes here).
    """
    if feed is None:
        feed = FinnhubPriceFeed(config.feed, read_api_key(config.feed.api_key_env))
    if store is None:
        if config.store.path:
            store = JsonFileUserStore(config.store.path)
        else:
            logger.info("No store path configured; users are kept in memory.")
            store = InMemoryUserStore()

    cache = MarketCache(feed, load_watchlist(config.market))
    locks = UserLocks()
    return AppContext(
        config=config,
        feed=feed,
        cache=cache,
        store=store,
        buy=ExecuteBuy(cache, store, locks, presenter=presenter),
        sell=ExecuteSell(cache, store, locks, presenter=presenter),
        scheduler=RefreshScheduler(cache, config.market),
    )
