"""Shared execution flow for buy and sell orders.

Every order goes through the same steps:

1. Validate the order (positive quantity).
2. Take the per-user lock, so two orders for one account never interleave.
3. Load a private copy of the user and look up the cached snapshot.
4. Apply the side-specific checks and mutations to that copy.
5. Save the copy. Only a successful save commits the trade; on failure the
   copy is dropped and the stored user is untouched.

Exactly one ``TradeResult`` is produced per order. It is returned and, when a
presenter is attached, passed to ``TradePresenter.present``.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Protocol

from market.cache import MarketCache
from models.stock import Stock
from models.trade import Order, TradeResult
from models.transaction import Transaction, TradeSide
from models.user import User
from store.user_store import UserStore
from utility.errors import (
    InsufficientFundsError,
    InsufficientMarginCallError,
    OrderValidationError,
    PersistenceError,
    StockNotFoundError,
    UserValidationError,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TradePresenter(Protocol):
    def present(self, result: TradeResult) -> None:
        ...


class UserLocks:
    """One re-usable lock per credential, created on first use."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def for_user(self, credential: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(credential)
            if lock is None:
                lock = threading.Lock()
                self._locks[credential] = lock
            return lock


class TradeExecutor(ABC):
    """Base class for the buy and sell executors.

    Subclasses set ``side`` and implement ``_apply``, which checks business
    rules and mutates the working copy of the user. Every executor that
    trades against the same store must be given the same ``UserLocks``.
    """

    side: TradeSide

    def __init__(
        self,
        cache: MarketCache,
        store: UserStore,
        locks: UserLocks,
        presenter: TradePresenter | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._cache = cache
        self._store = store
        self._presenter = presenter
        self._locks = locks
        self._clock = clock

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def execute(self, order: Order) -> TradeResult:
        """Execute *order* and report its single outcome."""
        result = self._execute(order)
        if result.ok:
            logger.info(
                "%s %d %s @ %.2f for '%s'; balance now %.2f",
                self.side.value,
                order.quantity,
                order.ticker,
                result.transaction.price,
                order.credential,
                result.balance,
            )
        else:
            logger.info(
                "%s %d %s for '%s' rejected (%s): %s",
                self.side.value,
                order.quantity,
                order.ticker,
                order.credential,
                result.status,
                result.message,
            )
        if self._presenter is not None:
            self._presenter.present(result)
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _execute(self, order: Order) -> TradeResult:
        try:
            if order.quantity <= 0:
                raise OrderValidationError(
                    f"Order quantity must be positive, got {order.quantity} for {order.ticker}."
                )
            with self._locks.for_user(order.credential):
                user = self._store.load(order.credential)
                stock = self._cache.get_stock(order.ticker)
                if stock is None:
                    raise StockNotFoundError(order.ticker)

                transaction = self._apply(user, stock, order.quantity)
                user.transaction_history.add_transaction(transaction)
                self._store.save(user)
        except (UserValidationError, OrderValidationError) as exc:
            return TradeResult(status="validation_failed", message=str(exc))
        except StockNotFoundError as exc:
            return TradeResult(status="stock_not_found", message=str(exc))
        except InsufficientFundsError as exc:
            return TradeResult(status="insufficient_funds", message=str(exc))
        except InsufficientMarginCallError as exc:
            return TradeResult(status="insufficient_margin_call", message=str(exc))
        except PersistenceError as exc:
            logger.error("Trade for '%s' not committed: %s", order.credential, exc)
            return TradeResult(status="server_error", message=str(exc))

        return TradeResult(
            status="success",
            transaction=transaction,
            balance=user.balance,
            portfolio=user.portfolio,
            transaction_history=user.transaction_history,
        )

    def _record(self, stock: Stock, quantity: int) -> Transaction:
        return Transaction(
            timestamp=self._clock(),
            ticker=stock.ticker,
            quantity=quantity,
            price=stock.market_price,
            side=self.side,
        )

    @abstractmethod
    def _apply(self, user: User, stock: Stock, quantity: int) -> Transaction:
        """Check business rules, mutate *user*, and return the ledger entry.

        Must raise before touching *user* when the order is rejected.
        """
