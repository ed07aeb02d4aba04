"""Exception hierarchy for the trading simulator.

Feed errors are raised by ``market.feed`` implementations and handled inside
``market.cache``; the remaining errors are raised while executing an order and
are converted into a ``TradeResult`` by the trade executors.
"""

from __future__ import annotations


class TradingSimulatorError(Exception):
    """Base class for every error raised by the simulator."""


# ------------------------------------------------------------------
# Market data
# ------------------------------------------------------------------

class FeedError(TradingSimulatorError):
    """Base class for failures talking to the market-data provider."""

    def __init__(self, ticker: str, message: str = "") -> None:
        self.ticker = ticker
        super().__init__(message or f"Feed request failed for {ticker}.")


class RateLimitExceeded(FeedError):
    """The provider refused the request because of its rate limit."""

    def __init__(self, ticker: str) -> None:
        super().__init__(ticker, f"Rate limit exceeded while fetching {ticker}.")


class TransientFeedError(FeedError):
    """Timeout, transport failure, or malformed response for one ticker."""


# ------------------------------------------------------------------
# Trading
# ------------------------------------------------------------------

class UserValidationError(TradingSimulatorError):
    """The credential does not resolve to a known user."""


class OrderValidationError(TradingSimulatorError):
    """The order itself is malformed (e.g. non-positive quantity)."""


class StockNotFoundError(TradingSimulatorError):
    """The ticker has no cached market snapshot."""

    def __init__(self, ticker: str) -> None:
        self.ticker = ticker
        super().__init__(f"No market data for ticker {ticker}.")


class InsufficientFundsError(TradingSimulatorError):
    """Cash balance does not cover the cost of a buy."""


class InsufficientMarginCallError(TradingSimulatorError):
    """Cash balance does not cover the notional value of an uncovered sell."""


class PersistenceError(TradingSimulatorError):
    """The user store failed to save the updated user."""
