"""Order execution against the market cache and the user store."""

from trading.buy import ExecuteBuy
from trading.engine import TradeExecutor, TradePresenter, UserLocks
from trading.sell import ExecuteSell

__all__ = [
    "ExecuteBuy",
    "ExecuteSell",
    "TradeExecutor",
    "TradePresenter",
    "UserLocks",
]
