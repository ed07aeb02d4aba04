"""Buy executor."""

from __future__ import annotations

from models.stock import Stock
from models.transaction import Transaction, TradeSide
from models.user import User
from trading.engine import TradeExecutor
from utility.errors import InsufficientFundsError


class ExecuteBuy(TradeExecutor):
    """Buys at the cached price if the balance covers the full cost."""

    side = TradeSide.BUY

    def _apply(self, user: User, stock: Stock, quantity: int) -> Transaction:
        price = stock.market_price
        cost = price * quantity
        if user.balance < cost:
            raise InsufficientFundsError(
                f"Insufficient funds to buy {quantity} shares of {stock.ticker} "
                f"at ${price:.2f} (cost ${cost:.2f}, available ${user.balance:.2f})."
            )

        user.deduct_balance(cost)
        user.portfolio.update_portfolio(stock, quantity, price)
        return self._record(stock, quantity)
