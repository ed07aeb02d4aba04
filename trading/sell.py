"""Sell executor.

Selling shares already held needs no collateral. Selling more than is held
opens or extends a short, which is only allowed when the cash balance covers
the notional value of the whole order.
"""

from __future__ import annotations

from models.stock import Stock
from models.transaction import Transaction, TradeSide
from models.user import User
from trading.engine import TradeExecutor
from utility.errors import InsufficientMarginCallError


class ExecuteSell(TradeExecutor):
    side = TradeSide.SELL

    def _apply(self, user: User, stock: Stock, quantity: int) -> Transaction:
        price = stock.market_price
        proceeds = price * quantity
        held = user.portfolio.quantity_of(stock.ticker)

        if held < quantity and user.balance < proceeds:
            raise InsufficientMarginCallError(
                f"Cannot sell {quantity} shares of {stock.ticker} with only {held} held: "
                f"margin of ${proceeds:.2f} required, available ${user.balance:.2f}."
            )

        user.add_balance(proceeds)
        user.portfolio.update_portfolio(stock, -quantity, price)
        return self._record(stock, quantity)
