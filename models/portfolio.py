"""Portfolio state models."""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel

from models.stock import Stock


class UserStock(BaseModel):
    """A user's net position in one ticker.

    ``quantity`` is the net of every buy/sell delta and may be negative (a
    short). A position that returns to zero is kept as a closed record.
    """

    ticker: str
    quantity: int = 0
    average_cost: float = 0.0

    @property
    def is_closed(self) -> bool:
        return self.quantity == 0

    def apply_fill(self, delta_quantity: int, price: float) -> None:
        """Add *delta_quantity* at *price* and recompute the cost basis.

        Growing a position (or opening one from flat) averages the fill price
        into the basis. Shrinking toward zero leaves the basis alone. Crossing
        through zero starts a new position at the fill price.
        """
        if delta_quantity == 0:
            return
        old_qty = self.quantity
        new_qty = old_qty + delta_quantity

        if old_qty == 0 or (old_qty > 0) == (delta_quantity > 0):
            total_cost = abs(old_qty) * self.average_cost + abs(delta_quantity) * price
            self.average_cost = total_cost / abs(new_qty)
        elif new_qty != 0 and (new_qty > 0) != (old_qty > 0):
            self.average_cost = price

        self.quantity = new_qty


class Portfolio(BaseModel):
    """Holdings of one user, keyed by ticker (at most one position each)."""

    holdings: dict[str, UserStock] = {}

    def get_user_stock(self, ticker: str) -> UserStock | None:
        return self.holdings.get(ticker)

    def quantity_of(self, ticker: str) -> int:
        position = self.holdings.get(ticker)
        return position.quantity if position is not None else 0

    def update_portfolio(self, stock: Stock, delta_quantity: int, price: float) -> UserStock:
        """Apply a fill for *stock*; the only way positions change."""
        position = self.holdings.get(stock.ticker)
        if position is None:
            position = UserStock(ticker=stock.ticker)
            self.holdings[stock.ticker] = position
        position.apply_fill(delta_quantity, price)
        return position

    def positions(self, include_closed: bool = False) -> list[UserStock]:
        return [
            p for p in self.holdings.values()
            if include_closed or not p.is_closed
        ]

    def market_value(self, prices: Mapping[str, float]) -> float:
        """Signed market value of open positions; unknown prices count as zero."""
        return sum(p.quantity * prices.get(p.ticker, 0.0) for p in self.positions())

    def unrealized_pnl(self, prices: Mapping[str, float]) -> float:
        """Mark-to-market gain/loss of open positions against their basis.

        Tickers without a price are skipped rather than marked at zero.
        """
        return sum(
            p.quantity * (prices[p.ticker] - p.average_cost)
            for p in self.positions()
            if p.ticker in prices
        )
