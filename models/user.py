"""User account model."""

from __future__ import annotations

from pydantic import BaseModel, Field

from models.portfolio import Portfolio
from models.transaction import TransactionHistory


class User(BaseModel):
    """Account state loaded from and saved to a ``UserStore``.

    The balance is a plain float; keeping it non-negative after a trade is the
    trade executors' job, not the model's.
    """

    credential: str
    username: str = ""
    balance: float = 0.0
    portfolio: Portfolio = Field(default_factory=Portfolio)
    transaction_history: TransactionHistory = Field(default_factory=TransactionHistory)

    def add_balance(self, amount: float) -> None:
        self.balance += amount

    def deduct_balance(self, amount: float) -> None:
        self.balance -= amount
