"""Order and execution-result models exchanged with the presentation layer."""

from typing import Literal

from pydantic import BaseModel

from models.portfolio import Portfolio
from models.transaction import Transaction, TransactionHistory

TradeStatus = Literal[
    "success",
    "validation_failed",
    "stock_not_found",
    "insufficient_funds",
    "insufficient_margin_call",
    "server_error",
]


class Order(BaseModel):
    """Single order request: who, what, how many."""

    credential: str
    ticker: str
    quantity: int


class TradeResult(BaseModel):
    """Outcome of one order, reported exactly once to the presenter.

    On ``success`` the account fields carry the committed state. For every
    other status they are ``None`` and ``message`` explains the rejection.
    A ``server_error`` means persistence failed, so durable state may not
    match what the caller last saw.
    """

    status: TradeStatus
    message: str = ""
    transaction: Transaction | None = None
    balance: float | None = None
    portfolio: Portfolio | None = None
    transaction_history: TransactionHistory | None = None

    @property
    def ok(self) -> bool:
        return self.status == "success"
