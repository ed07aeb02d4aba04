"""Ledger models: Transaction and TransactionHistory."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TradeSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class Transaction(BaseModel):
    """Single executed fill. Immutable once recorded."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    ticker: str
    quantity: int = Field(gt=0)
    price: float = Field(ge=0.0)
    side: TradeSide

    @property
    def total(self) -> float:
        return self.price * self.quantity


class TransactionHistory(BaseModel):
    """Append-only, time-ordered ledger of a user's transactions."""

    transactions: list[Transaction] = []

    def add_transaction(self, transaction: Transaction) -> None:
        self.transactions.append(transaction)

    def for_ticker(self, ticker: str) -> list[Transaction]:
        return [t for t in self.transactions if t.ticker == ticker]

    def __len__(self) -> int:
        return len(self.transactions)
