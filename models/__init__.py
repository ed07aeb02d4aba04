"""Data models for the trading simulator.

Market, trading, storage and CLI code all import their shared types from here.
"""

from models.config import AppConfig, FeedConfig, MarketConfig, StoreConfig
from models.portfolio import Portfolio, UserStock
from models.stock import UNKNOWN_COMPANY, UNKNOWN_INDUSTRY, Stock, StockProfile
from models.trade import Order, TradeResult, TradeStatus
from models.transaction import TradeSide, Transaction, TransactionHistory
from models.user import User

__all__ = [
    # config
    "AppConfig",
    "FeedConfig",
    "MarketConfig",
    "StoreConfig",
    # portfolio
    "Portfolio",
    "UserStock",
    # stock
    "UNKNOWN_COMPANY",
    "UNKNOWN_INDUSTRY",
    "Stock",
    "StockProfile",
    # trade
    "Order",
    "TradeResult",
    "TradeStatus",
    # transaction
    "TradeSide",
    "Transaction",
    "TransactionHistory",
    # user
    "User",
]
