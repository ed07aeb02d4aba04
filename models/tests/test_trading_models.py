"""Tests for the stock, portfolio, ledger and user models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from models.portfolio import Portfolio, UserStock
from models.stock import UNKNOWN_COMPANY, UNKNOWN_INDUSTRY, Stock, StockProfile
from models.transaction import TradeSide, Transaction, TransactionHistory
from models.user import User


@pytest.fixture
def aapl() -> Stock:
    return Stock(
        ticker="AAPL",
        market_price=150.0,
        profile=StockProfile(company="Apple Inc", industry="Technology"),
    )


# =============================================================================
# Stock
# =============================================================================


def test_stock_profile_fields_exposed(aapl):
    assert aapl.profile_resolved
    assert aapl.company == "Apple Inc"
    assert aapl.industry == "Technology"


def test_unresolved_profile_falls_back_to_placeholders():
    stock = Stock(ticker="XYZ", market_price=1.0)
    assert not stock.profile_resolved
    assert stock.company == UNKNOWN_COMPANY
    assert stock.industry == UNKNOWN_INDUSTRY


def test_partial_profile_uses_placeholder_for_missing_field():
    stock = Stock(ticker="XYZ", market_price=1.0, profile=StockProfile(company="Xyz Corp"))
    assert stock.profile_resolved
    assert stock.company == "Xyz Corp"
    assert stock.industry == UNKNOWN_INDUSTRY


def test_with_price_returns_new_snapshot_and_keeps_profile(aapl):
    updated = aapl.with_price(160.0)
    assert updated.market_price == 160.0
    assert updated.profile == aapl.profile
    assert aapl.market_price == 150.0


def test_stock_is_immutable(aapl):
    with pytest.raises(ValidationError):
        aapl.market_price = 1.0


def test_negative_price_rejected():
    with pytest.raises(ValidationError):
        Stock(ticker="AAPL", market_price=-1.0)


# =============================================================================
# Portfolio / UserStock
# =============================================================================


def test_update_portfolio_opens_position(aapl):
    portfolio = Portfolio()
    position = portfolio.update_portfolio(aapl, 5, 150.0)
    assert position.quantity == 5
    assert position.average_cost == pytest.approx(150.0)
    assert portfolio.get_user_stock("AAPL") is position


def test_adding_to_position_averages_cost(aapl):
    portfolio = Portfolio()
    portfolio.update_portfolio(aapl, 10, 100.0)
    portfolio.update_portfolio(aapl, 10, 200.0)
    position = portfolio.get_user_stock("AAPL")
    assert position.quantity == 20
    assert position.average_cost == pytest.approx(150.0)


def test_reducing_position_keeps_cost(aapl):
    portfolio = Portfolio()
    portfolio.update_portfolio(aapl, 10, 100.0)
    portfolio.update_portfolio(aapl, -4, 300.0)
    position = portfolio.get_user_stock("AAPL")
    assert position.quantity == 6
    assert position.average_cost == pytest.approx(100.0)


def test_closed_position_is_kept_as_record(aapl):
    portfolio = Portfolio()
    portfolio.update_portfolio(aapl, 10, 100.0)
    portfolio.update_portfolio(aapl, -10, 150.0)
    position = portfolio.get_user_stock("AAPL")
    assert position is not None
    assert position.is_closed
    assert position.average_cost == pytest.approx(100.0)
    assert portfolio.positions() == []
    assert portfolio.positions(include_closed=True) == [position]


def test_crossing_zero_starts_short_at_fill_price(aapl):
    portfolio = Portfolio()
    portfolio.update_portfolio(aapl, 5, 100.0)
    portfolio.update_portfolio(aapl, -8, 150.0)
    position = portfolio.get_user_stock("AAPL")
    assert position.quantity == -3
    assert position.average_cost == pytest.approx(150.0)


def test_extending_short_averages_cost(aapl):
    portfolio = Portfolio()
    portfolio.update_portfolio(aapl, -2, 100.0)
    portfolio.update_portfolio(aapl, -2, 200.0)
    position = portfolio.get_user_stock("AAPL")
    assert position.quantity == -4
    assert position.average_cost == pytest.approx(150.0)


def test_zero_delta_is_a_no_op():
    position = UserStock(ticker="AAPL")
    position.apply_fill(0, 123.0)
    assert position.quantity == 0
    assert position.average_cost == 0.0


def test_one_position_per_ticker(aapl):
    portfolio = Portfolio()
    portfolio.update_portfolio(aapl, 1, 150.0)
    portfolio.update_portfolio(aapl, 1, 150.0)
    assert list(portfolio.holdings) == ["AAPL"]


def test_quantity_of_missing_ticker_is_zero():
    assert Portfolio().quantity_of("MSFT") == 0


def test_market_value_and_unrealized_pnl(aapl):
    msft = Stock(ticker="MSFT", market_price=300.0)
    portfolio = Portfolio()
    portfolio.update_portfolio(aapl, 10, 100.0)
    portfolio.update_portfolio(msft, -2, 300.0)
    prices = {"AAPL": 150.0, "MSFT": 250.0}
    assert portfolio.market_value(prices) == pytest.approx(10 * 150.0 - 2 * 250.0)
    assert portfolio.unrealized_pnl(prices) == pytest.approx(10 * 50.0 + 2 * 50.0)


def test_unrealized_pnl_skips_unpriced_tickers(aapl):
    portfolio = Portfolio()
    portfolio.update_portfolio(aapl, 10, 100.0)
    assert portfolio.unrealized_pnl({}) == 0.0


# =============================================================================
# Ledger / User
# =============================================================================


def _txn(ticker: str, side: TradeSide) -> Transaction:
    return Transaction(
        timestamp=datetime(2025, 1, 2, tzinfo=timezone.utc),
        ticker=ticker,
        quantity=3,
        price=10.0,
        side=side,
    )


def test_history_appends_in_order():
    history = TransactionHistory()
    history.add_transaction(_txn("AAPL", TradeSide.BUY))
    history.add_transaction(_txn("MSFT", TradeSide.SELL))
    assert len(history) == 2
    assert [t.ticker for t in history.transactions] == ["AAPL", "MSFT"]
    assert [t.ticker for t in history.for_ticker("MSFT")] == ["MSFT"]


def test_transaction_is_immutable_and_totals():
    txn = _txn("AAPL", TradeSide.BUY)
    assert txn.total == pytest.approx(30.0)
    with pytest.raises(ValidationError):
        txn.quantity = 5


def test_users_do_not_share_default_containers(aapl):
    first = User(credential="a")
    second = User(credential="b")
    first.portfolio.update_portfolio(aapl, 1, 150.0)
    first.transaction_history.add_transaction(_txn("AAPL", TradeSide.BUY))
    assert second.portfolio.holdings == {}
    assert len(second.transaction_history) == 0


def test_user_balance_helpers():
    user = User(credential="a", balance=100.0)
    user.add_balance(50.0)
    user.deduct_balance(120.0)
    assert user.balance == pytest.approx(30.0)


def test_user_round_trips_through_json(aapl):
    user = User(credential="a", username="alice", balance=10.0)
    user.portfolio.update_portfolio(aapl, 2, 150.0)
    user.transaction_history.add_transaction(_txn("AAPL", TradeSide.BUY))
    restored = User.model_validate_json(user.model_dump_json())
    assert restored == user
