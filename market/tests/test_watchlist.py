"""Tests for watch-list parsing and loading."""

import pytest

from market.watchlist import load_watchlist, parse_tickers
from models.config import MarketConfig


def test_parse_tickers_normalises_and_dedupes():
    lines = ["aapl", "  MSFT  ", "", "# comment", "GOOGL # inline", "AAPL"]
    assert parse_tickers(lines) == ["AAPL", "MSFT", "GOOGL"]


def test_load_watchlist_combines_inline_and_file(tmp_path):
    path = tmp_path / "tickers.txt"
    path.write_text("NVDA\nmsft\n", encoding="utf-8")
    config = MarketConfig(tickers=["MSFT", "AAPL"], tickers_file=str(path))
    assert load_watchlist(config) == ["MSFT", "AAPL", "NVDA"]


def test_missing_tickers_file_raises(tmp_path):
    config = MarketConfig(tickers_file=str(tmp_path / "missing.txt"))
    with pytest.raises(FileNotFoundError):
        load_watchlist(config)


def test_empty_watchlist_is_allowed():
    assert load_watchlist(MarketConfig()) == []
