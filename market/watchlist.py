"""Watch-list loading.

Tickers come from ``MarketConfig.tickers`` followed by the lines of
``MarketConfig.tickers_file``. Blank lines and ``#`` comments are ignored,
symbols are upper-cased, and duplicates are dropped keeping first occurrence.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from models.config import MarketConfig

logger = logging.getLogger(__name__)


def parse_tickers(lines: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    tickers: list[str] = []
    for line in lines:
        symbol = line.split("#", 1)[0].strip().upper()
        if not symbol or symbol in seen:
            continue
        seen.add(symbol)
        tickers.append(symbol)
    return tickers


def load_watchlist(config: MarketConfig) -> list[str]:
    """Return the ordered watch-list described by *config*.

    Raises ``FileNotFoundError`` if ``tickers_file`` is set but missing.
    """
    lines = list(config.tickers)
    if config.tickers_file is not None:
        path = Path(config.tickers_file)
        if not path.exists():
            raise FileNotFoundError(f"Tickers file not found: {path}")
        lines.extend(path.read_text(encoding="utf-8").splitlines())

    tickers = parse_tickers(lines)
    if not tickers:
        logger.warning("Watch-list is empty; the market cache will track nothing.")
    else:
        logger.info("Loaded watch-list of %d ticker(s).", len(tickers))
    return tickers
