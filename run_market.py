#!/usr/bin/env python3
"""CLI entrypoint for the trading simulator.

Usage::

    python run_market.py --config config/example.yaml refresh
    python run_market.py --config config/example.yaml add-user alice --balance 10000
    python run_market.py --config config/example.yaml buy alice AAPL 5
    python run_market.py --config config/example.yaml sell alice AAPL 2
    python run_market.py --config config/example.yaml portfolio alice
    python run_market.py --config config/example.yaml watch --cycles 3

Each invocation starts with an empty market cache, so trading commands run a
full refresh first. The Finnhub token is read from the variable named by
``feed.api_key_env`` (``.env`` and ``.env.local`` are honoured).
"""

from __future__ import annotations

import argparse
import logging
import sys

from app.context import AppContext, build_context
from models.config import AppConfig
from models.trade import TradeResult
from models.user import User
from utility.errors import RateLimitExceeded, TradingSimulatorError, UserValidationError

logger = logging.getLogger(__name__)


class ConsolePresenter:
    """Prints each trade outcome on stdout."""

    def present(self, result: TradeResult) -> None:
        if not result.ok:
            print(f"REJECTED [{result.status}] {result.message}")
            return
        txn = result.transaction
        print(
            f"OK {txn.side.value} {txn.quantity} {txn.ticker} @ ${txn.price:.2f} "
            f"(total ${txn.total:.2f}); balance ${result.balance:.2f}"
        )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Single-user stock-trading simulator.",
    )
    parser.add_argument(
        "--config",
        required=True,
        type=str,
        help="Path to the YAML configuration file.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("refresh", help="Fetch prices and profiles for the watch-list.")

    quote = sub.add_parser("quote", help="Refresh, then print one ticker's snapshot.")
    quote.add_argument("ticker")

    for side in ("buy", "sell"):
        trade = sub.add_parser(side, help=f"Refresh, then {side} shares.")
        trade.add_argument("credential")
        trade.add_argument("ticker")
        trade.add_argument("quantity", type=int)

    portfolio = sub.add_parser("portfolio", help="Show a user's balance, positions and ledger.")
    portfolio.add_argument("credential")

    add_user = sub.add_parser("add-user", help="Create a user in the configured store.")
    add_user.add_argument("credential")
    add_user.add_argument("--username", default="")
    add_user.add_argument("--balance", type=float, default=0.0)
    add_user.add_argument(
        "--force",
        action="store_true",
        help="Replace an existing account, discarding its positions and ledger.",
    )

    watch = sub.add_parser("watch", help="Run scheduled refresh cycles in the foreground.")
    watch.add_argument(
        "--cycles",
        type=int,
        default=None,
        help="Stop after this many cycles (default: run until interrupted).",
    )
    return parser.parse_args(argv)


def _setup_logging(level: str) -> None:
    """Configure root logger with a clean format."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _print_stocks(ctx: AppContext) -> None:
    for ticker, stock in sorted(ctx.cache.snapshot().items()):
        print(f"{ticker:<8} ${stock.market_price:>10.2f}  {stock.company} ({stock.industry})")


def _print_portfolio(ctx: AppContext, credential: str) -> None:
    user = ctx.store.load(credential)
    prices = ctx.cache.prices()
    print(f"User: {user.username or user.credential}  balance ${user.balance:.2f}")
    for position in user.portfolio.positions():
        print(f"  {position.ticker:<8} {position.quantity:>6}  avg ${position.average_cost:.2f}")
    if prices:
        print(f"  market value ${user.portfolio.market_value(prices):.2f}")
    print(f"Transactions: {len(user.transaction_history)}")
    for txn in user.transaction_history.transactions:
        print(f"  {txn.timestamp:%Y-%m-%d %H:%M:%S} {txn.side.value:<4} {txn.quantity:>6} {txn.ticker} @ ${txn.price:.2f}")


def _add_user(ctx: AppContext, args: argparse.Namespace) -> int:
    """Create an account; an existing one is only replaced with ``--force``."""
    try:
        ctx.store.load(args.credential)
    except UserValidationError:
        exists = False
    else:
        exists = True
    if exists and not args.force:
        print(f"User '{args.credential}' already exists; use --force to replace it.")
        return 1

    ctx.store.save(User(credential=args.credential, username=args.username, balance=args.balance))
    print(f"{'Replaced' if exists else 'Created'} user '{args.credential}'.")
    return 0


def _run(args: argparse.Namespace) -> int:
    config = AppConfig.from_yaml(args.config)
    ctx = build_context(config, presenter=ConsolePresenter())

    if args.command == "add-user":
        return _add_user(ctx, args)

    if args.command == "portfolio":
        _print_portfolio(ctx, args.credential)
        return 0

    if args.command == "watch":
        try:
            ctx.scheduler.run(max_cycles=args.cycles)
        except KeyboardInterrupt:
            logger.info("Interrupted.")
        _print_stocks(ctx)
        return 0

    ctx.cache.refresh_all()

    if args.command == "refresh":
        _print_stocks(ctx)
        return 0

    if args.command == "quote":
        stock = ctx.cache.get_stock(args.ticker.upper())
        if stock is None:
            print(f"No market data for {args.ticker.upper()}.")
            return 1
        print(f"{stock.ticker}: ${stock.market_price:.2f}  {stock.company} ({stock.industry})")
        return 0

    result = ctx.submit(args.command, args.ticker, args.quantity, credential=args.credential)
    return 0 if result.ok else 1


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    _setup_logging(args.log_level)
    logger.info("Loading config from '%s'...", args.config)
    try:
        return _run(args)
    except RateLimitExceeded as exc:
        logger.error("%s Try again later.", exc)
        return 2
    except (TradingSimulatorError, RuntimeError) as exc:
        logger.error("%s", exc)
        return 1
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
