#!/usr/bin/env python3
"""
MTR Backtester CLI
Usage:
  python main.py backtest --csv prices.csv [--symbol AAPL] [--config config.yaml]
  python main.py backtest --mock --symbol AAPL --start 2020-01-01 --end 2023-12-31 [--seed 7]
"""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path

# Project root
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mtr_backtester.core.config import load_config
from mtr_backtester.core.exceptions import MTRBacktesterError
from mtr_backtester.core.logger import setup_logging
from mtr_backtester.simulator import TradingSimulator


def run_backtest(args: argparse.Namespace) -> int:
    """Load data, run the full pipeline, print strategy vs buy-and-hold."""
    config = load_config(args.config, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file)
    logger = logging.getLogger("mtr_backtester")
    symbol = (args.symbol or config.symbol).upper()
    start = args.start or config.start_date
    end = args.end or config.end_date
    csv_path = args.csv or config.csv_path

    sim = TradingSimulator.from_config(config)
    try:
        if args.mock:
            sim.load_mock(symbol, start or "2020-01-01", end, seed=args.seed)
        elif csv_path:
            sim.load_csv(csv_path, symbol, start, end)
        else:
            logger.error("No price data: pass --csv PATH, set data.csv_path, or use --mock")
            return 1
        results = sim.run()
    except MTRBacktesterError as e:
        logger.error("Backtest failed: %s", e)
        return 1

    m = results["strategy"]
    bh = results["buy_hold"]
    print(f"\n--- Backtest Results: {symbol} ({len(sim.market_data)} bars) ---")
    print(f"Initial capital: {m.initial_capital:.2f}")
    print(f"Final equity: {m.final_equity:.2f}")
    print(f"Total return: {m.total_return_pct:.2f}%")
    print(f"Total trades: {m.total_trades} (wins: {m.winning_trades}, losses: {m.losing_trades})")
    print(f"Win rate: {m.win_rate:.1f}%")
    print(f"Avg win: {m.avg_win:.2f} | Avg loss: {m.avg_loss:.2f}")
    print(f"Total commissions: {m.total_commissions:.2f}")
    print(f"Max drawdown: {m.max_drawdown_pct:.2f}%")
    print(f"Sharpe ratio: {m.sharpe_ratio:.2f}")
    print("\n--- Buy & Hold ---")
    print(f"Final equity: {bh.final_equity:.2f}")
    print(f"Total return: {bh.total_return_pct:.2f}%")
    print(f"Outperformance: {bh.outperformance_pct:+.2f}%")
    if args.export:
        path = sim.export_csv(args.export)
        print(f"\nExported per-bar results to {path}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="MTR band backtester CLI")
    parser.add_argument("mode", choices=["backtest"], help="Run a backtest")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--csv", type=Path, default=None, help="CSV with date,open,high,low,close,volume")
    source.add_argument("--mock", action="store_true", help="Use generated prices instead of a CSV")
    parser.add_argument("--symbol", default=None, help="Ticker symbol")
    parser.add_argument("--start", default=None, help="Start date YYYY-MM-DD")
    parser.add_argument("--end", default=None, help="End date YYYY-MM-DD")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for --mock")
    parser.add_argument("--export", type=Path, default=None, help="Write per-bar results CSV here")
    args = parser.parse_args()
    return run_backtest(args)


if __name__ == "__main__":
    exit(main())
