#!/usr/bin/env python3
"""Market Chooser - CLI

Nested walk-forward backtest of the best-of-N-markets rule, with bootstrap
bounds on future drawdown.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from market_chooser.backtesting.results import ChooserResult
from market_chooser.config import config
from market_chooser.constants import DEFAULT_LOG_DIR
from market_chooser.exceptions import ChooserError
from market_chooser.logging_config import get_logger, setup_logging
from market_chooser.pipeline.chooser_workflow import run_chooser

logger = get_logger(__name__)

console = Console()


def print_msg(msg: str, style: str = "info"):
    """Print a message with a status symbol."""
    symbols = {"success": ("✓", "green"), "error": ("✗", "red"), "info": ("ℹ", "blue")}
    sym, color = symbols.get(style, ("ℹ", "blue"))
    console.print(f"[{color}]{sym}[/{color}] {msg}")


def print_header(title: str):
    """Print a section header."""
    console.print(Panel(title, box=box.DOUBLE, style="bold cyan"))


def parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        prog="chooser",
        description="Nested walk-forward market chooser with drawdown bounds",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  chooser run markets.txt 1000 100                      Default drawdown bootstrap
  chooser run markets.txt 250 20 --n-trades 63          Bounds for one quarter ahead
  chooser run markets.txt 250 20 --seed 42 --workers 4  Reproducible, multi-threaded
        """
    )
    sub = parser.add_subparsers(
        dest="module",
        title="commands",
        metavar="COMMAND",
        description="Available commands"
    )

    run = sub.add_parser(
        "run",
        help="Walk-forward simulation and drawdown bounds",
        description="Select the best market each bar using the recently best criterion"
    )
    run.add_argument("list_file", metavar="FILE_LIST",
                     help="Text file containing list of competing market history files")
    run.add_argument("is_n", type=int, metavar="IS_N",
                     help="N of market history records for each selection criterion to analyze")
    run.add_argument("oos1_n", type=int, metavar="OOS1_N",
                     help="N of OOS records for choosing best criterion")
    run.add_argument("--n-trades", type=int, default=config.n_trades, metavar="N",
                     help=f"Trades in the future drawdown period (default: {config.n_trades})")
    run.add_argument("--bootstrap-reps", type=int, default=config.bootstrap_reps, metavar="N",
                     help=f"Outer bootstrap repetitions (default: {config.bootstrap_reps})")
    run.add_argument("--quantile-reps", type=int, default=config.quantile_reps, metavar="N",
                     help=f"Inner bootstrap repetitions (default: {config.quantile_reps})")
    run.add_argument("--seed", type=int, default=None,
                     help="Random seed for reproducible bounds")
    run.add_argument("--workers", type=int, default=config.n_workers, metavar="N",
                     help=f"Threads for the outer bootstrap (default: {config.n_workers})")
    run.add_argument("--output-dir", type=str, default=config.output_dir, metavar="DIR",
                     help=f"Directory for the report (default: {config.output_dir})")
    run.add_argument("--log-level", type=str, default="INFO",
                     choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                     help="Logging level (default: INFO)")
    run.add_argument("--log-file", action="store_true",
                     help=f"Also write a timestamped log file under {DEFAULT_LOG_DIR}/")
    run.add_argument("--quiet", action="store_true",
                     help="No progress bar or stage timings")

    return parser.parse_args(argv)


def display_result(result: ChooserResult):
    """Render a result with rich tables."""
    markets = Table(title="Mean return of each market in OOS2 period (annualized %)",
                    box=box.ROUNDED)
    markets.add_column("Market", style="bold")
    markets.add_column("Return", justify="right", style="green")
    for name, perf in result.market_performance.items():
        markets.add_row(name, f"{perf:.4f}")
    markets.add_row("[dim]Mean[/dim]", f"{result.market_performance.mean():.4f}")
    console.print(markets)

    criteria = Table(title="Criteria (annualized % OOS1 return)", box=box.ROUNDED)
    criteria.add_column("Criterion", style="bold")
    criteria.add_column("Return", justify="right", style="green")
    criteria.add_column("Chosen", justify="right", style="cyan")
    for name in result.criterion_performance.index:
        criteria.add_row(
            name,
            f"{result.criterion_performance[name]:.4f}",
            f"{result.criterion_pct_chosen[name]:.1f}%",
        )
    console.print(criteria)

    console.print(Panel(
        f"[green]Mean return of final system:[/green] {result.final_performance:.4f}\n"
        f"[dim]OOS2 returns:[/dim] {result.n_oos2}",
        title="Final System",
        box=box.DOUBLE,
    ))

    bounds = result.drawdown_bounds
    table = Table(
        title=f"Drawdown bounds (%) over {bounds.n_trades} trades",
        caption="Rows are drawdown probability, columns are confidence in bounds",
        box=box.ROUNDED,
    )
    table.add_column("Prob", style="bold")
    for conf in bounds.table.columns:
        table.add_column(str(conf), justify="right")
    for prob, row in bounds.table.iterrows():
        table.add_row(str(prob), *(f"{val:.3f}" for val in row))
    console.print(table)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    if args.module is None:
        print("\nMarket Chooser")
        print("==============")
        print("\nCommands:")
        print("  chooser run FILE_LIST IS_N OOS1_N  - Walk-forward simulation and drawdown bounds")
        print("\nUse 'chooser COMMAND -h' for detailed help\n")
        return 0

    if args.module == "run":
        setup_logging(
            level=args.log_level,
            log_dir=DEFAULT_LOG_DIR if args.log_file else None,
        )
        print_header("Market Chooser - Nested Walk-Forward")

        run_config = replace(
            config,
            is_n=args.is_n,
            oos1_n=args.oos1_n,
            n_trades=args.n_trades,
            bootstrap_reps=args.bootstrap_reps,
            quantile_reps=args.quantile_reps,
            seed=args.seed,
            n_workers=args.workers,
            output_dir=args.output_dir,
        )

        try:
            result = run_chooser(args.list_file, run_config, verbose=not args.quiet)
        except ChooserError as e:
            logger.error("%s", e)
            print_msg(f"Error: {e}", "error")
            return 1

        display_result(result)
        report = result.save(run_config.output_dir, run_config.report_file)
        print_msg(f"Report saved to {report}", "success")
        return 0

    return 1


if __name__ == "__main__":
    sys.exit(main())
