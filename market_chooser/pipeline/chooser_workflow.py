"""
Chooser Workflow
Unified pipeline: Market files → Aligned log prices → Walk-forward → Drawdown bootstrap
"""

from pathlib import Path
from typing import Union

from market_chooser.backtesting.bootstrap import DrawdownBootstrap
from market_chooser.backtesting.results import ChooserResult
from market_chooser.backtesting.walk_forward import WalkForwardEngine
from market_chooser.config import Config, config as default_config
from market_chooser.core.timing import Timer
from market_chooser.data.alignment import build_price_matrix
from market_chooser.data.market_loader import load_markets
from market_chooser.data.price_matrix import PriceMatrix
from market_chooser.logging_config import get_logger

logger = get_logger(__name__)


def run_chooser_on_matrix(
    matrix: PriceMatrix,
    run_config: Config = default_config,
    verbose: bool = True,
) -> ChooserResult:
    """
    Run the walk-forward simulation and the drawdown bootstrap on aligned prices.

    Args:
        matrix: Aligned log prices
        run_config: Run parameters
        verbose: Log stage timings and show bootstrap progress

    Returns:
        ChooserResult

    Raises:
        ConfigurationError: If the parameters do not fit the data
    """
    run_config.validate_for(matrix.n_cases, matrix.n_markets)

    engine = WalkForwardEngine(
        matrix,
        is_n=run_config.is_n,
        oos1_n=run_config.oos1_n,
        annualization_factor=run_config.annualization_factor,
    )
    with Timer("Walk-forward pass", verbose=verbose):
        wf = engine.run()

    bootstrap = DrawdownBootstrap(
        n_trades=run_config.n_trades,
        bootstrap_reps=run_config.bootstrap_reps,
        quantile_reps=run_config.quantile_reps,
        seed=run_config.seed,
        n_workers=run_config.n_workers,
    )
    with Timer("Drawdown bootstrap", verbose=verbose):
        bounds = bootstrap.run(wf.oos2_returns(), verbose=verbose)

    dates = matrix.dates
    return ChooserResult(
        is_n=run_config.is_n,
        oos1_n=run_config.oos1_n,
        n_markets=matrix.n_markets,
        n_cases=matrix.n_cases,
        n_oos2=wf.n_oos2,
        market_performance=wf.market_performance,
        criterion_performance=wf.criterion_performance(),
        criterion_pct_chosen=wf.criterion_pct_chosen(),
        final_performance=wf.final_performance(),
        drawdown_bounds=bounds,
        start_date=dates[0].strftime('%Y-%m-%d') if dates is not None else None,
        end_date=dates[-1].strftime('%Y-%m-%d') if dates is not None else None,
        oos2_returns=wf.oos2_series(dates),
    )


def run_chooser(
    list_file: Union[str, Path],
    run_config: Config = default_config,
    verbose: bool = True,
) -> ChooserResult:
    """
    Run the complete chooser workflow from a market list file.

    Args:
        list_file: Text file naming one market history file per line
        run_config: Run parameters
        verbose: Log stage timings and show bootstrap progress

    Returns:
        ChooserResult

    Raises:
        ConfigurationError: Invalid parameters (checked before any file is read)
        MarketDataError: Unreadable or malformed market data
    """
    run_config.validate()

    logger.info("Chooser run with IS_n=%d OOS1_n=%d", run_config.is_n, run_config.oos1_n)

    with Timer("Loading markets", verbose=verbose):
        markets = load_markets(list_file)
        matrix = build_price_matrix(markets)

    return run_chooser_on_matrix(matrix, run_config, verbose=verbose)
