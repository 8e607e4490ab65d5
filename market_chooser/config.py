"""
Run configuration for the Market Chooser.

This module provides a clean configuration interface using a frozen dataclass.
All magic numbers are imported from constants.py for easy modification.

Usage:
    from dataclasses import replace
    from market_chooser.config import config

    run_config = replace(config, is_n=250, oos1_n=20, seed=42)
    run_config.validate()
"""

from dataclasses import dataclass
from typing import Optional

from market_chooser.constants import (
    # Windows
    DEFAULT_IS_N,
    DEFAULT_OOS1_N,
    MIN_IS_N,
    MIN_OOS1_N,
    MIN_MARKETS,
    # Bootstrap
    DEFAULT_N_TRADES,
    DEFAULT_BOOTSTRAP_REPS,
    DEFAULT_QUANTILE_REPS,
    DEFAULT_N_WORKERS,
    # Reporting
    ANNUALIZATION_FACTOR,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_REPORT_FILE,
)
from market_chooser.exceptions import ConfigurationError


@dataclass(frozen=True)
class Config:
    """
    Immutable run configuration.

    All values default to constants.py.
    The frozen=True ensures configuration cannot be accidentally modified at runtime.
    """

    # =========================================================================
    # Walk-Forward Windows
    # =========================================================================
    is_n: int = DEFAULT_IS_N  # In-sample window length
    oos1_n: int = DEFAULT_OOS1_N  # Width of the criterion-selection window

    # =========================================================================
    # Drawdown Bootstrap
    # =========================================================================
    n_trades: int = DEFAULT_N_TRADES
    bootstrap_reps: int = DEFAULT_BOOTSTRAP_REPS
    quantile_reps: int = DEFAULT_QUANTILE_REPS
    seed: Optional[int] = None
    n_workers: int = DEFAULT_N_WORKERS

    # =========================================================================
    # Reporting
    # =========================================================================
    annualization_factor: float = ANNUALIZATION_FACTOR
    output_dir: str = DEFAULT_OUTPUT_DIR
    report_file: str = DEFAULT_REPORT_FILE

    def validate(self) -> "Config":
        """
        Check parameters that do not depend on the data.

        Returns:
            self, so calls can be chained

        Raises:
            ConfigurationError: If any parameter is out of range
        """
        if self.is_n < MIN_IS_N:
            raise ConfigurationError(f"IS_n must be at least {MIN_IS_N}, got {self.is_n}")
        if self.oos1_n < MIN_OOS1_N:
            raise ConfigurationError(f"OOS1_n must be at least {MIN_OOS1_N}, got {self.oos1_n}")
        if self.n_trades < 1:
            raise ConfigurationError(f"n_trades must be positive, got {self.n_trades}")
        if self.bootstrap_reps < 1:
            raise ConfigurationError(f"bootstrap_reps must be positive, got {self.bootstrap_reps}")
        if self.quantile_reps < 1:
            raise ConfigurationError(f"quantile_reps must be positive, got {self.quantile_reps}")
        if self.n_workers < 1:
            raise ConfigurationError(f"n_workers must be positive, got {self.n_workers}")
        if self.seed is not None and (not isinstance(self.seed, int) or self.seed < 0):
            raise ConfigurationError(f"seed must be a non-negative int or None, got {self.seed!r}")
        return self

    def validate_for(self, n_cases: int, n_markets: int) -> "Config":
        """
        Check parameters against the size of the aligned price matrix.

        Args:
            n_cases: Number of aligned trading days
            n_markets: Number of markets

        Raises:
            ConfigurationError: If the data cannot support the requested windows
        """
        self.validate()
        if n_markets < MIN_MARKETS:
            raise ConfigurationError(
                f"At least {MIN_MARKETS} markets are required, got {n_markets}"
            )
        required = self.is_n + self.oos1_n + 1
        if n_cases < required:
            raise ConfigurationError(
                f"Need at least IS_n + OOS1_n + 1 = {required} aligned trading days, "
                f"got {n_cases}"
            )
        return self

    @property
    def oos2_start(self) -> int:
        """Index of the first OOS2 case; fixed at IS_n + OOS1_n."""
        return self.is_n + self.oos1_n


# Global configuration instance
config = Config()
