"""
Chooser Results Container
Stores and formats the outcome of a walk-forward + drawdown run.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional
import json
from pathlib import Path

import pandas as pd

from market_chooser.backtesting.bootstrap import DrawdownBounds
from market_chooser.constants import DEFAULT_OUTPUT_DIR, DEFAULT_REPORT_FILE


@dataclass
class ChooserResult:
    """Container for chooser results."""

    # Run parameters
    is_n: int
    oos1_n: int
    n_markets: int
    n_cases: int
    n_oos2: int

    # Performance (annualized percent)
    market_performance: pd.Series
    criterion_performance: pd.Series
    criterion_pct_chosen: pd.Series
    final_performance: float

    # Drawdown bounds
    drawdown_bounds: DrawdownBounds

    # Merged database date range (YYYY-MM-DD), when known
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    # Detailed data
    oos2_returns: pd.Series = field(default_factory=lambda: pd.Series(dtype=float))

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return {
            'metadata': {
                'is_n': self.is_n,
                'oos1_n': self.oos1_n,
                'n_markets': self.n_markets,
                'n_cases': self.n_cases,
                'n_oos2': self.n_oos2,
                'start_date': self.start_date,
                'end_date': self.end_date,
            },
            'markets': {
                name: round(float(perf), 4) for name, perf in self.market_performance.items()
            },
            'criteria': {
                name: {
                    'performance': round(float(self.criterion_performance[name]), 4),
                    'pct_chosen': round(float(self.criterion_pct_chosen[name]), 1),
                }
                for name in self.criterion_performance.index
            },
            'final_performance': round(self.final_performance, 4),
            'drawdown': {
                'n_trades': self.drawdown_bounds.n_trades,
                'bootstrap_reps': self.drawdown_bounds.bootstrap_reps,
                'quantile_reps': self.drawdown_bounds.quantile_reps,
                'seed': self.drawdown_bounds.seed,
                'bounds': self.drawdown_bounds.to_dict(),
            },
        }

    def save(self, output_dir: str = DEFAULT_OUTPUT_DIR, report_file: str = DEFAULT_REPORT_FILE) -> str:
        """
        Save the text report, a JSON summary and the OOS2 returns.

        Args:
            output_dir: Directory to save results
            report_file: Name of the text report

        Returns:
            Path to the text report
        """
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        report_path = output_path / report_file
        report_path.write_text(self.display_summary(), encoding='utf-8')

        stem = Path(report_file).stem.lower()
        with open(output_path / f'{stem}_summary.json', 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

        if not self.oos2_returns.empty:
            self.oos2_returns.rename('oos2_return').to_csv(output_path / f'{stem}_oos2.csv')

        return str(report_path)

    def display_summary(self) -> str:
        """Generate the formatted report."""
        summary = f"""
{'='*70}
                     MARKET CHOOSER RESULTS
{'='*70}

IS_n={self.is_n}  OOS1_n={self.oos1_n}
Merged database has {self.n_cases} records"""
        if self.start_date and self.end_date:
            summary += f" from {self.start_date} to {self.end_date}"

        summary += f"""

{'─'*70}
MEAN RETURN OF EACH MARKET IN OOS2 PERIOD (annualized %)
{'─'*70}
"""
        for name, perf in self.market_performance.items():
            summary += f"  {name:>15} {perf:9.4f}\n"
        summary += f"  {'Mean':>15} {self.market_performance.mean():9.4f}\n"

        summary += f"""
{'─'*70}
MEAN OOS1 RETURN OF EACH CRITERION (annualized %) AND PCT TIMES CHOSEN
{'─'*70}
"""
        for name in self.criterion_performance.index:
            summary += (
                f"  {name:>15} {self.criterion_performance[name]:9.4f}"
                f"  Chosen {self.criterion_pct_chosen[name]:.1f} pct\n"
            )

        summary += f"""
  Mean return of final system = {self.final_performance:.4f}  ({self.n_oos2} OOS2 returns)

{'─'*70}
DRAWDOWN APPROXIMATE BOUNDS (percent, {self.drawdown_bounds.n_trades} trades)
{'─'*70}
{self.drawdown_bounds.format_table()}
"""
        return summary
