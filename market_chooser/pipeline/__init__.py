"""End-to-end chooser workflow."""

from market_chooser.pipeline.chooser_workflow import run_chooser, run_chooser_on_matrix

__all__ = [
    "run_chooser",
    "run_chooser_on_matrix",
]
