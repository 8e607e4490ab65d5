"""
Timing utilities for the simulation stages.

Provides a Timer class that can be used as a context manager or decorator.
Elapsed times are reported through the module logger.
"""

from __future__ import annotations

import time
from functools import wraps
from typing import Any, Callable, Optional

from market_chooser.logging_config import get_logger

logger = get_logger(__name__)


class Timer:
    """
    Context manager and decorator for timing a stage of the run.

    Example as context manager:
        with Timer("Walk-forward pass"):
            engine.run()

    Example as decorator:
        @Timer.decorator("Drawdown bootstrap")
        def bootstrap():
            ...
    """

    def __init__(self, name: str = "Operation", verbose: bool = True):
        """
        Initialize timer.

        Args:
            name: Name to display in timing messages
            verbose: Whether to log timing messages
        """
        self.name = name
        self.verbose = verbose
        self.start_time: Optional[float] = None
        self.elapsed: Optional[float] = None

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        if self.verbose:
            logger.info("%s: starting...", self.name)
        return self

    def __exit__(self, *args: Any) -> None:
        if self.start_time is not None:
            self.elapsed = time.perf_counter() - self.start_time
            if self.verbose:
                logger.info("%s: completed in %.2fs", self.name, self.elapsed)

    @staticmethod
    def decorator(name: str = "Function") -> Callable:
        """
        Decorator version of Timer.

        Args:
            name: Name to display in timing messages
        """
        def wrapper(func: Callable) -> Callable:
            @wraps(func)
            def inner(*args: Any, **kwargs: Any) -> Any:
                with Timer(name):
                    return func(*args, **kwargs)
            return inner
        return wrapper
