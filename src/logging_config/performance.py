"""Performance Logging.

Times contract calls. Every call is logged at DEBUG, calls slower than the
threshold at WARNING.
"""

import functools
import logging
import time
from typing import Any, Callable, Optional

from src.logging_config.config import DEFAULT_LOGGING_CONFIG


def log_performance(
    threshold_ms: Optional[float] = None,
    logger_name: Optional[str] = None,
) -> Callable:
    """Decorator that logs how long a call took.

    When the first argument is a contract, its address is part of the label.

    Args:
        threshold_ms: Slow call threshold in milliseconds.
                     Defaults to ``DEFAULT_LOGGING_CONFIG.slow_threshold_ms``.
        logger_name: Logger to use. Defaults to the function's module.

    Example:
        @log_performance(threshold_ms=100)
        def do_hard_work(self, *, sender):
            ...
    """
    limit = DEFAULT_LOGGING_CONFIG.slow_threshold_ms if threshold_ms is None else threshold_ms

    def decorator(func: Callable) -> Callable:
        _logger = logging.getLogger(logger_name or func.__module__)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            address = getattr(args[0], "address", None) if args else None
            label = f"{func.__qualname__}@{address}" if address else func.__qualname__
            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                elapsed = (time.perf_counter() - start) * 1000
                extra = {"duration_ms": round(elapsed, 2)}
                if elapsed >= limit:
                    _logger.warning("Slow operation: %s took %.1fms", label, elapsed, extra=extra)
                else:
                    _logger.debug("%s completed in %.1fms", label, elapsed, extra=extra)

        return wrapper

    return decorator
