"""Structured Logging & Transaction Tracing.

Provides structured JSON logging, transaction context propagation,
and performance timing for the vault engine.
"""

from src.logging_config.config import LogFormat, LoggingConfig, LogLevel
from src.logging_config.context import TxContext, generate_tx_id
from src.logging_config.performance import log_performance
from src.logging_config.setup import configure_logging, get_logger

__all__ = [
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "TxContext",
    "configure_logging",
    "generate_tx_id",
    "get_logger",
    "log_performance",
]
