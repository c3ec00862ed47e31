"""Logging Setup.

Installs a single stdout handler on the root logger. JSON lines for
anything that collects logs, a compact colored line for local runs.
Both formatters attach the transaction context bound by the chain.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from src.logging_config.config import LogFormat, LoggingConfig
from src.logging_config.context import get_context_dict

# Attributes callers pass through ``extra=`` that are worth keeping
EXTRA_FIELDS = ("duration_ms", "error_code", "error_category", "block_timestamp")


def _exception_payload(formatter: logging.Formatter, record: logging.LogRecord) -> Optional[dict]:
    if not record.exc_info or record.exc_info[0] is None:
        return None
    exc_type, exc, _ = record.exc_info
    payload = {
        "type": exc_type.__name__,
        "message": str(exc),
        "traceback": formatter.formatException(record.exc_info),
    }
    to_dict = getattr(exc, "to_dict", None)
    if callable(to_dict):
        payload["error"] = to_dict()
    return payload


class StructuredFormatter(logging.Formatter):
    """One JSON object per record.

    Fields: timestamp, level, logger, message, service, the optional caller
    location, the active tx context and any of ``EXTRA_FIELDS``.
    """

    def __init__(self, service_name: str = "vault-engine", include_caller: bool = True):
        super().__init__()
        self.service_name = service_name
        self.include_caller = include_caller

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }
        if self.include_caller:
            entry.update(module=record.module, function=record.funcName, line=record.lineno)

        entry.update(get_context_dict())
        entry.update({key: getattr(record, key) for key in EXTRA_FIELDS if hasattr(record, key)})

        exception = _exception_payload(self, record)
        if exception is not None:
            entry["exception"] = exception
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Readable single-line output for a terminal."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        clock = datetime.now(timezone.utc).strftime("%H:%M:%S.%f")[:-3]
        line = f"{color}{clock} {record.levelname:8s}{self.RESET} {record.name}: {record.getMessage()}"

        ctx = get_context_dict()
        code = getattr(record, "error_code", None)
        if code:
            ctx["error_code"] = code
        if ctx:
            line += " [" + ", ".join(f"{k}={v}" for k, v in ctx.items()) + "]"

        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    """Configure the root logger for the vault engine.

    Args:
        config: Logging configuration. Defaults to ``LoggingConfig.from_settings()``.
    """
    config = config or LoggingConfig.from_settings()

    if config.format == LogFormat.JSON:
        formatter: logging.Formatter = StructuredFormatter(
            service_name=config.service_name,
            include_caller=config.include_caller,
        )
    else:
        formatter = ConsoleFormatter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(config.level.value)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
