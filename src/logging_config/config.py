"""Logging Configuration.

Log level, output format and the slow-call threshold used by
``log_performance`` around hard work.
"""

from dataclasses import dataclass
from enum import Enum

from src.settings import get_settings


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    JSON = "json"
    CONSOLE = "console"


@dataclass
class LoggingConfig:
    """How the vault engine writes its logs."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    include_caller: bool = True
    slow_threshold_ms: float = 250.0
    service_name: str = "vault-engine"

    @classmethod
    def from_settings(cls) -> "LoggingConfig":
        """Build a config from VAULT_LOG_LEVEL and VAULT_LOG_FORMAT.

        Unknown values fall back to the defaults instead of failing startup.
        """
        settings = get_settings()
        level = settings.log_level.upper()
        fmt = settings.log_format.lower()
        known_formats = {f.value for f in LogFormat}
        return cls(
            level=LogLevel(level) if level in LogLevel.__members__ else cls.level,
            format=LogFormat(fmt) if fmt in known_formats else cls.format,
        )


DEFAULT_LOGGING_CONFIG = LoggingConfig()
