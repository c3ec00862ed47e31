"""Tests for structured logging and transaction tracing."""

import json
import logging
import sys

import pytest

from src.errors import AuthorizationError
from src.logging_config import TxContext, configure_logging, generate_tx_id, get_logger
from src.logging_config.config import LogFormat, LoggingConfig, LogLevel
from src.logging_config.context import get_context_dict, get_tx_id
from src.logging_config.performance import log_performance
from src.logging_config.setup import ConsoleFormatter, StructuredFormatter
from src.settings import get_settings


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def make_record(msg="test", level=logging.INFO, name="test", lineno=1, exc_info=None):
    return logging.LogRecord(
        name=name, level=level, pathname="test.py",
        lineno=lineno, msg=msg, args=(), exc_info=exc_info,
    )


class TestLoggingConfig:
    """Tests for logging configuration dataclasses."""

    def test_default_config_values(self):
        config = LoggingConfig()
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.JSON
        assert config.include_caller is True
        assert config.slow_threshold_ms == 250.0
        assert config.service_name == "vault-engine"

    def test_custom_config(self):
        config = LoggingConfig(level=LogLevel.DEBUG, format=LogFormat.CONSOLE, slow_threshold_ms=50.0)
        assert config.level == LogLevel.DEBUG
        assert config.format == LogFormat.CONSOLE
        assert config.slow_threshold_ms == 50.0

    def test_log_format_enum_values(self):
        assert LogFormat.JSON.value == "json"
        assert LogFormat.CONSOLE.value == "console"

    def test_from_settings(self, monkeypatch):
        monkeypatch.setenv("VAULT_LOG_LEVEL", "debug")
        monkeypatch.setenv("VAULT_LOG_FORMAT", "console")
        config = LoggingConfig.from_settings()
        assert config.level == LogLevel.DEBUG
        assert config.format == LogFormat.CONSOLE

    def test_from_settings_ignores_unknown_values(self, monkeypatch):
        monkeypatch.setenv("VAULT_LOG_LEVEL", "loud")
        monkeypatch.setenv("VAULT_LOG_FORMAT", "xml")
        config = LoggingConfig.from_settings()
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.JSON


class TestTxContext:
    """Tests for transaction context propagation."""

    def test_generate_tx_id_unique(self):
        ids = {generate_tx_id() for _ in range(100)}
        assert len(ids) == 100

    def test_context_sets_tx_id(self):
        with TxContext(tx_id="tx-1"):
            assert get_tx_id() == "tx-1"
        assert get_tx_id() == ""

    def test_auto_generates_tx_id(self):
        with TxContext() as ctx:
            assert ctx.tx_id != ""
            assert get_tx_id() == ctx.tx_id

    def test_context_dict(self):
        with TxContext(tx_id="tx-1", sender="0xabc", method="deposit"):
            ctx = get_context_dict()
            assert ctx == {"tx_id": "tx-1", "sender": "0xabc", "method": "deposit"}

    def test_context_dict_empty_outside(self):
        assert get_context_dict() == {}

    def test_nested_contexts_restore_outer(self):
        with TxContext(tx_id="outer"):
            with TxContext(tx_id="inner"):
                assert get_tx_id() == "inner"
            assert get_tx_id() == "outer"


class TestStructuredFormatter:
    """Tests for JSON structured log formatting."""

    def test_formats_as_json(self):
        parsed = json.loads(StructuredFormatter().format(make_record("hello world")))
        assert parsed["message"] == "hello world"
        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "test"
        assert parsed["service"] == "vault-engine"
        assert "timestamp" in parsed

    def test_caller_info(self):
        parsed = json.loads(StructuredFormatter().format(make_record(lineno=42)))
        assert parsed["line"] == 42
        assert "function" in parsed

    def test_excludes_caller_when_disabled(self):
        parsed = json.loads(StructuredFormatter(include_caller=False).format(make_record()))
        assert "line" not in parsed

    def test_includes_tx_context(self):
        with TxContext(tx_id="ctx-test", contract="0xfund"):
            parsed = json.loads(StructuredFormatter().format(make_record()))
        assert parsed["tx_id"] == "ctx-test"
        assert parsed["contract"] == "0xfund"

    def test_formats_exception(self):
        try:
            raise ValueError("test error")
        except ValueError:
            record = make_record("failed", level=logging.ERROR, exc_info=sys.exc_info())
        parsed = json.loads(StructuredFormatter().format(record))
        assert parsed["exception"]["type"] == "ValueError"

    def test_vault_error_payload(self):
        try:
            raise AuthorizationError("Not governance")
        except AuthorizationError:
            record = make_record("failed", level=logging.ERROR, exc_info=sys.exc_info())
        parsed = json.loads(StructuredFormatter().format(record))
        assert parsed["exception"]["error"]["code"] == "NOT_GOVERNANCE"
        assert parsed["exception"]["error"]["category"] == "authorization"

    def test_includes_error_code_and_duration(self):
        record = make_record()
        record.error_code = "NOT_GOVERNANCE"
        record.duration_ms = 12.5
        parsed = json.loads(StructuredFormatter().format(record))
        assert parsed["error_code"] == "NOT_GOVERNANCE"
        assert parsed["duration_ms"] == 12.5


class TestConsoleFormatter:
    def test_readable_output(self):
        output = ConsoleFormatter().format(make_record("hello", name="src.fund.fund"))
        assert "src.fund.fund" in output
        assert "hello" in output

    def test_includes_context(self):
        with TxContext(tx_id="abc"):
            output = ConsoleFormatter().format(make_record())
        assert "tx_id=abc" in output


class TestConfigureLogging:
    def test_json_format(self):
        configure_logging(LoggingConfig(format=LogFormat.JSON))
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)

    def test_console_format(self):
        configure_logging(LoggingConfig(format=LogFormat.CONSOLE))
        assert isinstance(logging.getLogger().handlers[0].formatter, ConsoleFormatter)

    def test_sets_log_level(self):
        configure_logging(LoggingConfig(level=LogLevel.DEBUG))
        assert logging.getLogger().level == logging.DEBUG

    def test_reads_settings_when_no_config(self, monkeypatch):
        monkeypatch.setenv("VAULT_LOG_LEVEL", "warning")
        monkeypatch.setenv("VAULT_LOG_FORMAT", "console")
        get_settings.cache_clear()
        configure_logging()
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, ConsoleFormatter)

    def test_get_logger(self):
        logger = get_logger("src.fund")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "src.fund"


class TestPerformanceLogging:
    def test_returns_result(self):
        @log_performance(threshold_ms=10000)
        def fast():
            return 42

        assert fast() == 42

    def test_preserves_name(self):
        @log_performance()
        def my_function():
            """My docstring."""

        assert my_function.__name__ == "my_function"
        assert my_function.__doc__ == "My docstring."

    def test_propagates_exception(self):
        @log_performance(threshold_ms=10000)
        def failing():
            raise ValueError("test error")

        with pytest.raises(ValueError, match="test error"):
            failing()

    def test_slow_call_warns(self, caplog):
        @log_performance(threshold_ms=0, logger_name="perf.test")
        def slow():
            return None

        with caplog.at_level(logging.WARNING, logger="perf.test"):
            slow()
        assert any("Slow operation" in r.getMessage() for r in caplog.records)


class TestTransactionLogging:
    def test_revert_logged_with_error_code(self, caplog, fund, stranger):
        with caplog.at_level(logging.INFO, logger="src.chain.chain"):
            with pytest.raises(AuthorizationError):
                fund.set_platform_fee(100, sender=stranger)
        reverted = [r for r in caplog.records if r.getMessage().startswith("Reverted")]
        assert reverted
        assert reverted[-1].error_code == "NOT_GOVERNANCE"
        assert reverted[-1].error_category == "authorization"
        assert reverted[-1].block_timestamp == fund.chain.timestamp
