"""
Logging system tests: routing, file backend output and level checks.
"""

import json
import logging

import pytest

from versifi.infrastructure.logging import (
    ConsoleBackend, ConsoleBackendConfig, FileBackend, FileBackendConfig, LogLevel, LogRecord,
    LoggerFactory, LoggingConfig, RouterConfig, SimpleRouter,
)


def make_config(tmp_path, console_level="INFO", file_level="DEBUG", file_format="json"):
    return LoggingConfig(
        environment="test",
        console=ConsoleBackendConfig(enabled=True, min_level=console_level, color=False),
        file=FileBackendConfig(enabled=True, min_level=file_level, path=str(tmp_path / "versifi.log"),
                               format=file_format, flush_interval=60),
        router=RouterConfig(default_backends=["console"]),
    )


def read_lines(tmp_path):
    path = tmp_path / "versifi.log"
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text().splitlines() if line]


class TestRouting:

    def test_routes_by_type_and_level(self, tmp_path):
        file_backend = FileBackend(FileBackendConfig(path=str(tmp_path / "x.log")), 'file')
        console_backend = FileBackend(FileBackendConfig(path=str(tmp_path / "y.log")), 'console')
        router = SimpleRouter({'file': file_backend, 'console': console_backend},
                              RouterConfig(default_backends=['console']))

        metric = LogRecord.create_metric("t", "ws_messages_received_count", 1.0)
        warning = LogRecord.create_text(LogLevel.WARNING, "t", "careful")
        info = LogRecord.create_text(LogLevel.INFO, "t", "hello")
        audit = LogRecord.create_audit("t", "order_placed")

        assert router.get_backends(metric) == [file_backend]
        assert router.get_backends(warning) == [file_backend, console_backend]
        assert router.get_backends(info) == [console_backend]
        assert router.get_backends(audit) == [file_backend, console_backend]

    def test_rejects_wrong_config_type(self):
        with pytest.raises(TypeError):
            SimpleRouter({}, {"default_backends": ["console"]})


class TestConsoleFormat:

    def test_context_and_correlation(self):
        backend = ConsoleBackend(ConsoleBackendConfig(color=False, max_message_length=10))
        record = LogRecord.create_text(LogLevel.INFO, "t", "Subscription confirmed", topic="x" * 120)
        record.connection = "stream.example"

        line = backend._format_message(record)

        assert line == "Subscripti... | topic=" + "x" * 100 + "... | connection=stream.example"

    def test_audit_prefix(self):
        backend = ConsoleBackend(ConsoleBackendConfig(color=False, include_context=False))
        record = LogRecord.create_audit("t", "order_cancelled", order_id=7)
        assert backend._format_message(record) == "[AUDIT] order_cancelled"


class TestHFTLogger:

    @pytest.mark.asyncio
    async def test_file_receives_metrics_and_warnings(self, tmp_path):
        logger = LoggerFactory.create_logger("versifi.tests.file_metrics", make_config(tmp_path))
        try:
            logger.info("console only", topic="analytics")
            logger.warning("Delivery queue full", maxsize=10, connection="stream.example")
            logger.latency("ws_auth", 12.5, connection="stream.example")
            await logger.flush()

            lines = read_lines(tmp_path)
            assert [line["type"] for line in lines] == ["TEXT", "METRIC"]
            assert lines[0]["message"] == "Delivery queue full"
            assert lines[0]["context"] == {"maxsize": 10}
            assert lines[0]["connection"] == "stream.example"
            assert lines[1]["metric"]["name"] == "ws_auth_latency_ms"
            assert lines[1]["metric"]["value"] == 12.5
        finally:
            LoggerFactory._cached_loggers.pop("versifi.tests.file_metrics", None)

    @pytest.mark.asyncio
    async def test_default_context_and_set_context(self, tmp_path):
        config = make_config(tmp_path)
        config = LoggingConfig(environment=config.environment, console=config.console, file=config.file,
                               router=config.router, default_context={"service": "versifi"})
        logger = LoggerFactory.create_logger("versifi.tests.context", config)
        try:
            logger.set_context(order_id="1001")
            logger.error("Order rejected", reason="insufficient balance")
            await logger.flush()

            line = read_lines(tmp_path)[0]
            assert line["context"] == {"service": "versifi", "reason": "insufficient balance"}
            assert line["order_id"] == "1001"
        finally:
            LoggerFactory._cached_loggers.pop("versifi.tests.context", None)

    def test_is_enabled_for(self, tmp_path):
        config = LoggingConfig(
            environment="test",
            console=ConsoleBackendConfig(enabled=True, min_level="WARNING", color=False),
        )
        logger = LoggerFactory.create_logger("versifi.tests.levels", config)
        try:
            assert not logger.isEnabledFor(logging.DEBUG)
            assert not logger.isEnabledFor(logging.INFO)
            assert logger.isEnabledFor(logging.WARNING)
        finally:
            LoggerFactory._cached_loggers.pop("versifi.tests.levels", None)

    def test_factory_caches_by_name(self):
        first = LoggerFactory.create_logger("versifi.tests.cached")
        try:
            assert LoggerFactory.create_logger("versifi.tests.cached") is first
            assert LoggerFactory.override_logger("versifi.tests.cached", min_level="ERROR")
            assert not first.isEnabledFor(logging.WARNING)
            assert not LoggerFactory.override_logger("versifi.tests.unknown", min_level="ERROR")
        finally:
            LoggerFactory._cached_loggers.pop("versifi.tests.cached", None)


class TestLoggingConfig:

    def test_from_dict(self):
        config = LoggingConfig.from_dict({
            "environment": "prod",
            "console": {"enabled": True, "min_level": "ERROR"},
            "file": {"enabled": True, "path": "logs/x.log", "format": "json"},
        })
        assert config.console.min_level == "ERROR"
        assert config.file.format == "json"
        assert config.enabled_backends() == ["console", "file"]

    def test_invalid_level(self):
        with pytest.raises(ValueError):
            ConsoleBackendConfig(min_level="LOUD").validate()

    def test_environment_presets(self):
        prod = LoggingConfig.for_environment("production")
        assert prod.environment == "prod"
        assert prod.file.format == "json"
        assert prod.router.default_backends == ["file"]

        assert LoggingConfig.for_environment("test").enabled_backends() == ["console"]
        assert LoggingConfig.for_environment("unknown").console.min_level == "DEBUG"
