"""Tests for src/core/cloudwatch_logging.py."""

import logging
from unittest.mock import patch

from src.core.cloudwatch_logging import (
    CloudWatchConfig,
    GenerationLogFilter,
    flush_cloudwatch_logging,
    setup_cloudwatch_logging,
)


def _record(name, level):
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


class TestGenerationLogFilter:
    def test_passes_generation_info(self):
        f = GenerationLogFilter()
        assert f.filter(_record("src.services.generation_service", logging.INFO))
        assert f.filter(_record("src.core.image_generator", logging.WARNING))

    def test_drops_other_info(self):
        assert not GenerationLogFilter().filter(_record("src.api.routes.health", logging.INFO))

    def test_passes_errors_from_anywhere(self):
        assert GenerationLogFilter().filter(_record("sqlalchemy.engine", logging.ERROR))

    def test_drops_debug(self):
        assert not GenerationLogFilter().filter(
            _record("src.services.generation_service", logging.DEBUG)
        )


class TestSetup:
    def test_disabled_by_default(self):
        assert CloudWatchConfig().enabled is False
        assert setup_cloudwatch_logging() is False

    def test_env_enables(self, monkeypatch):
        monkeypatch.setenv("CLOUDWATCH_ENABLED", "true")
        monkeypatch.setenv("CLOUDWATCH_LOG_GROUP", "/app/test")
        config = CloudWatchConfig()
        assert config.enabled is True
        assert config.log_group == "/app/test"

    def test_custom_logger_list(self):
        f = GenerationLogFilter(loggers=("worker",))
        assert f.filter(_record("worker.jobs", logging.INFO))
        assert not f.filter(_record("src.core.image_generator", logging.INFO))

    def test_handler_attached_then_flushed(self):
        handler = logging.NullHandler()
        root = logging.getLogger()
        with patch("src.core.cloudwatch_logging._build_handler", return_value=handler):
            assert setup_cloudwatch_logging(CloudWatchConfig(enabled=True)) is True
        assert handler in root.handlers
        assert isinstance(handler.filters[0], GenerationLogFilter)

        flush_cloudwatch_logging()
        assert handler not in root.handlers

    def test_missing_handler_keeps_console_only(self):
        with patch("src.core.cloudwatch_logging._build_handler", return_value=None):
            assert setup_cloudwatch_logging(CloudWatchConfig(enabled=True)) is False
