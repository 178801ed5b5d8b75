"""Tests for correlation-aware logging."""

import logging

from xmlshape import Parser
from xmlshape.shared.logging import CorrelationLogger, get_logger


class TestCorrelationLogger:
    """Test context injection into log records."""

    def test_records_carry_component_and_correlation_id(self, caplog):
        caplog.set_level(logging.DEBUG, logger="xmlshape.test")
        logger = get_logger("xmlshape.test", "req-1", "unit")

        logger.info("hello", extra={"count": 2})

        record = caplog.records[-1]
        assert record.getMessage() == "hello"
        assert record.component == "unit"
        assert record.correlation_id == "req-1"
        assert record.count == 2

    def test_component_defaults_to_last_name_part(self):
        assert CorrelationLogger("xmlshape.tree.builder").component == "builder"

    def test_with_correlation_id(self):
        logger = get_logger("xmlshape.test", component="unit")
        bound = logger.with_correlation_id("req-2")

        assert bound.correlation_id == "req-2"
        assert bound.component == "unit"
        assert logger.correlation_id is None


class TestParserLogging:
    """Test the records a parse emits."""

    def test_successful_parse_logs_start_and_completion(self, caplog):
        caplog.set_level(logging.INFO, logger="xmlshape")

        Parser(correlation_id="req-3").parse("<a>1</a>")

        messages = [r.getMessage() for r in caplog.records if getattr(r, "correlation_id", None) == "req-3"]
        assert "Starting parse" in messages
        assert "Parse completed" in messages

    def test_failed_parse_logs_warning(self, caplog):
        caplog.set_level(logging.INFO, logger="xmlshape")

        Parser(correlation_id="req-4").parse("<a><b></a>")

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert warnings
        assert warnings[-1].getMessage() == "Parse failed"
        assert warnings[-1].error_kind == "malformed-input"
