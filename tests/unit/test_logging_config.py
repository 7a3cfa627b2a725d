"""
Unit tests for structured logging configuration.
"""

import json
import logging
from pathlib import Path

import pytest
import structlog
from osbclient.logging_config import (
    correlation_scope,
    get_correlation_id,
    get_logger,
    log_broker_request,
    log_broker_response,
    log_poll_attempt,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo cached logger configuration between tests."""
    yield
    structlog.reset_defaults()


class TestLoggingConfiguration:
    """Test structured logging configuration functionality."""

    def test_setup_logging_default(self):
        """Test setup_logging with default parameters."""
        setup_logging()

        logger = get_logger("test")
        assert hasattr(logger, 'info') and hasattr(logger, 'warning') and hasattr(logger, 'error')

    def test_setup_logging_with_level(self):
        """Test setup_logging with custom log level."""
        setup_logging(level="DEBUG")

        root_logger = logging.getLogger()
        assert root_logger.level == logging.DEBUG

    def test_setup_logging_json_to_file(self, temp_dir: Path):
        """Test JSON lines written to a log file."""
        log_file = temp_dir / "logs" / "osbclient.log"
        setup_logging(level="INFO", log_file=log_file, json_format=True)

        get_logger("test").info("test_message", key="value")

        record = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert record["event"] == "test_message"
        assert record["key"] == "value"
        assert record["level"] == "info"
        assert record["logger"] == "osbclient.test"


class TestCorrelationId:
    """Test correlation ID context handling."""

    def test_scope_binds_and_restores(self):
        """Test a scope binds its ID and restores the previous one on exit."""
        assert get_correlation_id() is None
        with correlation_scope("outer"):
            with correlation_scope("inner") as bound:
                assert bound == "inner"
                assert get_correlation_id() == "inner"
            assert get_correlation_id() == "outer"
        assert get_correlation_id() is None

    def test_scope_restored_on_error(self):
        """Test the ID is unbound when the block raises."""
        with pytest.raises(RuntimeError):
            with correlation_scope("abc"):
                raise RuntimeError("boom")
        assert get_correlation_id() is None

    def test_added_to_events(self, temp_dir: Path):
        """Test the correlation ID is attached to log events."""
        log_file = temp_dir / "test.log"
        setup_logging(level="INFO", log_file=log_file, json_format=True)

        with correlation_scope("corr-1"):
            get_logger("test").info("with_correlation")
        get_logger("test").info("without_correlation")

        lines = log_file.read_text().strip().splitlines()
        assert json.loads(lines[-2])["correlation_id"] == "corr-1"
        assert "correlation_id" not in json.loads(lines[-1])


class TestLoggingHelpers:
    """Test event helpers."""

    def test_get_logger_prefixes_name(self):
        """Test module names are placed under the osbclient namespace."""
        setup_logging()
        assert get_logger("osbclient.core") is not None
        assert get_logger("other") is not None

    def test_log_broker_request(self, temp_dir: Path):
        """Test the broker request event."""
        log_file = temp_dir / "test.log"
        setup_logging(level="DEBUG", log_file=log_file, json_format=True)

        log_broker_request(
            get_logger("test"), broker="b", method="GET",
            url="http://b/v2/catalog", request_id="rid", api_version="2.17",
        )

        record = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert record["event_type"] == "broker_request"
        assert record["request_id"] == "rid"
        assert record["api_version"] == "2.17"

    def test_failure_response_logged_as_warning(self, temp_dir: Path):
        """Test failures are warnings."""
        log_file = temp_dir / "test.log"
        setup_logging(level="WARNING", log_file=log_file, json_format=True)
        logger = get_logger("test")

        log_broker_response(logger, broker="b", operation="Bind", status_code=201, outcome="sync_result")
        log_broker_response(logger, broker="b", operation="Bind", status_code=500, outcome="failure")

        lines = log_file.read_text().strip().splitlines()
        assert len(lines) == 1
        record = json.loads(lines[0])
        assert record["level"] == "warning"
        assert record["status_code"] == 500

    def test_log_poll_attempt(self, temp_dir: Path):
        """Test the poll attempt event."""
        log_file = temp_dir / "test.log"
        setup_logging(level="INFO", log_file=log_file, json_format=True)

        log_poll_attempt(get_logger("test"), "ProvisionInstance", 2, "in progress", delay_seconds=5)

        record = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert record["event_type"] == "poll_attempt"
        assert record["attempt"] == 2
        assert record["delay_seconds"] == 5
