"""
Tests for logger functionality.
"""

import pytest
from review_gateway.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        """Logger should be created with default settings."""
        logger = StructuredLogger(
            name="test",
            level="INFO",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.logger.name == "test"
        assert logger.metrics["api_calls"] == 0

    def test_log_methods(self, tmp_path):
        """All log level methods should work."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        # Should not raise exceptions
        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.critical("Critical message")

    def test_log_with_context(self, tmp_path):
        """Context is appended as JSON, including non-JSON values."""
        logger = StructuredLogger(
            name="test-context",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Review decided", decision="SAME", path=tmp_path)

        content = next(tmp_path.glob("*.log")).read_text()
        assert 'Review decided | Context: {"decision": "SAME", "path": ' in content

    def test_metrics_tracking(self):
        """Metrics should be tracked correctly."""
        logger = StructuredLogger(name="test", enable_console=False)

        logger.record_api_call()
        logger.record_api_call()
        logger.record_api_failure("Timeout")
        assert logger.metrics["api_calls"] == 2
        assert logger.metrics["api_failures"] == 1

        logger.record_review_attempt()
        logger.record_review_success("SAME", 414)
        logger.record_review_attempt()
        logger.record_review_success("DIFFERENT", 400)
        logger.record_review_attempt()
        logger.record_review_failure("ProviderError")

        metrics = logger.get_metrics()

        assert metrics["reviews_attempted"] == 3
        assert metrics["reviews_succeeded"] == 2
        assert metrics["reviews_failed"] == 1
        assert metrics["tokens_used"] == 814
        assert metrics["decisions"] == {"SAME": 1, "DIFFERENT": 1}
        assert metrics["errors_by_type"] == {"Timeout": 1, "ProviderError": 1}
        assert metrics["success_rate"] == pytest.approx(0.667, rel=0.01)

    def test_metrics_snapshot_is_a_copy(self):
        """Mutating a snapshot leaves the live counters alone."""
        logger = StructuredLogger(name="test", enable_console=False)
        logger.record_review_success("SAME", 1)

        snapshot = logger.get_metrics()
        snapshot["decisions"]["SAME"] = 99

        assert logger.metrics["decisions"]["SAME"] == 1

    def test_success_rate_without_reviews(self):
        """No reviews means a zero success rate, not a division error."""
        logger = StructuredLogger(name="test", enable_console=False)
        assert logger.get_metrics()["success_rate"] == 0

    def test_metrics_summary(self, tmp_path):
        """Summary lines are written to the log."""
        logger = StructuredLogger(name="test-summary", log_dir=tmp_path, enable_console=False)
        logger.record_review_attempt()
        logger.record_review_success("SAME", 10)

        logger.log_metrics_summary()

        content = next(tmp_path.glob("*.log")).read_text()
        assert "=== Review Gateway Metrics ===" in content
        assert "Reviews: 1/1 (100.0% success)" in content
        assert "  SAME: 1" in content

    def test_log_file_creation(self, tmp_path):
        """Log file should be created in specified directory."""
        logger = StructuredLogger(
            name="test-file",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Test message")

        # Check that a log file was created
        log_files = list(tmp_path.glob("*.log"))
        assert len(log_files) == 1

        # Check that message was written
        log_content = log_files[0].read_text()
        assert "Test message" in log_content

    def test_no_file_without_log_dir(self, tmp_path, monkeypatch):
        """Console-only logger writes no files."""
        monkeypatch.chdir(tmp_path)
        logger = StructuredLogger(name="test-console", enable_console=False)
        logger.info("nothing on disk")
        assert list(tmp_path.iterdir()) == []


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self):
        """get_logger should return same instance."""
        reset_logger()  # Start fresh

        logger1 = get_logger(enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self):
        """reset_logger should create new instance."""
        reset_logger()

        logger1 = get_logger(enable_console=False)
        logger1.record_api_call()

        reset_logger()

        logger2 = get_logger(enable_console=False)

        # Should be different instance with fresh metrics
        assert logger2.metrics["api_calls"] == 0
