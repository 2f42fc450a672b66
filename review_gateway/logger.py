"""
Structured logging system for the review gateway.

Provides centralized logging with console and optional file output,
plus metrics tracking for monitoring completion API health and decisions.
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for monitoring review throughput and provider failures.
    """

    def __init__(
        self,
        name: str = "review_gateway",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for daily log files (None = no file output)
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()  # Remove existing handlers

        # Requests are served from a threadpool
        self._lock = threading.Lock()

        # Metrics tracking
        self.metrics = {
            "api_calls": 0,
            "api_failures": 0,
            "reviews_attempted": 0,
            "reviews_succeeded": 0,
            "reviews_failed": 0,
            "decisions": {},
            "tokens_used": 0,
            "errors_by_type": {},
        }

        # Console handler
        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        # File handler
        if log_dir is not None:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"review_gateway_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        """Internal logging method with context."""
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_api_call(self):
        """Increment outbound completion call counter."""
        with self._lock:
            self.metrics["api_calls"] += 1

    def record_api_failure(self, error_type: str):
        """Record a failed completion attempt."""
        with self._lock:
            self.metrics["api_failures"] += 1
            self._count_error(error_type)

    def record_review_attempt(self):
        """Record an incoming review."""
        with self._lock:
            self.metrics["reviews_attempted"] += 1

    def record_review_success(self, decision: str, total_tokens: int):
        """Record a completed review and its token usage."""
        with self._lock:
            self.metrics["reviews_succeeded"] += 1
            self.metrics["tokens_used"] += total_tokens
            decisions = self.metrics["decisions"]
            decisions[decision] = decisions.get(decision, 0) + 1

    def record_review_failure(self, error_type: str):
        """Record a review that ended in an error."""
        with self._lock:
            self.metrics["reviews_failed"] += 1
            self._count_error(error_type)

    def _count_error(self, error_type: str):
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return a snapshot of current metrics, with the review success rate."""
        with self._lock:
            metrics_copy = {
                key: dict(value) if isinstance(value, dict) else value
                for key, value in self.metrics.items()
            }

        attempted = metrics_copy["reviews_attempted"]
        metrics_copy["success_rate"] = (
            round(metrics_copy["reviews_succeeded"] / attempted, 3) if attempted else 0
        )
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        total_attempts = metrics["reviews_attempted"]
        total_successes = metrics["reviews_succeeded"]
        overall_rate = round(metrics["success_rate"] * 100, 1)

        self.info("=== Review Gateway Metrics ===")
        self.info(f"API Calls: {metrics['api_calls']} ({metrics['api_failures']} failed)")
        self.info(f"Reviews: {total_successes}/{total_attempts} ({overall_rate}% success)")
        self.info(f"Tokens Used: {metrics['tokens_used']}")

        if metrics["decisions"]:
            self.info("Decisions:")
            for decision, count in metrics["decisions"].items():
                self.info(f"  {decision}: {count}")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "review_gateway",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Arguments only take effect on the call that creates the instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
