"""
Structured logging system for talentmatch.

Provides centralized logging with console and file outputs, log levels,
and metrics tracking for monitoring the AI enhancement pass.
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
    Tracks metrics for AI calls, fallbacks and scored matches.
    """

    def __init__(
        self,
        name: str = "talentmatch",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()

        self.metrics = {
            "ai_calls": 0,
            "ai_successes": 0,
            "ai_failures": 0,
            "fallbacks": 0,
            "matches_scored": 0,
            "errors_by_type": {},
        }
        # AI passes with max_concurrency > 1 update metrics from worker threads
        self._metrics_lock = threading.Lock()

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"talentmatch_{datetime.now().strftime('%Y%m%d')}.log"
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
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_ai_call(self):
        """Increment AI call counter."""
        with self._metrics_lock:
            self.metrics["ai_calls"] += 1

    def record_ai_success(self):
        """Record an AI reply that was parsed into a match result."""
        with self._metrics_lock:
            self.metrics["ai_successes"] += 1

    def record_ai_failure(self, error_type: str):
        """Record a failed AI call and the error type behind it."""
        with self._metrics_lock:
            self.metrics["ai_failures"] += 1
            if error_type not in self.metrics["errors_by_type"]:
                self.metrics["errors_by_type"][error_type] = 0
            self.metrics["errors_by_type"][error_type] += 1

    def record_fallback(self, count: int = 1):
        """Record items that fell back to the baseline score."""
        with self._metrics_lock:
            self.metrics["fallbacks"] += count

    def record_matches_scored(self, count: int):
        """Record pool members that received a baseline score."""
        with self._metrics_lock:
            self.metrics["matches_scored"] += count

    def get_metrics(self) -> dict:
        """Return current metrics."""
        with self._metrics_lock:
            metrics_copy = self.metrics.copy()
            metrics_copy["errors_by_type"] = dict(self.metrics["errors_by_type"])
        attempts = metrics_copy["ai_successes"] + metrics_copy["ai_failures"]
        metrics_copy["ai_success_rate"] = (
            round(metrics_copy["ai_successes"] / attempts, 3) if attempts > 0 else None
        )
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        attempts = metrics["ai_successes"] + metrics["ai_failures"]
        overall_rate = 0
        if attempts > 0:
            overall_rate = round(metrics["ai_successes"] / attempts * 100, 1)

        self.info("=== Matching Session Metrics ===")
        self.info(f"Matches scored: {metrics['matches_scored']}")
        self.info(f"AI calls: {metrics['ai_calls']}")
        self.info(f"AI analyses: {metrics['ai_successes']}/{attempts} ({overall_rate}% success)")
        self.info(f"Baseline fallbacks: {metrics['fallbacks']}")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "talentmatch",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

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
