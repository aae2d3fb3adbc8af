"""
Transform Logger - Structured logging for transform runs.

Captures:
- Run start (input shape, rule count)
- Run completion (mutations, failures, duration)
- Rule failures (selector and mutation errors)

Each structured entry is a single JSON line prefixed with an event label, so
logs stay grep-able and machine-parseable.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..core.config import settings


PACKAGE_LOGGER = "html_transformer"

_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach a console handler to the package logger (once).

    Args:
        level: Log level name; defaults to settings.LOG_LEVEL

    Returns:
        The package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel((level or settings.LOG_LEVEL).upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
        logger.addHandler(handler)

    return logger


class TransformLogger:
    """
    Structured logger for transform runs.

    Usage:
        tlog = TransformLogger()
        tlog.log_start(run_id, source="TextInput", rule_count=3)
        tlog.log_complete(run_id, result)
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(f"{PACKAGE_LOGGER}.runs")

    def _emit(self, level: int, label: str, data: Dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        data["timestamp"] = datetime.now(timezone.utc).isoformat()
        self._logger.log(level, f"{label}: {json.dumps(data, default=str)}")

    def log_start(self, run_id: str, source: str, rule_count: int) -> None:
        """Log the beginning of a transform run."""
        self._emit(
            logging.DEBUG,
            "Transform start",
            {
                "event": "transform_start",
                "run_id": run_id,
                "source": source,
                "rule_count": rule_count,
            },
        )

    def log_complete(self, run_id: str, result: Any) -> None:
        """Log a finished run from its TransformResult."""
        self._emit(
            logging.INFO if result.success else logging.WARNING,
            "Transform complete",
            {
                "event": "transform_complete",
                "run_id": run_id,
                "rules": len(result.outcomes),
                "mutations": result.mutation_count,
                "failures": result.failure_count,
                "output_length": len(result.html),
                "duration_ms": round(result.duration_ms, 2),
            },
        )

    def log_rule_failure(self, run_id: str, rule_label: str, error: Exception) -> None:
        """Log one recorded selector or mutation failure."""
        self._emit(
            logging.WARNING,
            "Rule failed",
            {
                "event": "rule_failed",
                "run_id": run_id,
                "rule": rule_label,
                "error_type": type(error).__name__,
                "error": str(error),
            },
        )
