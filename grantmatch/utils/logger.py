"""
Logging infrastructure for grant matching tools.

Provides:
- Timestamps with milliseconds and aligned log levels
- Optional phase prefix (e.g., "rank", "score")
- Console output on stdout, or any stream the caller passes

Library modules only call logging.getLogger(__name__); entry points call
configure_global_logging() once at startup.
"""

import logging
import sys
from datetime import datetime
from typing import Optional, TextIO


class MillisecondsFormatter(logging.Formatter):
    """Custom formatter that includes milliseconds and aligns log levels."""

    def formatTime(self, record, datefmt=None):  # noqa: N802 - must match parent class method name
        """Override formatTime to include milliseconds."""
        ct = datetime.fromtimestamp(record.created)
        if datefmt and "%f" in datefmt:
            s = ct.strftime(datefmt.replace(",%f", ""))
            return s + f",{int(record.msecs):03d}"
        elif datefmt:
            return ct.strftime(datefmt)
        else:
            return ct.strftime("%Y-%m-%d %H:%M:%S") + f",{int(record.msecs):03d}"


def build_formatter(phase: Optional[str] = None) -> MillisecondsFormatter:
    """Build the unified formatter, with an optional phase column."""
    if phase:
        fmt_str = f"%(asctime)s | %(levelname)-8s | {phase} | %(filename)s:%(lineno)d | %(message)s"
    else:
        fmt_str = "%(asctime)s | %(levelname)-8s | %(filename)s:%(lineno)d | %(message)s"
    return MillisecondsFormatter(fmt_str, datefmt="%Y-%m-%d %H:%M:%S,%f")


def configure_global_logging(
    log_level: str = "INFO",
    phase: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configure root logging with the unified format.

    Call this early in application startup to ensure all logs are consistently formatted.

    Args:
        log_level: Logging level to apply globally (DEBUG, INFO, WARNING, ERROR)
        phase: Optional phase name shown in every line
        stream: Output stream (default: stdout)

    Returns:
        The configured root logger
    """
    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    root_handler = logging.StreamHandler(stream or sys.stdout)
    root_handler.setLevel(level)
    root_handler.setFormatter(build_formatter(phase))
    root_logger.addHandler(root_handler)

    return root_logger
