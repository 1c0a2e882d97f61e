from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Application logging.

One logger, `data_alchemist`, owns the only handler; module loggers
(`logging.getLogger(__name__)`) propagate into it. Lines look like

    INFO loaded clients from clients.csv: 3 rows
    WARN failed to generate insights: ...
    SUMMARY datasets=3 rows=12 issues=0 clients=0 workers=0 tasks=0

SUMMARY is a custom level (25) between INFO and WARNING.
"""

__all__ = [
    "APP_LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "log_summary",
    "reset_logging",
]

APP_LOGGER_NAME = "data_alchemist"
SUMMARY_LEVEL = 25

_LABELS = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    SUMMARY_LEVEL: "SUMMARY",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "CRITICAL",
}

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        label = _LABELS.get(record.levelno, record.levelname)
        text = f"{label} {record.getMessage()}"
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


def _apply_level(logger: logging.Logger, debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


def setup_logging(debug: bool = False, stream: TextIO | None = None) -> logging.Logger:
    """Configure the application logger once; later calls only raise the level.

    Args:
        debug: enable DEBUG lines (never lowered again by a later call)
        stream: output stream, stdout by default (resolved at call time)
    """
    global _logger

    if _logger is not None:
        if debug:
            _apply_level(_logger, True)
        return _logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    logger = logging.getLogger(APP_LOGGER_NAME)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    # root には流さない (二重出力防止)
    logger.propagate = False
    _apply_level(logger, debug)

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    return _logger if _logger is not None else setup_logging()


def log_summary(message: str) -> None:
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Forget the configured logger so the next setup rebinds the stream (tests)."""
    global _logger
    _logger = None
