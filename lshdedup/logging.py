"""Logging configuration for lshdedup."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union, cast

from lshdedup.types import JsonDict

LOGGER_NAME = "lshdedup"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class StructuredLogger(logging.Logger):
    """Logger that supports structured logging with fields."""

    def debug_with_fields(self, msg: str, **fields: Any) -> None:
        """Log a debug message with structured fields."""
        self._log_fields(logging.DEBUG, msg, fields)

    def info_with_fields(self, msg: str, **fields: Any) -> None:
        """Log structured data at DEBUG level.

        Structured records are kept off the console; use regular info() for
        user-facing messages.
        """
        self._log_fields(logging.DEBUG, msg, fields)

    def warning_with_fields(self, msg: str, **fields: Any) -> None:
        """Log a warning message with structured fields."""
        self._log_fields(logging.WARNING, msg, fields)

    def error_with_fields(self, msg: str, **fields: Any) -> None:
        """Log an error message with structured fields."""
        self._log_fields(logging.ERROR, msg, fields)

    def _log_fields(self, level: int, msg: str, fields: JsonDict) -> None:
        if not self.isEnabledFor(level):
            return
        if fields:
            msg = f"{msg} {fields}"
        self.log(level, msg, extra={"extra_fields": fields}, stacklevel=3)


# Global logger instance
_logger_instance: Optional[StructuredLogger] = None


class JsonFormatter(logging.Formatter):
    """Formatter that outputs one JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: JsonDict = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.pathname and record.lineno:
            log_entry["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            log_entry["fields"] = extra_fields

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def _configure_logger(
    logger: StructuredLogger,
    log_file: Optional[Union[str, Path]] = None,
    verbose: bool = False,
    json_format: bool = False,
) -> None:
    """Attach handlers to *logger*, replacing any it already has.

    Args:
        logger: Logger instance to configure
        log_file: Optional path to log file
        verbose: Whether to show debug records on stderr
        json_format: Write the log file as JSON lines
    """
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    stream_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(str(log_file))
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            JsonFormatter() if json_format else logging.Formatter(FILE_FORMAT)
        )
        logger.addHandler(file_handler)


def get_logger(
    log_file: Optional[Union[str, Path]] = None,
    verbose: bool = False,
) -> StructuredLogger:
    """Get or create the global logger instance.

    Args:
        log_file: Optional path to log file
        verbose: Whether to enable debug logging

    Returns:
        The configured logger instance
    """
    global _logger_instance
    if _logger_instance is None:
        logger = logging.getLogger(LOGGER_NAME)
        # Swap the class so library modules get the *_with_fields helpers
        logger.__class__ = StructuredLogger
        structured_logger = cast(StructuredLogger, logger)
        _configure_logger(structured_logger, log_file, verbose)
        _logger_instance = structured_logger
    return _logger_instance


def setup_logging(
    log_file: Optional[Union[str, Path]] = None,
    verbose: bool = False,
    json_format: bool = False,
) -> StructuredLogger:
    """Reconfigure the global logger for a CLI run."""
    logger = get_logger()
    _configure_logger(logger, log_file, verbose, json_format)
    return logger
