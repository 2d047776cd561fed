"""Logging configuration for the extramark CLI.

Configures loguru to write either human-readable colored output to stderr or
one JSON object per record. Library modules only emit records through
``loguru.logger``; installing sinks is left to the entry point.
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from typing import Any

from loguru import logger


def _json_serializer(record: dict[str, Any]) -> str:
    """Serialize a log record to a single JSON line.

    Fields: severity, message, time, plus any bound ``extra`` fields at the
    top level.
    """
    log_entry: dict[str, Any] = {
        "severity": record["level"].name,
        "message": record["message"],
        "time": record["time"].isoformat(),
        "module": record["name"],
    }

    if record["exception"] is not None:
        exc_info = record["exception"]
        tb_str = None
        if exc_info.traceback:
            tb_str = "".join(
                traceback.format_exception(exc_info.type, exc_info.value, exc_info.traceback)
            )
        log_entry["exception"] = {
            "type": exc_info.type.__name__ if exc_info.type else None,
            "value": str(exc_info.value) if exc_info.value else None,
            "traceback": tb_str,
        }

    for key, value in record.get("extra", {}).items():
        if not key.startswith("_"):
            log_entry[key] = value

    return json.dumps(log_entry, default=str)


def _json_sink(message: Any) -> None:
    """Sink that writes serialized JSON to stderr."""
    sys.stderr.write(_json_serializer(message.record) + "\n")
    sys.stderr.flush()


def configure_logging(*, log_level: str = "WARNING", json_output: bool = False) -> None:
    """Configure loguru for command-line use.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: If True, emit JSON lines instead of colored text.
    """
    logger.remove()

    if json_output:
        logger.add(
            _json_sink,
            level=log_level,
            format="{message}",
            backtrace=False,
            diagnose=False,
        )
    else:
        logger.add(
            sys.stderr,
            level=log_level,
            format=(
                "<green>{time:HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan> | "
                "<level>{message}</level>"
            ),
            colorize=True,
            backtrace=False,
            diagnose=False,
        )

    _intercept_standard_logging(log_level)


def _intercept_standard_logging(log_level: str) -> None:
    """Route standard library logging records into loguru."""

    class InterceptHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            try:
                level: str | int = logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

            frame, depth = logging.currentframe(), 2
            while frame and frame.f_code.co_filename == logging.__file__:
                frame = frame.f_back
                depth += 1

            logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())

    logging.basicConfig(handlers=[InterceptHandler()], level=log_level, force=True)
