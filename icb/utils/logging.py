"""Logging utilities for the ICB client."""

import logging
import sys
from pathlib import Path
from typing import TextIO

import structlog
from structlog.types import Processor


def _open_log_file(log_file: str) -> TextIO:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return open(log_path, "a", encoding="utf-8")


def setup_logging(
    level: str = "INFO", format_type: str = "console", log_file: str | None = None
) -> None:
    """Configure structured logging for the client.

    Log lines go to ``log_file`` when given, otherwise to stderr, which
    keeps them apart from the chat lines printed on stdout.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.set_exc_info,
    ]

    if format_type == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        # No colour codes in files
        processors.append(structlog.dev.ConsoleRenderer(colors=log_file is None))

    output = _open_log_file(log_file) if log_file else sys.stderr

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a configured logger instance."""
    return structlog.get_logger(name)
