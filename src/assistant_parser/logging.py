"""Logging configuration for the assistant parser.

The package logs under the "assistant_parser" logger. Nothing is printed
until setup_logging() attaches a handler, so library users keep control of
their own logging; the CLI calls it once at startup.
"""

import logging
import os
import sys
from typing import TextIO

LOGGER_NAME = "assistant_parser"
LOG_LEVEL_ENV = "ASSISTANT_PARSER_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

PREVIEW_LIMIT = 60


def setup_logging(level: str | None = None, stream: TextIO | None = None) -> logging.Logger:
    """Configure logging for the assistant parser.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR).
               If not provided, checks ASSISTANT_PARSER_LOG_LEVEL env var.
               Defaults to WARNING if neither is set.
        stream: Where log records go. Defaults to the current sys.stderr.

    Returns:
        The package logger.
    """
    # resolve log level: CLI flag > env var > default
    resolved_level = (
        level
        or os.environ.get(LOG_LEVEL_ENV)
        or "WARNING"
    ).upper()

    numeric_level = getattr(logging, resolved_level, None)
    if not isinstance(numeric_level, int):
        print(f"Warning: Invalid log level '{resolved_level}', using WARNING", file=sys.stderr)
        numeric_level = logging.WARNING

    target = stream if stream is not None else sys.stderr
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)

    # one handler per target stream; a handler left on an old stream is replaced
    for handler in list(logger.handlers):
        if isinstance(handler, logging.StreamHandler) and handler.stream is not target:
            logger.removeHandler(handler)

    if not logger.handlers:
        handler = logging.StreamHandler(target)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)
    for handler in logger.handlers:
        handler.setLevel(numeric_level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger below the package logger.

    Args:
        name: Module name (typically __name__). Names outside the package
              are nested under it so setup_logging() still applies.

    Returns:
        Logger instance for the module.
    """
    if name != LOGGER_NAME and not name.startswith(LOGGER_NAME + "."):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def preview(text: str, limit: int = PREVIEW_LIMIT) -> str:
    """Shorten model output for a log line.

    Tool bodies can be whole files; only the head is logged, with the
    number of characters left out.
    """
    if len(text) <= limit:
        return repr(text)
    return f"{text[:limit]!r}... (+{len(text) - limit} chars)"
