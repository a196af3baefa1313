"""Logging setup for trello_helper and the HTTP libraries underneath it.

urllib3 logs every request URL at DEBUG, and Trello URLs carry the API key
and token in the query string. Every handler installed here redacts them.
"""

from __future__ import annotations

import logging
import re
import sys

PACKAGE_LOGGER = "trello_helper"

# Loggers of the libraries RequestTransport drives
HTTP_LOGGERS = ("urllib3", "requests")

LEVEL_NAMES = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

_CREDENTIAL_PARAM = re.compile(r"\b(key|token)=[^&\s\"']+")


class RedactCredentialsFilter(logging.Filter):
    """Replace key=... and token=... query parameters with <hidden>"""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _CREDENTIAL_PARAM.sub(r"\1=<hidden>", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def resolve_level(level: str | int) -> int:
    """Turn "DEBUG", "debug", "10" or 10 into a logging level (unknown names: INFO)"""
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    return LEVEL_NAMES.get(name, logging.INFO)


def _configure(logger: logging.Logger, level: int, handlers: list[logging.Handler]) -> None:
    logger.setLevel(level)
    # Remove any existing handlers to avoid duplicates
    logger.handlers.clear()
    for handler in handlers:
        logger.addHandler(handler)
    logger.propagate = False


def setup_logging(
    level: str | int = "INFO",
    log_file: str | None = None,
    http_level: str | int | None = None,
) -> None:
    """Configure logging for trello_helper.

    Args:
        level: Level for trello_helper loggers, by name (DEBUG, INFO, WARNING,
               ERROR) or number. Default: INFO.
        log_file: Optional path to log file. If provided, logs will be written to both
                  console and file.
        http_level: Optional level for the urllib3/requests loggers. When given,
                    their records go to the same (redacting) handlers. Left
                    untouched when None.

    Example:
        >>> setup_logging("DEBUG")  # Show every dispatched request
        >>> setup_logging(logging.INFO, "trello.log")
        >>> setup_logging("INFO", http_level="DEBUG")  # Connection-level detail, credentials hidden
    """
    redact = RedactCredentialsFilter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    console_handler.addFilter(redact)
    handlers: list[logging.Handler] = [console_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        file_handler.addFilter(redact)
        handlers.append(file_handler)

    _configure(logging.getLogger(PACKAGE_LOGGER), resolve_level(level), handlers)

    if http_level is not None:
        for name in HTTP_LOGGERS:
            _configure(logging.getLogger(name), resolve_level(http_level), handlers)
