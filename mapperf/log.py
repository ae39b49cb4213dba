"""
mapperf.log - Logging setup for the command line tool.

Library modules only create loggers with logging.getLogger(__name__);
handlers are installed here, once, by the CLI.
"""

import logging
import sys

LOGGER_NAME = "mapperf"

LEVEL_COLORS = {
    logging.DEBUG: "\033[90m",
    logging.INFO: "\033[0m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[91m",
    logging.CRITICAL: "\033[91m\033[1m",
}
RESET = "\033[0m"
DIM = "\033[2m"


class PackageHandler(logging.StreamHandler):
    """Stream handler installed by setup_logging(), replaced on each call."""


class CompactFormatter(logging.Formatter):
    """Format records as 'HH:MM:SS [LEVL] message', optionally colored."""

    def __init__(self, color: bool = False):
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        timestamp = self.formatTime(record, "%H:%M:%S")
        level = record.levelname[:4]
        message = record.getMessage()

        if self.color:
            level_color = LEVEL_COLORS.get(record.levelno, RESET)
            formatted = (
                f"{DIM}{timestamp}{RESET} "
                f"[{level_color}{level}{RESET}] {message}"
            )
        else:
            formatted = f"{timestamp} [{level}] {message}"

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)
        return formatted


def setup_logging(verbose: bool = False, stream=None) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        verbose: Log at DEBUG instead of WARNING.
        stream: Output stream, stderr by default.

    Returns:
        The configured "mapperf" logger.
    """
    if stream is None:
        stream = sys.stderr

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    # Replace our own handler on repeat calls, leave foreign ones alone
    for handler in list(logger.handlers):
        if isinstance(handler, PackageHandler):
            logger.removeHandler(handler)

    handler = PackageHandler(stream)
    isatty = getattr(stream, "isatty", None)
    handler.setFormatter(CompactFormatter(color=bool(isatty and isatty())))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
