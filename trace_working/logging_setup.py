"""Logging configuration for trace-working."""

import logging
import sys

from .colors import Colors

LOGGER_NAME = "trace-working"


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name, and the message for warnings and up."""

    @staticmethod
    def _level_color(levelno: int) -> str:
        # Looked up per record so Colors.init() after import still applies.
        if levelno >= logging.CRITICAL:
            return Colors.BG_RED + Colors.WHITE
        if levelno >= logging.ERROR:
            return Colors.RED
        if levelno >= logging.WARNING:
            return Colors.YELLOW
        if levelno >= logging.INFO:
            return Colors.CYAN
        return Colors.DIM

    def format(self, record):
        color = self._level_color(record.levelno)
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{Colors.RESET}"
        if record.levelno >= logging.WARNING:
            record.msg = f"{color}{record.getMessage()}{Colors.RESET}"
            record.args = None
        return super().format(record)


def get_logger() -> logging.Logger:
    """Return the shared tool logger (configured or not)."""
    return logging.getLogger(LOGGER_NAME)


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Set up logging for a run.

    Args:
        verbose: If True, show DEBUG level messages with a level prefix.
                 If False, show INFO+ messages without prefix.

    Returns:
        Configured logger instance.
    """
    logger = get_logger()
    logger.handlers.clear()
    logger.propagate = False

    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)

    # stdout keeps log lines ordered with the result printout
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    fmt = "%(levelname)s %(message)s" if verbose else "%(message)s"
    handler.setFormatter(ColoredFormatter(fmt))

    logger.addHandler(handler)
    return logger
