"""Session logging for the LumFit command line.

``setup_logging`` configures the ``lumfit`` logger, which is also the parent
of the loggers used by :class:`~lumfit.core.shared.reporter.LoggingReporter`,
so kernel messages end up in the same session log.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from rich.logging import RichHandler

from lumfit.ui.console import console

LOGGER_NAME = "lumfit"

_TEXT_FORMAT = "%(asctime)s | %(levelname)-7s | %(message)s"
_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

# Set while a session is open
_logger: logging.Logger | None = None


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _file_handler(log_file: Path, level: int) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
    handler.setLevel(level)
    if log_file.suffix.lower() == ".json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def _remove_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def setup_logging(
    log_file: Path | None = None,
    verbose: bool = False,
    level: int = logging.INFO,
) -> None:
    """Open a logging session.

    Args:
        log_file: File receiving the log (JSON lines for a .json suffix);
            logging is disabled when None and verbose is False
        verbose: Also echo log records to the console through Rich
        level: Logging level
    """
    global _logger

    if log_file is None and not verbose:
        _logger = None
        return

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    _remove_handlers(logger)

    if log_file is not None:
        logger.addHandler(_file_handler(log_file, level))
    if verbose:
        rich_handler = RichHandler(console=console, show_time=False, show_path=False)
        rich_handler.setLevel(level)
        logger.addHandler(rich_handler)

    _logger = logger

    from lumfit import __version__

    logger.info("LumFit v%s - Session Started", __version__)
    logger.info("Command: %s", " ".join(sys.argv))
    logger.info("Working directory: %s", Path.cwd())
    logger.info("Python %s on %s", sys.version.split()[0], sys.platform)


def log(message: str, level: str = "info") -> None:
    """Log ``message`` to the open session, if any."""
    if _logger is not None:
        _logger.log(_LEVELS.get(level.lower(), logging.INFO), message)


def log_section(title: str) -> None:
    """Log a section marker."""
    if _logger is not None:
        _logger.info("--- %s ---", title)


def close_logging() -> None:
    """Close the session and release the log file."""
    global _logger

    if _logger is None:
        return
    _logger.info("LumFit Session Completed")
    _remove_handlers(_logger)
    _logger = None


__all__ = [
    "JSONFormatter",
    "LOGGER_NAME",
    "close_logging",
    "log",
    "log_section",
    "setup_logging",
]
