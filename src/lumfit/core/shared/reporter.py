"""Progress and status reporting abstraction.

The fitting kernels report what they are doing (background subtraction,
fit attempts, sweep progress, numerical diagnostics) through the Reporter
protocol instead of printing. The UI layer supplies a Rich-based reporter;
library users get the logging-backed one by default.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable


@runtime_checkable
class Reporter(Protocol):
    """Protocol for progress and status reporting.

    All methods take plain strings so that core code does not depend on
    any output format or styling system.
    """

    def action(self, message: str) -> None:
        """Report an action being performed, e.g. 'Fitting 3-component curve'."""
        ...

    def info(self, message: str) -> None:
        """Report an informational message."""
        ...

    def warning(self, message: str) -> None:
        """Report a non-fatal issue the user should be aware of."""
        ...

    def error(self, message: str) -> None:
        """Report an error that affects results but does not stop execution."""
        ...

    def success(self, message: str) -> None:
        """Report successful completion of an operation."""
        ...


class NullReporter:
    """Silent reporter that discards all messages."""

    def action(self, message: str) -> None:
        pass

    def info(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass


class LoggingReporter:
    """Reporter that writes to Python logging.

    Maps reporter methods to logging levels on the given logger.

    Example:
        >>> reporter = LoggingReporter("lumfit.fitting")
        >>> reporter.action("Fitting 2-component LM-OSL curve")  # INFO level
        >>> reporter.warning("Confidence intervals unavailable")  # WARNING level
    """

    def __init__(self, logger_name: str = "lumfit") -> None:
        self._logger = logging.getLogger(logger_name)

    def action(self, message: str) -> None:
        """Log action at INFO level with prefix."""
        self._logger.info("[ACTION] %s", message)

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warning(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str) -> None:
        self._logger.error(message)

    def success(self, message: str) -> None:
        """Log success at INFO level with prefix."""
        self._logger.info("[SUCCESS] %s", message)


class CompositeReporter:
    """Fan every message out to several reporters, e.g. console and log."""

    def __init__(self, reporters: list[Reporter]) -> None:
        self._reporters = reporters

    def action(self, message: str) -> None:
        for reporter in self._reporters:
            reporter.action(message)

    def info(self, message: str) -> None:
        for reporter in self._reporters:
            reporter.info(message)

    def warning(self, message: str) -> None:
        for reporter in self._reporters:
            reporter.warning(message)

    def error(self, message: str) -> None:
        for reporter in self._reporters:
            reporter.error(message)

    def success(self, message: str) -> None:
        for reporter in self._reporters:
            reporter.success(message)
