"""Rich implementation of the Reporter protocol."""

from __future__ import annotations

from lumfit.core.shared.reporter import Reporter
from lumfit.ui import messages


class ConsoleReporter:
    """Print kernel progress on the shared console.

    Info lines (fit attempts, per-k sweep progress) are indented under the
    preceding action line.

    Example:
        >>> reporter = ConsoleReporter()
        >>> fit_lm_curve(curve, n_components=3, reporter=reporter)
    """

    def __init__(self, indent: int = 1) -> None:
        self.indent = indent

    def action(self, message: str) -> None:
        messages.action(message)

    def info(self, message: str) -> None:
        messages.info(message, indent=self.indent)

    def warning(self, message: str) -> None:
        messages.warning(message, indent=self.indent)

    def error(self, message: str) -> None:
        messages.error(message)

    def success(self, message: str) -> None:
        messages.success(message, indent=self.indent)


if not isinstance(ConsoleReporter(), Reporter):
    msg = "ConsoleReporter does not implement Reporter"
    raise TypeError(msg)
