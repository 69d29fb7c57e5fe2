"""UI and terminal output styling for LumFit.

Submodules:
- console: Theme and console instance
- logging: File logging utilities
- messages: Status messages (success, error, warning, etc.)
- reporter: Rich implementation of the Reporter protocol
- tables: Result tables
"""

from lumfit.ui.console import LUMFIT_THEME, Verbosity, console, get_verbosity, icon, set_verbosity
from lumfit.ui.logging import close_logging, log, log_section, setup_logging
from lumfit.ui.messages import action, error, info, show_header, success, warning
from lumfit.ui.reporter import ConsoleReporter
from lumfit.ui.tables import (
    create_table,
    print_contributions,
    print_curve_fit,
    print_mixture_model,
    print_mixture_sweep,
    print_summary,
)

__all__ = [
    "LUMFIT_THEME",
    "ConsoleReporter",
    "Verbosity",
    "action",
    "close_logging",
    "console",
    "create_table",
    "error",
    "get_verbosity",
    "icon",
    "info",
    "log",
    "log_section",
    "print_contributions",
    "print_curve_fit",
    "print_mixture_model",
    "print_mixture_sweep",
    "print_summary",
    "set_verbosity",
    "setup_logging",
    "show_header",
    "success",
    "warning",
]
