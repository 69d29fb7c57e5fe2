"""Status lines printed by the CLI and the console reporter.

Every message is also forwarded to the session log when logging is enabled.
"""

from __future__ import annotations

from lumfit.ui.console import console, icon
from lumfit.ui.logging import log, log_section

__all__ = [
    "action",
    "error",
    "info",
    "show_header",
    "success",
    "warning",
]


def _emit(style: str, glyph: str, message: str, indent: int, level: str, do_log: bool) -> None:
    console.print(f"{'  ' * indent}[{style}]{icon(glyph)}[/{style}] {message}")
    if do_log:
        log(message, level=level)


def show_header(text: str, do_log: bool = True) -> None:
    """Print a command banner framed by separator rules."""
    rule = icon("separator") * min(60, console.width)
    console.print(f"[header]{rule}\n  {text}\n{rule}[/header]")
    if do_log:
        log_section(text)


def success(message: str, indent: int = 0, do_log: bool = True) -> None:
    _emit("success", "check", message, indent, "info", do_log)


def warning(message: str, indent: int = 0, do_log: bool = True) -> None:
    _emit("warning", "warn", message, indent, "warning", do_log)


def error(message: str, indent: int = 0, do_log: bool = True) -> None:
    _emit("error", "error", message, indent, "error", do_log)


def info(message: str, indent: int = 0, do_log: bool = True) -> None:
    _emit("dim", "info", message, indent, "info", do_log)


def action(message: str, do_log: bool = True) -> None:
    """Print a step of the workflow, preceded by a blank line."""
    console.print()
    _emit("action", "action", message, 0, "info", do_log)
