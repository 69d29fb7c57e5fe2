"""Console configuration and theme for LumFit UI.

One Rich console is shared by the messages, tables and the console reporter
so that output can be captured or silenced in one place.
"""

import os
import sys

from rich.console import Console
from rich.theme import Theme

LUMFIT_THEME = Theme(
    {
        # status
        "success": "bold green",
        "warning": "bold yellow",
        "error": "bold red",
        "info": "cyan",
        "action": "bold yellow",
        # structure
        "header": "bold cyan",
        "key": "cyan",
        "metric": "bold green",
        "value": "green",
        # values that could not be estimated (NaN, failed intervals)
        "missing": "dim red",
        "dim": "dim",
    }
)

console = Console(theme=LUMFIT_THEME, record=True)


class Verbosity:
    """Verbosity levels for UI output."""

    QUIET = 0  # Errors only
    NORMAL = 1  # Fit progress and result tables
    VERBOSE = 2  # Also echo log records


_verbosity = Verbosity.NORMAL


def set_verbosity(level: int) -> None:
    """Set the global verbosity level; QUIET silences the console."""
    global _verbosity
    _verbosity = level
    console.quiet = level == Verbosity.QUIET


def get_verbosity() -> int:
    return _verbosity


# (unicode, ascii) glyph pairs
_ICONS = {
    "check": ("✓", "+"),
    "warn": ("⚠", "!"),
    "error": ("✗", "x"),
    "info": ("▸", ">"),
    "action": ("→", "->"),
    "separator": ("━", "-"),
}


def _unicode_output() -> bool:
    if os.getenv("LUMFIT_ASCII", "").lower() in {"1", "true", "yes"}:
        return False
    encoding = getattr(console, "encoding", None) or sys.getdefaultencoding()
    return "utf" in encoding.lower()


def icon(name: str) -> str:
    """Return the glyph for ``name``, falling back to ASCII on non UTF-8 terminals.

    Names: check, warn, error, info, action, separator
    """
    glyphs = _ICONS.get(name, _ICONS["info"])
    return glyphs[0] if _unicode_output() else glyphs[1]


__all__ = [
    "LUMFIT_THEME",
    "Verbosity",
    "console",
    "get_verbosity",
    "icon",
    "set_verbosity",
]
