"""CLI command modules for LumFit.

Each module exports a command function decorated with the necessary Typer
annotations; the main app.py imports and registers them.
"""

from lumfit.cli.commands.fit_lm import fit_lm_command
from lumfit.cli.commands.mixture import mixture_command

__all__ = ["fit_lm_command", "mixture_command"]
