"""Typer callbacks and shared helpers for the CLI."""

from __future__ import annotations

import warnings
from collections.abc import Iterator
from contextlib import contextmanager

import typer

from lumfit.core.shared.exceptions import LumFitError, LumFitWarning, ModelQualityWarning
from lumfit.ui.console import console
from lumfit.ui.logging import close_logging
from lumfit.ui.messages import error, warning


def version_callback(value: bool | None) -> None:
    """Show version information and exit."""
    if value:
        from lumfit import __version__

        console.print(f"[header]LumFit[/header] [dim]v{__version__}[/dim]")
        raise typer.Exit


@contextmanager
def command_errors(step: str) -> Iterator[None]:
    """Turn LumFit errors raised by a command body into exit code 1.

    Numerical warnings are already shown by the console reporter; only the
    missing-value warnings of the result summaries are echoed here.
    """
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", LumFitWarning)
        try:
            yield
        except LumFitError as exc:
            error(f"{step} failed: {exc}")
            close_logging()
            raise typer.Exit(code=1) from exc
        finally:
            for item in caught:
                if issubclass(item.category, ModelQualityWarning):
                    warning(str(item.message))
