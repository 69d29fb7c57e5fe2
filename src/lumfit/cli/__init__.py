"""Command-line interface for LumFit."""

from lumfit.cli.app import app

__all__ = ["app"]
