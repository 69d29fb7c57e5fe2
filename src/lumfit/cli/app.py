"""Typer application: the `lumfit` entry point with the `lm` and `fmm` commands."""

from typing import Annotated

import typer

from lumfit.cli.callbacks import version_callback
from lumfit.cli.commands import fit_lm_command, mixture_command

app = typer.Typer(
    name="lumfit",
    help="LumFit - LM-OSL curve decomposition and finite mixture dose models",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """LumFit - Analysis tools for luminescence dating.

    Decompose LM-OSL curves into first-order components and fit finite
    mixture models to equivalent dose distributions.
    """


# Register commands
app.command(name="lm")(fit_lm_command)
app.command(name="fmm")(mixture_command)
