"""Finite mixture model command."""

from __future__ import annotations

import pathlib  # noqa: TC003
from typing import Annotated

import typer

from lumfit.cli.callbacks import command_errors


def mixture_command(
    data: Annotated[
        pathlib.Path,
        typer.Argument(
            help="Two-column file with equivalent doses and their standard errors",
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    sigmab: Annotated[
        float,
        typer.Option(
            "--sigmab",
            "-s",
            help="Common overdispersion in log-dose space (0 to 1)",
        ),
    ],
    components: Annotated[
        list[int],
        typer.Option(
            "--components",
            "-k",
            help="Component count(s) to fit; repeat the option to compare several",
        ),
    ],
    grain_probability: Annotated[
        bool,
        typer.Option(
            "--grain-probability/--no-grain-probability",
            help="Show the membership probability of each grain",
        ),
    ] = False,
    workers: Annotated[
        int,
        typer.Option(
            "--workers",
            "-w",
            help="Number of threads used for a sweep over component counts",
        ),
    ] = 1,
    log_file: Annotated[
        pathlib.Path | None,
        typer.Option(
            "--log-file",
            help="Write a session log (JSON lines when the suffix is .json)",
            dir_okay=False,
            resolve_path=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Echo log records to the console"),
    ] = False,
) -> None:
    """Fit a finite mixture model to a distribution of equivalent doses.

    Examples
    --------
    Single model with two components:
        $ lumfit fmm doses.csv --sigmab 0.2 -k 2

    Compare two to five components by BIC:
        $ lumfit fmm doses.csv --sigmab 0.2 -k 2 -k 3 -k 4 -k 5
    """
    from lumfit.core.domain.config import MixtureConfig, build_config
    from lumfit.core.results.mixture import MixtureModel
    from lumfit.services.mixture import MixtureService
    from lumfit.ui import (
        ConsoleReporter,
        Verbosity,
        close_logging,
        set_verbosity,
        setup_logging,
        show_header,
    )
    from lumfit.ui.tables import print_mixture_model, print_mixture_sweep

    set_verbosity(Verbosity.VERBOSE if verbose else Verbosity.NORMAL)
    setup_logging(log_file=log_file, verbose=verbose)
    show_header(f"Finite mixture model: {data.name}")

    with command_errors("Finite mixture model"):
        config = build_config(
            MixtureConfig,
            sigmab=sigmab,
            n_components=components,
            grain_probability=grain_probability,
            verbose=True,
            n_workers=workers,
        )
        report = MixtureService(reporter=ConsoleReporter()).fit(data, config)
        if isinstance(report.result, MixtureModel):
            print_mixture_model(report.result, grain_probability=grain_probability)
        else:
            print_mixture_sweep(report.result, grain_probability=grain_probability)

    close_logging()
