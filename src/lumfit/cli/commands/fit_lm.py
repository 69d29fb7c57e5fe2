"""LM-OSL curve fitting command."""

from __future__ import annotations

import pathlib  # noqa: TC003
from typing import Annotated

import typer

from lumfit.cli.callbacks import command_errors
from lumfit.core.constants import DEFAULT_LED_POWER, DEFAULT_LED_WAVELENGTH, LM_FIT_MAX_ITERATIONS


def fit_lm_command(
    values: Annotated[
        pathlib.Path,
        typer.Argument(
            help="Two-column file with the LM-OSL curve (time, counts)",
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    background: Annotated[
        pathlib.Path | None,
        typer.Option(
            "--background",
            "-b",
            help="Two-column background curve measured with the same channels",
            dir_okay=False,
            resolve_path=True,
        ),
    ] = None,
    n_components: Annotated[
        int,
        typer.Option(
            "--components",
            "-n",
            help="Number of first-order components (1 to 7)",
        ),
    ] = 3,
    method: Annotated[
        str,
        typer.Option(
            "--method",
            "-m",
            help="Fitting method: port (bounded trust region) or LM (Levenberg-Marquardt)",
        ),
    ] = "port",
    background_method: Annotated[
        str,
        typer.Option(
            "--bg-method",
            help="Background subtraction: polynomial, linear or channel",
        ),
    ] = "polynomial",
    advanced: Annotated[
        bool,
        typer.Option(
            "--advanced/--no-advanced",
            help="Try randomly perturbed start values before sliding the start window",
        ),
    ] = False,
    confint: Annotated[
        bool,
        typer.Option(
            "--confint/--no-confint",
            help="Compute 68% profile-likelihood intervals and parameter errors",
        ),
    ] = False,
    max_iterations: Annotated[
        int,
        typer.Option(
            "--max-iterations",
            help="Maximum number of function evaluations per attempt",
        ),
    ] = LM_FIT_MAX_ITERATIONS,
    led_power: Annotated[
        float,
        typer.Option("--led-power", help="LED power at the sample (mW/cm²)"),
    ] = DEFAULT_LED_POWER,
    led_wavelength: Annotated[
        float,
        typer.Option("--led-wavelength", help="LED peak wavelength (nm)"),
    ] = DEFAULT_LED_WAVELENGTH,
    seed: Annotated[
        int | None,
        typer.Option("--seed", help="Random seed for the advanced start-value search"),
    ] = None,
    trace: Annotated[
        bool,
        typer.Option("--trace", help="Print optimizer progress for every attempt"),
    ] = False,
    contributions: Annotated[
        pathlib.Path | None,
        typer.Option(
            "--contributions",
            "-c",
            help="Write the component contribution matrix to this CSV file",
            dir_okay=False,
            resolve_path=True,
        ),
    ] = None,
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
    """Decompose an LM-OSL curve into first-order components.

    Examples
    --------
    Three components with the default bounded fit:
        $ lumfit lm curve.csv

    Background subtraction and profile intervals:
        $ lumfit lm curve.csv -b background.csv --confint

    Export the contribution matrix:
        $ lumfit lm curve.csv -n 4 --contributions contributions.csv
    """
    from lumfit.core.domain.config import CurveFitConfig, build_config
    from lumfit.services.curve_fit import CurveFitService
    from lumfit.ui import (
        ConsoleReporter,
        Verbosity,
        close_logging,
        set_verbosity,
        setup_logging,
        show_header,
    )
    from lumfit.ui.tables import print_contributions, print_curve_fit

    set_verbosity(Verbosity.VERBOSE if verbose else Verbosity.NORMAL)
    setup_logging(log_file=log_file, verbose=verbose)
    show_header(f"LM-OSL curve fit: {values.name}")

    with command_errors("LM-OSL curve fit"):
        config = build_config(
            CurveFitConfig,
            n_components=n_components,
            fit_method=method,
            background_method=background_method,
            options={
                "trace": trace,
                "advanced_search": advanced,
                "compute_confidence_intervals": confint,
                "max_iterations": max_iterations,
                "seed": seed,
            },
            stimulation={"led_power": led_power, "led_wavelength": led_wavelength},
        )
        service = CurveFitService(reporter=ConsoleReporter())
        report = service.fit(
            values,
            config,
            background_path=background,
            contributions_path=contributions,
        )
        print_curve_fit(report.result)
        if report.contributions_path is not None and report.result.contributions is not None:
            print_contributions(report.result.contributions)

    close_logging()
    if not report.result.success:
        raise typer.Exit(code=1)
