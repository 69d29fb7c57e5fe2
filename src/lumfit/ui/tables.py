"""UI tables for displaying fit results.

This module provides functions for creating and displaying Rich tables
with consistent styling across the application. Result containers carry
no rendering logic; everything terminal specific lives here.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

from rich import box
from rich.table import Table

from lumfit.ui.console import console

if TYPE_CHECKING:
    from lumfit.core.fitting.contribution import ContributionMatrix
    from lumfit.core.results.curve_fit import FitResult
    from lumfit.core.results.mixture import MixtureModel, MixtureSweep, SingleComponentFit

__all__ = [
    "create_table",
    "print_contributions",
    "print_curve_fit",
    "print_mixture_model",
    "print_mixture_sweep",
    "print_summary",
]

_MISSING = "[missing]NA[/missing]"


def create_table(title: str | None = None, show_header: bool = True) -> Table:
    """Create a standard table with consistent styling.

    Args:
        title: Optional table title
        show_header: Whether to show table header

    Returns
    -------
        Configured Table instance
    """
    return Table(
        title=title,
        title_style="header" if title else None,
        box=box.ROUNDED,
        show_header=show_header,
        header_style="bold cyan",
        border_style="dim",
    )


def _fmt(value: float | None, spec: str = ".4g") -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return _MISSING
    return format(value, spec)


def print_summary(items: dict[str, Any], title: str = "Summary") -> None:
    """Print a standard two-column summary table.

    Args:
        items: Dictionary of key-value pairs to display
        title: Table title
    """
    table = create_table(title, show_header=False)
    table.add_column("Item", style="metric")
    table.add_column("Value", style="value")

    for key, value in items.items():
        table.add_row(key, str(value))

    console.print(table)


def print_curve_fit(result: FitResult) -> None:
    """Print the fitted components and the fit summary of an LM-OSL fit."""
    if not result.success:
        reason = result.failure_reason or "unknown reason"
        console.print(
            f"[error]Fitting failed[/error] after {result.n_attempts} attempt(s): {reason}"
        )
        if result.diagnostic is not None:
            table = create_table("Last start values")
            table.add_column("#", justify="right")
            table.add_column("Im", justify="right")
            table.add_column("xm", justify="right")
            for i, (intensity, position) in enumerate(result.diagnostic.start.as_array(), 1):
                table.add_row(str(i), _fmt(intensity), _fmt(position))
            console.print(table)
        return

    table = create_table(f"{result.n_components}-component LM-OSL fit ({result.method})")
    table.add_column("#", justify="right", style="key")
    for header in ("Im", "xm (s)", "b (1/s)", "± b", "n0", "± n0", "cs (cm²)", "rel. cs"):
        table.add_column(header, justify="right")

    for c in result.components:
        table.add_row(
            str(c.index),
            _fmt(c.intensity),
            _fmt(c.position),
            _fmt(c.detrapping_rate, ".3e"),
            _fmt(c.detrapping_rate_error, ".3e"),
            _fmt(c.initial_population, ".3e"),
            _fmt(c.initial_population_error, ".3e"),
            _fmt(c.cross_section, ".3e"),
            _fmt(c.relative_cross_section, ".4f"),
        )
    console.print(table)

    print_summary(
        {
            "pseudo-R²": _fmt(result.pseudo_r2, ".4f"),
            "RSS": _fmt(result.rss),
            "Attempts": result.n_attempts,
            "Stimulation intensity (1/s/cm²)": _fmt(result.stimulation_intensity, ".3e"),
            "Background": result.background.method if result.background else "none",
        },
        title="Fit summary",
    )


def print_contributions(contributions: ContributionMatrix) -> None:
    """Print the share of each component in the fitted sum across the curve."""
    table = create_table("Component contributions (% of sum)")
    table.add_column("Component", style="key")
    table.add_column("First channel", justify="right")
    table.add_column("Mean", justify="right")
    table.add_column("Maximum", justify="right")
    table.add_column("x at maximum", justify="right")

    for i in range(contributions.n_components):
        column = contributions.contributions[:, i]
        peak = int(column.argmax())
        table.add_row(
            f"comp{i + 1}",
            _fmt(float(column[0]), ".2f"),
            _fmt(float(column.mean()), ".2f"),
            _fmt(float(column[peak]), ".2f"),
            _fmt(float(contributions.x[peak])),
        )
    console.print(table)


def _print_single_component(reference: SingleComponentFit) -> None:
    print_summary(
        {
            "dose": _fmt(reference.dose, ".4f"),
            "sigmab": _fmt(reference.sigmab, ".4f"),
            "llik": _fmt(reference.log_likelihood, ".4f"),
            "BIC": _fmt(reference.bic, ".4f"),
        },
        title="Single component model",
    )


def _print_grain_probability(model: MixtureModel) -> None:
    table = create_table(f"Grain probabilities (k={model.n_components})")
    table.add_column("Grain", justify="right", style="key")
    for i in range(1, model.n_components + 1):
        table.add_column(f"comp{i}", justify="right")
    for grain, row in enumerate(model.grain_probability, 1):
        table.add_row(str(grain), *(_fmt(float(p), ".3f") for p in row))
    console.print(table)


def print_mixture_model(model: MixtureModel, *, grain_probability: bool = False) -> None:
    """Print the components and statistics of a single mixture model."""
    table = create_table(f"Finite mixture model: {model.n_components} components")
    table.add_column("", style="key")
    for i in range(1, model.n_components + 1):
        table.add_column(f"comp{i}", justify="right")

    frame = model.summary_frame()
    for label, row in frame.iterrows():
        table.add_row(str(label), *(_fmt(float(v), ".4f") for v in row))
    console.print(table)

    print_summary(
        {
            "sigmab": _fmt(model.sigmab, ".4f"),
            "n": model.n_observations,
            "llik": _fmt(model.log_likelihood, ".4f"),
            "BIC": _fmt(model.bic, ".4f"),
        },
        title="Statistics",
    )
    _print_single_component(model.single_component)

    for message in model.diagnostics:
        console.print(f"[warning]{message}[/warning]")

    if grain_probability:
        _print_grain_probability(model)


def print_mixture_sweep(sweep: MixtureSweep, *, grain_probability: bool = False) -> None:
    """Print the ragged summary of a sweep over component counts."""
    summary = sweep.summary
    table = create_table("Finite mixture models")
    table.add_column("", style="key")
    for column in summary.columns:
        table.add_column(str(column), justify="right")
    for label, row in summary.iterrows():
        table.add_row(str(label), *(_fmt(float(v), ".2f") for v in row))
    for label, row in sweep.statistics.iterrows():
        table.add_row(f"[metric]{label}[/metric]", *(_fmt(float(v), ".3f") for v in row))
    console.print(table)

    console.print(f"Lowest BIC for [metric]k={sweep.best_k}[/metric]")
    if sweep.significant_k is not None:
        console.print(
            f"Log likelihood more than tripled when going to [metric]k={sweep.significant_k}"
            "[/metric]"
        )
    _print_single_component(sweep.single_component)

    for model in sweep.models:
        for message in model.diagnostics:
            console.print(f"[warning]{message}[/warning]")

    if grain_probability:
        for model in sweep.models:
            _print_grain_probability(model)
