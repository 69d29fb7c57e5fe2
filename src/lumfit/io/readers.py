"""Readers for two-column numeric tables (curves and dose lists)."""

from __future__ import annotations

import csv
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

from lumfit.core.shared.exceptions import DataIOError

if TYPE_CHECKING:
    from pathlib import Path

    from lumfit.core.shared.typing import FloatArray


def read_two_column(path: Path) -> FloatArray:
    """Read a delimited table and return its first two numeric columns.

    The delimiter (comma, tab, semicolon or whitespace) is sniffed, lines
    starting with ``#`` are skipped and a non-numeric first row is treated as
    a header.

    Raises
    ------
        DataIOError: If the file cannot be read or has fewer than two numeric
            columns
    """
    if not path.exists():
        msg = f"File not found: {path}"
        raise DataIOError(msg)

    try:
        frame = pd.read_csv(path, sep=None, engine="python", comment="#", header=None)
    except (OSError, ValueError, csv.Error, pd.errors.ParserError) as exc:
        msg = f"Could not read {path}: {exc}"
        raise DataIOError(msg) from exc

    if frame.shape[1] < 2:
        msg = f"{path} must have at least two columns, found {frame.shape[1]}"
        raise DataIOError(msg)

    frame = frame.iloc[:, :2]
    first_row = pd.to_numeric(frame.iloc[0], errors="coerce")
    if first_row.isna().any():
        frame = frame.iloc[1:]

    numeric = frame.apply(pd.to_numeric, errors="coerce")
    if numeric.empty or numeric.isna().to_numpy().any():
        msg = f"{path} contains non-numeric values"
        raise DataIOError(msg)

    return numeric.to_numpy(dtype=np.float64)


__all__ = ["read_two_column"]
