"""Table writers for result export."""

from __future__ import annotations

from typing import TYPE_CHECKING

from lumfit.core.shared.exceptions import DataIOError

if TYPE_CHECKING:
    from pathlib import Path

    import pandas as pd


def write_frame(frame: pd.DataFrame, path: Path, *, index: bool = False) -> Path:
    """Write a DataFrame as CSV, creating parent directories as needed.

    Raises
    ------
        DataIOError: If the file cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(path, index=index)
    except OSError as exc:
        msg = f"Could not write {path}: {exc}"
        raise DataIOError(msg) from exc
    return path


__all__ = ["write_frame"]
