"""Shared typing aliases used across LumFit."""

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

FloatArray = npt.NDArray[np.float64]
IntArray = npt.NDArray[np.int_]

# Anything numpy can turn into an (n, 2) table: arrays, nested lists, DataFrames
TableLike = npt.ArrayLike

ComponentCount = int | Sequence[int]
