"""File input and output for the command line workflows."""

from lumfit.io.readers import read_two_column
from lumfit.io.writers import write_frame

__all__ = ["read_two_column", "write_frame"]
