"""
Series composition algebra.

Series-connected elements carry the same current, so the composite voltage
at every sample of the shared grid is the sum of the members' voltages at
that same sample. No interpolation takes place. This works for full 2-D
tables and for single-row curves alike.
"""

import numpy as np
from typing import Sequence


def series_sum(tables: Sequence[np.ndarray]) -> np.ndarray:
    """
    Index-aligned sum of member tables.

    Masked (NaN) samples propagate: a string cannot carry a current that
    one of its members cannot.

    Raises:
        ValueError: no tables given, or shapes differ
    """
    if len(tables) == 0:
        raise ValueError("At least one table must be provided")

    shape = np.shape(tables[0])
    for table in tables[1:]:
        if np.shape(table) != shape:
            raise ValueError(f"Table shapes differ: {shape} vs {np.shape(table)}")

    total = np.zeros(shape, dtype=float)
    for table in tables:
        total = total + table
    return total


def apply_bypass(table: np.ndarray) -> np.ndarray:
    """
    Clip a composite table with an ideal parallel bypass diode.

    The diode shorts the string whenever its net voltage would go negative,
    so negative and non-finite samples become 0. Each index is clipped
    independently.
    """
    table = np.asarray(table, dtype=float)
    return np.where(np.isfinite(table) & (table >= 0), table, 0.0)
