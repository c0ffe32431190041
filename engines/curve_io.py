"""
Curve table files.

Tables are exchanged as plain CSV without header: one row per light
intensity sample, one column per current sample, voltages as numbers and
undefined samples written as ``NaN`` (``Inf`` is accepted on read). A file
holding a single row of current samples is read back as a flat curve.
"""

import os
import numpy as np
import pandas as pd
from typing import Union

from config import N_CURRENT_SAMPLES, TABLE_SHAPE, DEFAULT_CONFIG
from engines.exceptions import CurveFileError


def read_curve_table(path) -> np.ndarray:
    """
    Read a curve table from a CSV file.

    Returns:
        Array of shape TABLE_SHAPE, or a flat curve of N_CURRENT_SAMPLES

    Raises:
        CurveFileError: file missing or unreadable, non-numeric content,
            or a shape that does not match the sampling grid
    """
    try:
        frame = pd.read_csv(path, header=None)
    except (OSError, ValueError) as exc:
        raise CurveFileError(f"Could not read curve table {path}: {exc}") from exc

    try:
        table = frame.apply(pd.to_numeric, errors='raise').to_numpy(dtype=float)
    except (TypeError, ValueError) as exc:
        raise CurveFileError(f"Curve table {path} holds non-numeric data") from exc

    if table.shape == (1, N_CURRENT_SAMPLES):
        return table[0]
    if table.shape != TABLE_SHAPE:
        raise CurveFileError(
            f"Curve table {path} has shape {table.shape}, expected {TABLE_SHAPE} "
            f"or (1, {N_CURRENT_SAMPLES})"
        )
    return table


def write_curve_table(table: Union[np.ndarray, "CurveNode"], path):
    """
    Write a curve table (or a node's table) to a CSV file.

    Parent directories are created as needed.

    Raises:
        CurveFileError: table has the wrong shape or the file cannot be written
    """
    if hasattr(table, 'table'):
        table = table.table

    data = np.atleast_2d(np.asarray(table, dtype=float))
    if data.shape[-1] != N_CURRENT_SAMPLES:
        raise CurveFileError(
            f"Curve table must have {N_CURRENT_SAMPLES} current samples, got {data.shape[-1]}"
        )

    try:
        directory = os.path.dirname(os.fspath(path))
        if directory:
            os.makedirs(directory, exist_ok=True)
        pd.DataFrame(data).to_csv(path, header=False, index=False, na_rep='NaN',
                                  float_format=DEFAULT_CONFIG['csv_float_format'])
    except OSError as exc:
        raise CurveFileError(f"Could not write curve table {path}: {exc}") from exc


def default_curve_path(node_id, directory: str = None) -> str:
    """Location of a node's exported table in the curve-data directory"""
    directory = DEFAULT_CONFIG['curve_directory'] if directory is None else directory
    return os.path.join(directory, f"{node_id}.csv")
