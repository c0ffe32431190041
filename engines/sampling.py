#!/usr/bin/env python3
"""
Index / Sampling Math
=====================

Pure conversions between physical units and curve-table indices. Every node
in the array tree samples its curve on the same grid (see ``config``), so
these helpers are shared by cells, modules, subarrays and clusters alike.

Conventions:
- Indices are 0-based: ``current_to_index(-1.0) == 0`` and
  ``current_to_index(10.0) == 1100``.
- Rounding is half-up onto the nearest sample, so a lookup carries a
  quantisation error of at most half a sampling step (0.005 A).
- Currents outside the grid are rejected with ``SamplingDomainError``.
  Intensities are clamped into [0, 1]: an effective intensity below zero is
  the normal result for a cell facing away from the sun.
"""

import numpy as np
from typing import Union

from config import (
    CURRENT_MIN, CURRENT_MAX, CURRENT_RESOLUTION, CURRENT_STEP,
    INTENSITY_MIN, INTENSITY_MAX, INTENSITY_RESOLUTION,
    N_CURRENT_SAMPLES, N_INTENSITY_SAMPLES,
)
from engines.exceptions import SamplingDomainError

ArrayLike = Union[float, np.ndarray]


def _scalar_or_array(values: np.ndarray):
    """Return a Python scalar for 0-d input, the array otherwise"""
    if values.ndim == 0:
        return values.item()
    return values


def _round_half_up(values: np.ndarray) -> np.ndarray:
    # 1.005 * 100 evaluates to 100.4999..., so ties are settled after rounding
    # away representation error
    return np.floor(np.round(values, 9) + 0.5).astype(np.int64)


def current_to_index(current: ArrayLike):
    """
    Convert absolute current(s) into column index(es) of a curve table.

    Args:
        current: Current [A], scalar or array

    Returns:
        0-based column index (int or integer array)

    Raises:
        SamplingDomainError: current is non-finite or more than half a
            sampling step outside [CURRENT_MIN, CURRENT_MAX]
    """
    I = np.asarray(current, dtype=float)
    tolerance = CURRENT_STEP / 2

    if not np.all(np.isfinite(I)):
        raise SamplingDomainError("Current must be finite")
    if np.any(I < CURRENT_MIN - tolerance) or np.any(I > CURRENT_MAX + tolerance):
        raise SamplingDomainError(
            f"Current outside sampling domain [{CURRENT_MIN}, {CURRENT_MAX}] A"
        )

    idx = _round_half_up((I - CURRENT_MIN) * CURRENT_RESOLUTION)
    idx = np.clip(idx, 0, N_CURRENT_SAMPLES - 1)
    return _scalar_or_array(idx)


def index_to_current(index: ArrayLike):
    """Convert column index(es) back into absolute current [A]"""
    idx = np.asarray(index)
    if np.any(idx < 0) or np.any(idx >= N_CURRENT_SAMPLES):
        raise SamplingDomainError(f"Current index outside [0, {N_CURRENT_SAMPLES - 1}]")
    return _scalar_or_array(CURRENT_MIN + idx / CURRENT_RESOLUTION)


def intensity_to_row_index(intensity: ArrayLike):
    """
    Convert light intensity into row index(es) of a curve table.

    Intensities are clamped into [INTENSITY_MIN, INTENSITY_MAX] before
    rounding, so a negative effective intensity reads the dark row.
    """
    li = np.asarray(intensity, dtype=float)
    if not np.all(np.isfinite(li)):
        raise SamplingDomainError("Light intensity must be finite")

    li = np.clip(li, INTENSITY_MIN, INTENSITY_MAX)
    row = _round_half_up((li - INTENSITY_MIN) * INTENSITY_RESOLUTION)
    row = np.clip(row, 0, N_INTENSITY_SAMPLES - 1)
    return _scalar_or_array(row)


def row_index_to_intensity(row: ArrayLike):
    """Convert row index(es) back into light intensity"""
    idx = np.asarray(row)
    if np.any(idx < 0) or np.any(idx >= N_INTENSITY_SAMPLES):
        raise SamplingDomainError(f"Intensity index outside [0, {N_INTENSITY_SAMPLES - 1}]")
    return _scalar_or_array(INTENSITY_MIN + idx / INTENSITY_RESOLUTION)


def quantization_error() -> float:
    """Worst-case current error of a nearest-sample lookup [A]"""
    return CURRENT_STEP / 2
