"""
Operating Point Solver for Sampled I-V Curves

Lookup and maximum-power-point search shared by every node of the array
tree. All functions work on a single curve: a 1-D array holding the node's
voltage at each sample of the shared current grid. Masked samples (NaN)
mark currents the node cannot physically carry.

The power curve of a sampled table is piecewise constant, so no gradient is
available. The MPP search therefore uses scipy's bounded Brent method
(golden-section steps with parabolic interpolation) on -P(I) and treats
the table lookup as an opaque objective. The search interval ends at the
last current that still produces power, and the best grid sample backs up
the result when Brent stops on a lower step. On a flat plateau at the
maximum it may stop anywhere inside the plateau.

References:
- Brent, R.P. "Algorithms for Minimization without Derivatives" (1973)
- Esram, T. & Chapman, P.L. "Comparison of Photovoltaic Array Maximum Power
  Point Tracking Techniques" IEEE Trans. Energy Convers. 22, 439 (2007)
"""

import warnings
import numpy as np
from typing import Dict, NamedTuple, Optional, Union
from scipy.optimize import minimize_scalar

from config import CURRENT_GRID, CURRENT_MAX, DEFAULT_CONFIG
from engines.sampling import current_to_index

ArrayLike = Union[float, np.ndarray]


class MPPResult(NamedTuple):
    """Maximum-power-point operating values"""
    V_mpp: float    # V
    I_mpp: float    # A
    P_mpp: float    # W


def _as_output(values: np.ndarray):
    values = np.asarray(values)
    if values.ndim == 0:
        return float(values)
    return values


def voltage_at(curve: np.ndarray, current: ArrayLike):
    """Exact indexed read of the voltage at the given current(s)"""
    return _as_output(curve[current_to_index(current)])


def current_at(curve: np.ndarray, voltage: ArrayLike):
    """
    Current whose sampled voltage lies closest to the requested voltage.

    Voltage is not gridded, so this is a nearest-value search over the
    finite samples of the curve. Ties resolve to the lowest current.
    """
    finite = np.where(np.isfinite(curve), curve, np.nan)
    if not np.any(np.isfinite(finite)):
        raise ValueError("Curve holds no finite samples")

    V = np.asarray(voltage, dtype=float)
    distance = np.abs(finite[np.newaxis, :] - V.reshape(-1, 1))
    idx = np.nanargmin(distance, axis=1)
    currents = CURRENT_GRID[idx]

    if V.ndim == 0:
        return float(currents[0])
    return currents.reshape(V.shape)


def power_at_current(curve: np.ndarray, current: ArrayLike):
    """P = I * V(I); masked or infinite samples count as zero power"""
    I = np.asarray(current, dtype=float)
    P = I * np.asarray(voltage_at(curve, I))
    return _as_output(np.where(np.isfinite(P), P, 0.0))


def power_at_voltage(curve: np.ndarray, voltage: ArrayLike):
    """P = V * I(V); non-finite results count as zero power"""
    V = np.asarray(voltage, dtype=float)
    P = V * np.asarray(current_at(curve, V))
    return _as_output(np.where(np.isfinite(P), P, 0.0))


def open_circuit_voltage(curve: np.ndarray) -> float:
    """Voltage at zero current"""
    return voltage_at(curve, 0.0)


def short_circuit_current(curve: np.ndarray) -> float:
    """Current at zero voltage"""
    return current_at(curve, 0.0)


def maximum_power_point(curve: np.ndarray,
                        current_max: float,
                        xatol: Optional[float] = None,
                        maxiter: Optional[int] = None) -> MPPResult:
    """
    Find the maximum power point of a sampled curve.

    Args:
        curve: Voltage per current sample [V]
        current_max: Upper bound of the search [A], normally the optical
            current of the first cell in the string
        xatol: Absolute current tolerance [A]
        maxiter: Iteration limit of the bounded search

    Returns:
        MPPResult(V_mpp, I_mpp, P_mpp). All zeros when no sample in
        [0, current_max] produces positive power.
    """
    xatol = DEFAULT_CONFIG['mpp_xatol'] if xatol is None else xatol
    maxiter = DEFAULT_CONFIG['mpp_maxiter'] if maxiter is None else maxiter

    upper = min(float(current_max), CURRENT_MAX)
    if upper <= 0:
        return MPPResult(0.0, 0.0, 0.0)

    # Power on the grid samples inside [0, upper]
    start, stop = current_to_index(0.0), current_to_index(upper)
    grid_currents = CURRENT_GRID[start:stop + 1]
    grid_power = power_at_current(curve, grid_currents)
    producing = np.nonzero(grid_power > 0)[0]
    if producing.size == 0:
        return MPPResult(0.0, 0.0, 0.0)

    # Masked or clipped samples past the last producing current form a zero
    # plateau that would capture the search at low light
    upper = min(upper, float(grid_currents[producing[-1]]))

    def negative_power(I):
        return -power_at_current(curve, I)

    result = minimize_scalar(negative_power,
                             bounds=(0.0, upper),
                             method='bounded',
                             options={'xatol': xatol, 'maxiter': maxiter})
    if not result.success:
        warnings.warn(f"MPP search did not converge: {result.message}", RuntimeWarning)

    I_mpp = float(result.x)
    peak = int(np.argmax(grid_power))
    if power_at_current(curve, I_mpp) < grid_power[peak]:
        # Brent stalled on a step of the sampled curve; take the best sample
        I_mpp = float(grid_currents[peak])

    V_mpp = voltage_at(curve, I_mpp)
    if not np.isfinite(V_mpp):
        return MPPResult(0.0, 0.0, 0.0)

    return MPPResult(V_mpp, I_mpp, I_mpp * V_mpp)


def curve_parameters(curve: np.ndarray, current_max: float) -> Dict[str, float]:
    """
    Extract the usual performance parameters from a curve.

    Returns:
        Dictionary with Isc, Voc, Vmpp, Impp, Pmpp, FF
    """
    Isc = short_circuit_current(curve)
    Voc = open_circuit_voltage(curve)
    Vmpp, Impp, Pmpp = maximum_power_point(curve, current_max)

    FF = Pmpp / (Isc * Voc) if (Isc * Voc > 0) else 0.0

    return {
        'Isc': Isc,     # A
        'Voc': Voc,     # V
        'Vmpp': Vmpp,   # V
        'Impp': Impp,   # A
        'Pmpp': Pmpp,   # W
        'FF': FF,       # dimensionless
    }
