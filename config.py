#!/usr/bin/env python3
"""
Solar Array Curve Simulator - Configuration & Sampling Grid
===========================================================

Physical constants, the process-wide sampling grid and default settings
shared by every level of the array tree (cell, module, subarray, cluster).

Every curve table in the simulator is sampled on the same grid. Series
composition is an index-wise sum, so the grid below must never differ
between two nodes that are connected together.

References:
- Shockley, W. "The theory of p-n junctions in semiconductors" (1949)
- Duffie & Beckman, "Solar Engineering of Thermal Processes" 4th Ed. (2013)
"""

import numpy as np

# =============================================================================
# PHYSICAL CONSTANTS
# =============================================================================

# q/k as used by the cell diode model [K/V]; thermal voltage = T / 11586
THERMAL_VOLTAGE_DIVISOR = 11586

# =============================================================================
# SAMPLING GRID
# =============================================================================

CURRENT_MIN = -1.0          # A
CURRENT_MAX = 10.0          # A
CURRENT_RESOLUTION = 100    # samples per ampere

INTENSITY_MIN = 0.0         # fraction of full light
INTENSITY_MAX = 1.0
INTENSITY_RESOLUTION = 100  # samples per unit intensity

N_CURRENT_SAMPLES = int(round((CURRENT_MAX - CURRENT_MIN) * CURRENT_RESOLUTION)) + 1   # 1101
N_INTENSITY_SAMPLES = int(round((INTENSITY_MAX - INTENSITY_MIN) * INTENSITY_RESOLUTION)) + 1  # 101

CURRENT_STEP = 1.0 / CURRENT_RESOLUTION

CURRENT_GRID = np.linspace(CURRENT_MIN, CURRENT_MAX, N_CURRENT_SAMPLES)
INTENSITY_GRID = np.linspace(INTENSITY_MIN, INTENSITY_MAX, N_INTENSITY_SAMPLES)

TABLE_SHAPE = (N_INTENSITY_SAMPLES, N_CURRENT_SAMPLES)

# Sentinel for physically infeasible samples (log argument <= 0)
MASKED = np.nan

# =============================================================================
# REFERENCE DATA
# =============================================================================

# Test cell used throughout development (30 degC, flat mounting)
REFERENCE_CELL = {
    'eta': 2.0,        # ideality factor
    'Is': 0.005,       # A, reverse saturation current
    'R': 0.003,        # Ohm, series resistance
    'IoptMax': 2.0,    # A, optical current in full light
    'T': 303.0,        # K
    'theta': 0.0,      # deg, pitch
    'phi': 0.0,        # deg, roll
}

# Display colours handed out to subarrays in creation order
SUBARRAY_COLORS = ['#D95319', '#EDB120', '#7E2F8E', '#77AC30', '#4DBEEE', '#A2142F']

# =============================================================================
# GLOBAL CONFIGURATION
# =============================================================================

DEFAULT_CONFIG = {
    'mpp_xatol': 1e-4,                  # A, bounded search tolerance (< half a step)
    'mpp_maxiter': 500,                 # bounded search iteration limit
    'curve_directory': 'CurveData',     # default export location
    'csv_float_format': '%.10g',        # precision of exported tables
    'array_cell_count': 257,            # cells owned by an ArrayManager
}

if __name__ == "__main__":
    print("Solar Array Curve Simulator - Configuration")
    print("=" * 50)
    print(f"Current grid: [{CURRENT_MIN}, {CURRENT_MAX}] A, {N_CURRENT_SAMPLES} samples")
    print(f"Intensity grid: [{INTENSITY_MIN}, {INTENSITY_MAX}], {N_INTENSITY_SAMPLES} samples")
    print(f"Table shape: {TABLE_SHAPE}")
    print(f"Reference cell: {REFERENCE_CELL}")
