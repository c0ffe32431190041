#!/usr/bin/env python3
"""
Operating Point Optimizer Package
=================================

Lookup and maximum-power-point search on sampled I-V curves. Every node of
the array tree (cell, module, subarray, cluster) answers its operating-point
queries through these same functions.

Available solvers:
- operating_point: nearest-sample lookups and bounded MPP search
"""

__version__ = "1.0.0"
__all__ = [
    "operating_point",
]

# Quantities every node can report
OPERATING_POINT_QUANTITIES = [
    'Isc',      # short-circuit current (A)
    'Voc',      # open-circuit voltage (V)
    'Vmpp',     # voltage at maximum power (V)
    'Impp',     # current at maximum power (A)
    'Pmpp',     # maximum power (W)
    'FF',       # fill factor
]
