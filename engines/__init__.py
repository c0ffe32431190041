#!/usr/bin/env python3
"""
Solar Array Curve Simulator - Engine Package
============================================

Curve engines for hierarchically composed photovoltaic arrays:
- sampling: index math shared by every level of the array tree
- geometry: sun vector, cell normal and effective light intensity
- cell: diode-model curve tables of single cells
- composition: series sum and bypass clipping of curve tables
- composite: Module, SubArray and Cluster nodes
- curve_io: CSV exchange of curve tables
- array_manager: cell selection, bulk parameters and the name directory

Submodules are imported on demand. ``engines.node`` depends on the
operating-point solver in ``optimizer``, which in turn uses
``engines.sampling``.
"""

import importlib
from typing import List

__version__ = "1.0.0"
__all__ = [
    "sampling",
    "geometry",
    "cell",
    "composition",
    "composite",
    "curve_io",
    "array_manager",
]


def get_available_engines() -> List[str]:
    """Return list of engines that import successfully"""
    available = []
    for engine in __all__:
        try:
            importlib.import_module(f"{__name__}.{engine}")
        except ImportError:
            continue
        available.append(engine)
    return available


def engine_status() -> dict:
    """Return detailed status of all engines"""
    available = get_available_engines()
    return {engine: engine in available for engine in __all__}
