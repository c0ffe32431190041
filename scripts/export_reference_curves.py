#!/usr/bin/env python3
"""
Reference Curve Exporter
========================

Builds the reference string used during development (two identical 30 degC
cells in series behind a bypass diode), reports its maximum power point at
full and half light, and exports the cell and module curve tables as CSV.

Output: <curve_directory>/<node id>.csv
"""

import argparse
import sys
import os

# Add parent directory to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import REFERENCE_CELL, DEFAULT_CONFIG
from engines.cell import SolarCell
from engines.composite import Module
from engines.curve_io import default_curve_path


def build_reference_module() -> Module:
    """Two reference cells in series with a bypass diode"""

    # First cell written parameter by parameter, second one in a single call
    first = SolarCell("testCell")
    for name, value in REFERENCE_CELL.items():
        setattr(first, name, value)
    second = SolarCell.create("testCell2", **REFERENCE_CELL)

    module = Module("testModule")
    module.add_cell(first)
    module.add_cell(second)
    module.bypass = True
    return module


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument('--output', default=DEFAULT_CONFIG['curve_directory'],
                        help="directory receiving the CSV tables")
    args = parser.parse_args(argv)

    print("Reference Curve Export")
    print("=" * 40)

    module = build_reference_module()

    for intensity in (1.0, 0.5):
        V, I, P = module.get_mpp(intensity)
        print(f"Module MPP at li={intensity:.2f}: V={V:.3f} V, I={I:.3f} A, P={P:.3f} W")

    V, I, P = module.cells[0].get_mpp(0.5)
    print(f"Cell MPP at li=0.50:   V={V:.3f} V, I={I:.3f} A, P={P:.3f} W")

    for node in (*module.cells, module):
        path = default_curve_path(node.id, args.output)
        node.export_table(path)
        print(f"Exported {node.id} -> {path}")

    print("\nDone.")


if __name__ == "__main__":
    main()
