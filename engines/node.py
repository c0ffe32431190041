#!/usr/bin/env python3
"""
Curve Node Base Class
=====================

Every element of the array tree (cell, module, subarray, cluster) owns a
precomputed curve table and answers the same set of queries from it:

- get_current / get_voltage      (nearest-value search / exact read)
- get_voc / get_isc              (open-circuit voltage / short-circuit current)
- get_power_v / get_power_i      (power at a voltage / at a current)
- get_mpp                        (maximum power point)
- extract_parameters             (all of the above in one dictionary)

Queries take an ambient light intensity and, optionally, a sun position
(zenith and azimuth in degrees). Without a sun position the intensity is
taken as already incident on the cell planes.
"""

import numpy as np
from typing import Dict, Optional, Union

from config import TABLE_SHAPE
from engines.exceptions import IncompleteDefinitionError, CurveFileError
from engines import curve_io
from optimizer.operating_point import (
    MPPResult, voltage_at, current_at, power_at_current, power_at_voltage,
    open_circuit_voltage, short_circuit_current, maximum_power_point,
    curve_parameters,
)

ArrayLike = Union[float, np.ndarray]


class CurveNode:
    """
    Common behaviour of every node exposing the curve-query capability set.

    Subclasses provide ``is_defined``, ``optical_current_max`` and
    ``curve``. The table itself is kept in ``_table`` and replaced through
    ``_install_table`` / ``_drop_table``, which bump ``revision`` so that
    composites holding this node can tell their own table is out of date.
    """

    incomplete_error = IncompleteDefinitionError

    def __init__(self, node_id):
        self.id = node_id
        self.parent_id = None   # informational back-reference only
        self.revision = 0
        self._table: Optional[np.ndarray] = None

    # ------------------------------------------------------------------
    # Table management
    # ------------------------------------------------------------------

    @property
    def is_defined(self) -> bool:
        raise NotImplementedError

    @property
    def optical_current_max(self) -> float:
        """Upper bound of the MPP search [A]"""
        raise NotImplementedError

    @property
    def table(self) -> np.ndarray:
        """Read-only curve table of shape (intensity rows, current columns)"""
        self._sync()
        if not self.is_defined or self._table is None:
            raise self.incomplete_error(
                f"{type(self).__name__} {self.id!r} must be fully defined"
            )
        return self._table

    def _sync(self):
        """Bring the table up to date with any changed children"""

    def _install_table(self, table: np.ndarray):
        table = np.array(table, dtype=float)
        table.flags.writeable = False
        self._table = table
        self.revision += 1

    def _drop_table(self):
        if self._table is not None:
            self._table = None
            self.revision += 1

    def curve(self, intensity: float,
              sun_zenith: Optional[float] = None,
              sun_azimuth: float = 0.0) -> np.ndarray:
        """Voltage per current sample at the given operating conditions"""
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_current(self, voltage: ArrayLike, intensity: float,
                    sun_zenith: Optional[float] = None, sun_azimuth: float = 0.0):
        """Current [A] at the given voltage(s)"""
        return current_at(self.curve(intensity, sun_zenith, sun_azimuth), voltage)

    def get_voltage(self, current: ArrayLike, intensity: float,
                    sun_zenith: Optional[float] = None, sun_azimuth: float = 0.0):
        """Voltage [V] at the given current(s)"""
        return voltage_at(self.curve(intensity, sun_zenith, sun_azimuth), current)

    def get_voc(self, intensity: float,
                sun_zenith: Optional[float] = None, sun_azimuth: float = 0.0) -> float:
        return open_circuit_voltage(self.curve(intensity, sun_zenith, sun_azimuth))

    def get_isc(self, intensity: float,
                sun_zenith: Optional[float] = None, sun_azimuth: float = 0.0) -> float:
        return short_circuit_current(self.curve(intensity, sun_zenith, sun_azimuth))

    def get_power_v(self, voltage: ArrayLike, intensity: float,
                    sun_zenith: Optional[float] = None, sun_azimuth: float = 0.0):
        """Power [W] at the given voltage(s)"""
        return power_at_voltage(self.curve(intensity, sun_zenith, sun_azimuth), voltage)

    def get_power_i(self, current: ArrayLike, intensity: float,
                    sun_zenith: Optional[float] = None, sun_azimuth: float = 0.0):
        """Power [W] at the given current(s)"""
        return power_at_current(self.curve(intensity, sun_zenith, sun_azimuth), current)

    def get_mpp(self, intensity: float,
                sun_zenith: Optional[float] = None, sun_azimuth: float = 0.0) -> MPPResult:
        """Maximum power point (V_mpp, I_mpp, P_mpp)"""
        curve = self.curve(intensity, sun_zenith, sun_azimuth)
        return maximum_power_point(curve, self.optical_current_max)

    def extract_parameters(self, intensity: float,
                           sun_zenith: Optional[float] = None,
                           sun_azimuth: float = 0.0) -> Dict[str, float]:
        """
        Extract performance parameters at the given operating conditions.

        Returns:
            Dictionary with Isc, Voc, Vmpp, Impp, Pmpp, FF
        """
        curve = self.curve(intensity, sun_zenith, sun_azimuth)
        return curve_parameters(curve, self.optical_current_max)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def export_table(self, path):
        """Write the curve table to a CSV file"""
        curve_io.write_curve_table(self.table, path)

    def import_table(self, path):
        """
        Replace the curve table with one read from a CSV file.

        The node must be fully defined. The file is read and validated
        before anything is replaced, so a failed import leaves the node
        untouched. The next parameter or structural change regenerates
        the table from the node's own definition.
        """
        _ = self.table  # raises if the node is not fully defined
        table = curve_io.read_curve_table(path)
        if table.shape != TABLE_SHAPE:
            raise CurveFileError(
                f"Expected a table of shape {TABLE_SHAPE}, got {table.shape}: {path}"
            )
        self._install_table(table)
        self._after_import()

    def _after_import(self):
        pass
