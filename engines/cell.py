#!/usr/bin/env python3
"""
Solar Cell Curve Generator
==========================

Single-cell model of the array tree. A cell is described by seven physical
parameters and stores its I-V characteristic as a table of voltages sampled
over the shared (light intensity x current) grid.

Diode model (series resistance, no shunt path):

    V(I, li) = eta * (T / 11586) * ln((IoptMax * li - I) / Is + 1) - I * R

Samples where the logarithm argument is <= 0 lie beyond the current the
cell can carry at that intensity. They are masked with NaN instead of
raising, and downstream composition and power evaluation treat them as
zero contribution.

Features:
- Reactive regeneration: every parameter write re-checks completeness and
  regenerates the table as soon as the cell is fully defined
- Batch parameter writes with a single regeneration
- Sun incidence projection onto the cell normal at query time

References:
- Shockley, W. "The theory of p-n junctions in semiconductors" (1949)
- Green, M.A. "Solar Cells: Operating Principles, Technology, and System Applications" (1982)
"""

import numpy as np
from typing import Dict, Optional

from config import (
    CURRENT_GRID, INTENSITY_GRID, THERMAL_VOLTAGE_DIVISOR, MASKED,
)
from engines.exceptions import CellIncompleteError
from engines.geometry import effective_intensity
from engines.node import CurveNode
from engines.sampling import intensity_to_row_index

PARAMETER_NAMES = ('eta', 'Is', 'R', 'IoptMax', 'T', 'theta', 'phi')


def generate_curve_table(eta: float, Is: float, R: float,
                         IoptMax: float, T: float) -> np.ndarray:
    """
    Evaluate the diode model over the whole sampling grid.

    Args:
        eta: Ideality factor
        Is: Reverse-bias saturation current [A]
        R: Series resistance [Ohm]
        IoptMax: Optical current in full light [A]
        T: Cell temperature [K]

    Returns:
        Voltage table [V] of shape (intensity samples, current samples)
    """
    current = CURRENT_GRID[np.newaxis, :]
    photo_current = INTENSITY_GRID[:, np.newaxis] * IoptMax

    log_argument = (photo_current - current) / Is + 1.0
    with np.errstate(divide='ignore', invalid='ignore'):
        log_term = np.log(log_argument)

    table = eta * (T / THERMAL_VOLTAGE_DIVISOR) * log_term - current * R
    table[log_argument <= 0] = MASKED
    return table


class _CellParameter:
    """Validated cell parameter; writing it triggers regeneration"""

    def __init__(self, minimum: Optional[float] = None, inclusive: bool = False):
        self.minimum = minimum
        self.inclusive = inclusive

    def __set_name__(self, owner, name):
        self.name = name
        self.attr = '_' + name

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return getattr(obj, self.attr)

    def __set__(self, obj, value):
        setattr(obj, self.attr, self.validate(value))
        obj._on_parameter_change()

    def validate(self, value) -> Optional[float]:
        if value is None:
            return None
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise ValueError(f"{self.name} must be a number, got {value!r}")

        if not np.isfinite(value):
            raise ValueError(f"{self.name} must be finite")
        if self.minimum is not None:
            if self.inclusive and value < self.minimum:
                raise ValueError(f"{self.name} must be >= {self.minimum}")
            if not self.inclusive and value <= self.minimum:
                raise ValueError(f"{self.name} must be > {self.minimum}")
        return value


class SolarCell(CurveNode):
    """
    Single solar cell with a reactive curve table.

    Parameters can be written one by one (each write re-checks completeness)
    or in one go through ``set_parameters``. Queries on a cell that is not
    fully defined raise ``CellIncompleteError``.
    """

    incomplete_error = CellIncompleteError

    eta = _CellParameter(minimum=0.0)                   # ideality factor
    Is = _CellParameter(minimum=0.0)                    # saturation current [A]
    R = _CellParameter(minimum=0.0, inclusive=True)     # series resistance [Ohm]
    IoptMax = _CellParameter(minimum=0.0)               # optical current in full light [A]
    T = _CellParameter(minimum=0.0)                     # temperature [K]
    theta = _CellParameter()                            # pitch angle [deg], 0 when flat
    phi = _CellParameter()                              # roll angle [deg], 0 when flat

    def __init__(self, cell_id, **parameters):
        """
        Initialize a cell, optionally with some of its parameters.

        Args:
            cell_id: Identifier for the cell
            **parameters: Any of eta, Is, R, IoptMax, T, theta, phi
        """
        super().__init__(cell_id)
        for name in PARAMETER_NAMES:
            setattr(self, '_' + name, None)
        if parameters:
            self.set_parameters(**parameters)

    @classmethod
    def create(cls, cell_id, eta: float, Is: float, R: float, IoptMax: float,
               T: float, theta: float = 0.0, phi: float = 0.0) -> 'SolarCell':
        """Create a fully defined cell; mounting angles default to flat"""
        return cls(cell_id, eta=eta, Is=Is, R=R, IoptMax=IoptMax, T=T,
                   theta=theta, phi=phi)

    @property
    def parameters(self) -> Dict[str, Optional[float]]:
        return {name: getattr(self, name) for name in PARAMETER_NAMES}

    @property
    def is_defined(self) -> bool:
        return all(getattr(self, name) is not None for name in PARAMETER_NAMES)

    def set_parameters(self, **values):
        """
        Validate and apply several parameters with a single regeneration.

        Nothing is written unless every value is valid.
        """
        unknown = set(values) - set(PARAMETER_NAMES)
        if unknown:
            raise TypeError(f"Unknown cell parameter(s): {sorted(unknown)}")

        validated = {name: getattr(type(self), name).validate(value)
                     for name, value in values.items()}
        for name, value in validated.items():
            setattr(self, '_' + name, value)
        self._on_parameter_change()

    def _on_parameter_change(self):
        if self.is_defined:
            self._install_table(generate_curve_table(
                self.eta, self.Is, self.R, self.IoptMax, self.T
            ))
        else:
            self._drop_table()

    @property
    def optical_current_max(self) -> float:
        if not self.is_defined:
            raise CellIncompleteError(f"Cell {self.id!r} must be fully defined")
        return self.IoptMax

    def max_optical_current(self, intensity: float) -> float:
        """Optical current under overhead light, reduced by the mounting angles [A]"""
        if not self.is_defined:
            raise CellIncompleteError(f"Cell {self.id!r} must be fully defined")
        multiplier = np.cos(np.radians(self.theta)) * np.cos(np.radians(self.phi)) * intensity
        return float(multiplier * self.IoptMax)

    def effective_intensity(self, intensity: float,
                            sun_zenith: Optional[float] = None,
                            sun_azimuth: float = 0.0) -> float:
        """Light intensity incident on the cell plane"""
        if not self.is_defined:
            raise CellIncompleteError(f"Cell {self.id!r} must be fully defined")
        if sun_zenith is None:
            return intensity
        return effective_intensity(intensity, self.theta, self.phi, sun_zenith, sun_azimuth)

    def curve(self, intensity: float,
              sun_zenith: Optional[float] = None,
              sun_azimuth: float = 0.0) -> np.ndarray:
        li = self.effective_intensity(intensity, sun_zenith, sun_azimuth)
        return self.table[intensity_to_row_index(li)]
