"""
Sun incidence geometry.

Frame: x points north, y east, z up. The sun position is given as zenith
and azimuth angles, a cell's mounting as pitch (theta) and roll (phi), all
in degrees.
"""

import numpy as np


def sun_vector(zenith: float, azimuth: float) -> np.ndarray:
    """Unit vector pointing from the array towards the sun"""
    z = np.radians(zenith)
    a = np.radians(azimuth)
    return np.array([np.sin(z) * np.cos(a),
                     np.sin(z) * np.sin(a),
                     np.cos(z)])


def cell_normal(theta: float, phi: float) -> np.ndarray:
    """
    Unit surface normal of a cell pitched by theta and rolled by phi.

    A flat cell (theta = phi = 0) faces straight up. Pitch tilts the normal
    towards -x, roll towards +y.
    """
    t = np.radians(theta)
    p = np.radians(phi)
    return np.array([-np.sin(t) * np.cos(p),
                     np.sin(p),
                     np.cos(t) * np.cos(p)])


def cos_incidence(theta: float, phi: float, zenith: float, azimuth: float) -> float:
    """Cosine of the angle between the sun direction and the cell normal"""
    return float(np.dot(sun_vector(zenith, azimuth), cell_normal(theta, phi)))


def effective_intensity(intensity: float, theta: float, phi: float,
                        zenith: float, azimuth: float) -> float:
    """
    Ambient light intensity projected onto the cell surface.

    The result is negative when the sun is behind the cell. Table lookups
    clamp it to the dark row.
    """
    return intensity * cos_incidence(theta, phi, zenith, azimuth)
