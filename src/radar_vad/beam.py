"""
Radar beam propagation under the effective Earth radius model.
"""

import numpy as np
from typing import NamedTuple, Optional, Union

from .constants import EARTH_RADIUS, EFFECTIVE_RADIUS_FACTOR

ArrayLike = Union[float, np.ndarray]


class BeamPropagation(NamedTuple):
    """Height, ground range and apparent elevation of a radar beam."""
    height: ArrayLike
    horizontal_range: ArrayLike
    effective_elevation: ArrayLike


def beam_propagation(
    range: ArrayLike,
    elevation: ArrayLike,
    earth_radius: float = EARTH_RADIUS,
    effective_radius: Optional[float] = None
) -> BeamPropagation:
    """
    Compute beam height above the radar accounting for Earth's curvature.

    Uses the standard 4/3 effective Earth radius model, which folds
    atmospheric refraction into an enlarged Earth radius so that the
    beam can be treated as a straight ray.

    Parameters
    ----------
    range : float or np.ndarray
        Slant range in meters
    elevation : float or np.ndarray
        Elevation angle in degrees
    earth_radius : float, optional
        Earth's radius in meters (default: 6371000.0)
    effective_radius : float, optional
        Effective Earth radius in meters. If None, 4/3 of earth_radius.

    Returns
    -------
    BeamPropagation
        height : height above the radar in meters
        horizontal_range : horizontal distance in meters
        effective_elevation : apparent elevation angle in degrees

    Notes
    -----
    The formulas used are:
        h = sqrt(r² + Rp² + 2*r*Rp*sin(θ)) - Rp
        s = r*cos(θ)
        θe = θ + atan(r*cos(θ) / (r*sin(θ) + Rp))

    A zero range is valid and gives h = 0, s = 0 and θe = θ.

    References
    ----------
    Doviak, R. J., and D. S. Zrnić, 1993: Doppler Radar and Weather
    Observations. Academic Press, 562 pp.
    """
    if effective_radius is None:
        effective_radius = EFFECTIVE_RADIUS_FACTOR * earth_radius

    slant_range = np.asarray(range, dtype='float64')
    elevation_rad = np.radians(np.asarray(elevation, dtype='float64'))

    cos_elev = np.cos(elevation_rad)
    sin_elev = np.sin(elevation_rad)

    height = (
        np.sqrt(slant_range**2 + effective_radius**2
                + 2 * slant_range * effective_radius * sin_elev)
        - effective_radius
    )
    horizontal_range = slant_range * cos_elev
    effective_elevation = elevation_rad + np.arctan(
        horizontal_range / (slant_range * sin_elev + effective_radius)
    )

    return BeamPropagation(
        height=_as_scalar(height),
        horizontal_range=_as_scalar(horizontal_range),
        effective_elevation=_as_scalar(np.degrees(effective_elevation)),
    )


def _as_scalar(x: np.ndarray) -> ArrayLike:
    """Return python floats for 0-d results."""
    if np.ndim(x) == 0:
        return float(x)
    return x
