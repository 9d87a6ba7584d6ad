"""
Pytest configuration and fixtures.
"""
import matplotlib
matplotlib.use("Agg")

import pytest
import numpy as np


def make_ring(u, v, elevation=2.0, range_=1000.0, n=36, w=0.0):
    """
    Radial wind of a uniform wind field on one ring.

    Azimuths are in degrees clockwise from north, evenly spaced.
    """
    azimuth = np.arange(n) * 360.0 / n
    az = np.radians(azimuth)
    el = np.radians(elevation)
    radial_wind = (u * np.sin(az) + v * np.cos(az)) * np.cos(el) + w * np.sin(el)
    return (
        radial_wind,
        azimuth,
        np.full(n, float(range_)),
        np.full(n, float(elevation)),
    )


@pytest.fixture
def synthetic_ring():
    """Factory for noise-free synthetic rings."""
    return make_ring


@pytest.fixture
def synthetic_volume():
    """
    Several rings at two elevations from a wind of (u=5, v=3).

    Returns flattened radial_wind, azimuth, range and elevation arrays.
    """
    parts = [
        make_ring(5.0, 3.0, elevation=el, range_=rg)
        for el in (1.0, 3.0)
        for rg in (500.0, 1000.0, 1500.0, 2000.0)
    ]
    return tuple(np.concatenate(arrays) for arrays in zip(*parts))
