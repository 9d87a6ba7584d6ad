"""
Utility functions for PyART integration.
"""

import logging
import numpy as np
import pyart
from typing import Iterable, Optional, Tuple

from .constants import FIELD_ALIASES
from .vad import VADResult, fit_vad

logger = logging.getLogger(__name__)


def read_radar(filepath: str) -> pyart.core.Radar:
    """
    Read a radar volume with PyART.

    Parameters
    ----------
    filepath : str
        Path to any file format supported by pyart.io.read

    Returns
    -------
    pyart.core.Radar
        PyART radar object
    """
    radar = pyart.io.read(filepath)
    logger.info(f"Read {filepath}: {radar.nsweeps} sweeps, {radar.nrays} rays, {radar.ngates} gates")
    return radar


def resolve_field(radar, requested: str) -> str:
    """
    Resolve the radial velocity field name using aliases.

    Parameters
    ----------
    radar : pyart.core.Radar
        PyART radar object
    requested : str
        Requested field name (a canonical key such as 'VRAD' or a field
        present in the radar)

    Returns
    -------
    str
        Field name in the radar object

    Raises
    ------
    KeyError
        If no alias of the field is found
    """
    if requested in radar.fields:
        return requested
    for cand in FIELD_ALIASES.get(requested.upper(), []):
        if cand in radar.fields:
            return cand
    raise KeyError(
        f"Field '{requested}' not found in radar. Available fields: {list(radar.fields.keys())}"
    )


def get_velocity_observations(
    radar,
    field: str = "VRAD",
    sweeps: Optional[Iterable[int]] = None
) -> Tuple[np.ma.MaskedArray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Extract flattened radial velocity observations from a PyART radar object.

    Parameters
    ----------
    radar : pyart.core.Radar
        PyART radar object scanned in PPI mode
    field : str, optional
        Radial velocity field (default: 'VRAD', resolved through aliases)
    sweeps : iterable of int, optional
        Sweep indices to use. If None, all sweeps.

    Returns
    -------
    radial_wind : np.ma.MaskedArray
        Radial velocity in m/s, invalid values masked
    azimuth : np.ndarray
        Azimuth of each gate in degrees clockwise from north
    range : np.ndarray
        Slant range of each gate in meters
    elevation : np.ndarray
        Elevation angle of each gate in degrees

    Notes
    -----
    The nominal elevation of each sweep (``radar.fixed_angle``) is used
    instead of the per-ray antenna elevation, so that every gate of a
    sweep at the same range falls in the same ring. Sweeps without any
    valid velocity (e.g. the surveillance half of a split cut sharing
    its fixed angle with a Doppler sweep) are skipped so they do not
    dilute the rings of that elevation.
    """
    field_name = resolve_field(radar, field)
    if sweeps is None:
        sweeps = range(radar.nsweeps)

    starts = radar.sweep_start_ray_index['data']
    ends = radar.sweep_end_ray_index['data']
    gate_range = np.asarray(radar.range['data'], dtype='float64')

    vr_parts, az_parts, rg_parts, el_parts = [], [], [], []
    for sweep in sweeps:
        rays = slice(int(starts[sweep]), int(ends[sweep]) + 1)
        data = np.ma.masked_invalid(radar.fields[field_name]['data'][rays])
        if np.ma.count(data) == 0:
            logger.info(f"Skipping sweep {sweep}: no valid '{field_name}' data")
            continue
        azimuth = np.asarray(radar.azimuth['data'][rays], dtype='float64')
        shape = data.shape

        vr_parts.append(data.ravel())
        az_parts.append(np.broadcast_to(azimuth[:, None], shape).ravel())
        rg_parts.append(np.broadcast_to(gate_range[None, :], shape).ravel())
        el_parts.append(np.full(data.size, float(radar.fixed_angle['data'][sweep])))

    if not vr_parts:
        logger.warning("No sweeps with velocity data selected")
        empty = np.array([], dtype='float64')
        return np.ma.masked_invalid(empty), empty, empty, empty

    return (
        np.ma.concatenate(vr_parts).astype('float64'),
        np.concatenate(az_parts),
        np.concatenate(rg_parts),
        np.concatenate(el_parts),
    )


def fit_vad_radar(
    radar,
    field: str = "VRAD",
    sweeps: Optional[Iterable[int]] = None,
    **kwargs
) -> VADResult:
    """
    Run fit_vad on a PyART radar volume.

    Parameters
    ----------
    radar : pyart.core.Radar
        PyART radar object scanned in PPI mode. Velocity must be de-aliased.
    field : str, optional
        Radial velocity field (default: 'VRAD')
    sweeps : iterable of int, optional
        Sweep indices to use. If None, all sweeps.
    **kwargs
        Additional arguments passed to fit_vad

    Returns
    -------
    VADResult
        One element per (range, sweep) ring
    """
    radial_wind, azimuth, gate_range, elevation = get_velocity_observations(
        radar, field=field, sweeps=sweeps
    )
    return fit_vad(radial_wind, azimuth, gate_range, elevation, **kwargs)
