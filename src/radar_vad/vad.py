"""
Velocity Azimuth Display (VAD) wind retrieval.

Approximates the horizontal components of the wind from radial wind
measured by a Doppler radar in PPI mode using the method of Browning and
Wexler (1968). Observations are grouped in rings of constant range and
elevation; each ring goes through quality control, a sinusoidal fit and
a final r2 check.
"""

import logging
import numpy as np
from dataclasses import dataclass, field
from multiprocessing import Pool
from typing import Dict, List, Optional, Tuple

from .beam import beam_propagation
from .constants import (
    AZIMUTH_DIRECTIONS,
    DEFAULT_AZIMUTH_ORIGIN,
    DEFAULT_MAX_CONSECUTIVE_NA,
    DEFAULT_MAX_NA,
    DEFAULT_OUTLIER_THRESHOLD,
    DEFAULT_R2_MIN,
)
from .ring import as_masked, fit_qc, ring_fit, ring_qc

logger = logging.getLogger(__name__)

FIT_FIELDS = ("u", "v", "r2", "rmse")
COLUMNS = ("height", "u", "v", "range", "elevation", "r2", "rmse")


@dataclass(frozen=True)
class VADRow:
    """One ring of a VAD retrieval. Fit fields are None when undefined."""
    height: float
    u: Optional[float]
    v: Optional[float]
    range: float
    elevation: float
    r2: Optional[float]
    rmse: Optional[float]


@dataclass
class VADResult:
    """
    Wind estimated on every ring of a radar volume.

    Attributes
    ----------
    height : np.ndarray
        Height above the radar in meters
    u : np.ma.MaskedArray
        Zonal wind in m/s (masked = undefined)
    v : np.ma.MaskedArray
        Meridional wind in m/s (masked = undefined)
    range : np.ndarray
        Slant range in meters
    elevation : np.ndarray
        Elevation angle in degrees
    r2 : np.ma.MaskedArray
        Coefficient of determination of each fit
    rmse : np.ma.MaskedArray
        Standard deviation of the residuals in m/s
    params : dict
        Parameters used for the retrieval
    raw : bool
        True for ring-level results (as opposed to a regridded profile)

    Notes
    -----
    There is one element per distinct (range, elevation) pair, in order of
    first appearance in the input. Geometric fields are always defined.
    """

    height: np.ndarray
    u: np.ma.MaskedArray
    v: np.ma.MaskedArray
    range: np.ndarray
    elevation: np.ndarray
    r2: np.ma.MaskedArray
    rmse: np.ma.MaskedArray
    params: Dict[str, object] = field(default_factory=dict)
    raw: bool = True

    def __len__(self) -> int:
        return len(self.height)

    def n_valid(self) -> int:
        """Return number of rings with a defined wind vector."""
        return int(np.sum(~np.ma.getmaskarray(self.u)))

    def rows(self) -> List[VADRow]:
        """Return the result as a list of rows."""
        rows = []
        for i in range(len(self)):
            rows.append(VADRow(
                height=float(self.height[i]),
                u=_optional(self.u[i]),
                v=_optional(self.v[i]),
                range=float(self.range[i]),
                elevation=float(self.elevation[i]),
                r2=_optional(self.r2[i]),
                rmse=_optional(self.rmse[i]),
            ))
        return rows

    def to_dict(self) -> Dict[str, np.ndarray]:
        """Return columns as plain float arrays with NaN for undefined values."""
        return {
            name: np.ma.filled(getattr(self, name).astype('float64'), np.nan)
            for name in COLUMNS
        }

    def __repr__(self) -> str:
        return (
            f"VADResult(\n"
            f"  rings={len(self)},\n"
            f"  valid={self.n_valid()},\n"
            f"  height=[{_fmt_range(self.height)}] m,\n"
            f"  elevations={sorted(set(np.round(self.elevation, 2).tolist()))},\n"
            f"  params={self.params}\n"
            f")"
        )


def _optional(x) -> Optional[float]:
    if x is np.ma.masked or not np.isfinite(x):
        return None
    return float(x)


def _fmt_range(x: np.ndarray) -> str:
    if len(x) == 0:
        return ""
    return f"{np.min(x):.1f}, {np.max(x):.1f}"


def normalize_azimuth(
    azimuth,
    azimuth_origin: float = DEFAULT_AZIMUTH_ORIGIN,
    azimuth_direction: str = "cw"
) -> np.ndarray:
    """
    Convert azimuths to degrees clockwise from north.

    Parameters
    ----------
    azimuth : array-like
        Azimuth in degrees in the caller's convention
    azimuth_origin : float, optional
        Zero azimuth in degrees counterclockwise from the x axis
        (default: 90, north)
    azimuth_direction : str, optional
        'cw' (clockwise, default) or 'ccw' (counterclockwise)

    Returns
    -------
    np.ndarray
        Azimuth as used by the fit, 90 - mathematical angle

    Raises
    ------
    ValueError
        If azimuth_direction is not 'cw' or 'ccw'
    """
    sign = _direction_sign(azimuth_direction)
    azimuth_math = azimuth_origin + sign * np.asarray(azimuth, dtype='float64')
    return 90.0 - azimuth_math


def _direction_sign(azimuth_direction: str) -> int:
    try:
        return AZIMUTH_DIRECTIONS[azimuth_direction]
    except (KeyError, TypeError):
        raise ValueError(
            f"azimuth_direction must be 'cw' or 'ccw', got {azimuth_direction!r}"
        ) from None


def group_rings(range, elevation) -> Dict[Tuple[float, float], np.ndarray]:
    """
    Group observation indices by (range, elevation).

    Parameters
    ----------
    range : array-like
        Slant range of each observation
    elevation : array-like
        Elevation angle of each observation

    Returns
    -------
    dict
        {(range, elevation): indices} in order of first appearance
    """
    groups: Dict[Tuple[float, float], List[int]] = {}
    for i, key in enumerate(zip(np.asarray(range, dtype='float64').tolist(),
                                np.asarray(elevation, dtype='float64').tolist())):
        groups.setdefault(key, []).append(i)
    return {key: np.array(idx, dtype='int64') for key, idx in groups.items()}


def _process_ring(args) -> Tuple[float, float, float, float]:
    """
    Worker function to process a single ring: QC and fit.

    Designed to be called by multiprocessing.Pool.
    """
    radial_wind, azimuth, elevation, max_na, max_consecutive_na, outlier_threshold = args
    vr_qc = ring_qc(radial_wind, azimuth, max_na=max_na,
                    max_consecutive_na=max_consecutive_na)
    fit = ring_fit(vr_qc, azimuth, elevation, outlier_threshold=outlier_threshold)
    return fit.u, fit.v, fit.r2, fit.rmse


def fit_vad(
    radial_wind,
    azimuth,
    range,
    elevation,
    max_na: float = DEFAULT_MAX_NA,
    max_consecutive_na: float = DEFAULT_MAX_CONSECUTIVE_NA,
    r2_min: float = DEFAULT_R2_MIN,
    outlier_threshold: float = DEFAULT_OUTLIER_THRESHOLD,
    azimuth_origin: float = DEFAULT_AZIMUTH_ORIGIN,
    azimuth_direction: str = "cw",
    n_workers: Optional[int] = None
) -> VADResult:
    """
    Velocity Azimuth Display.

    Parameters
    ----------
    radial_wind : array-like
        Radial wind in m/s. Missing data must be explicit (NaN, None or
        masked); de-aliasing is assumed to be done.
    azimuth : array-like
        Azimuth of each observation in degrees
    range : array-like
        Slant range of each observation in meters
    elevation : array-like
        Elevation angle of each observation in degrees
    max_na : float, optional
        Maximum fraction of missing data in a ring (default: 0.2)
    max_consecutive_na : float, optional
        Maximum azimuthal gap in a ring in degrees (default: 30, following
        Matejka and Srivastava 1991)
    r2_min : float, optional
        Minimum r2 of the fit (default: 0.8). It is worth exploring the
        result with r2_min=0 before picking a threshold.
    outlier_threshold : float, optional
        Threshold for removing outliers in standard deviation units
        (default: np.inf, no removal)
    azimuth_origin : float, optional
        Zero azimuth in degrees counterclockwise from the x axis
        (default: 90)
    azimuth_direction : str, optional
        'cw' or 'ccw' (default: 'cw')
    n_workers : int, optional
        Number of worker processes. None or 1 processes rings serially.

    Returns
    -------
    VADResult
        One element per (range, elevation) ring. Rings that fail any check
        have u, v, r2 and rmse masked.

    Raises
    ------
    ValueError
        If azimuth_direction is invalid or input lengths differ
    """
    # Configuration errors before touching any data
    _direction_sign(azimuth_direction)

    vr = as_masked(radial_wind)
    azimuth = np.atleast_1d(np.asarray(azimuth, dtype='float64'))
    range = np.atleast_1d(np.asarray(range, dtype='float64'))
    elevation = np.atleast_1d(np.asarray(elevation, dtype='float64'))

    lengths = {len(vr), len(azimuth), len(range), len(elevation)}
    if len(lengths) != 1:
        raise ValueError(
            f"radial_wind, azimuth, range and elevation must have the same length, "
            f"got {len(vr)}, {len(azimuth)}, {len(range)}, {len(elevation)}"
        )

    azimuth = normalize_azimuth(azimuth, azimuth_origin, azimuth_direction)

    rings = group_rings(range, elevation)
    logger.info(f"Fitting {len(rings)} rings from {len(vr):,} observations")

    tasks = [
        (vr[idx], azimuth[idx], ring_el, max_na, max_consecutive_na, outlier_threshold)
        for (_, ring_el), idx in rings.items()
    ]

    if n_workers is not None and n_workers > 1 and len(tasks) > 1:
        logger.info(f"Using {n_workers} workers")
        with Pool(processes=n_workers) as pool:
            fits = pool.map(_process_ring, tasks)
    else:
        fits = [_process_ring(task) for task in tasks]

    ring_range = np.array([key[0] for key in rings], dtype='float64')
    ring_elevation = np.array([key[1] for key in rings], dtype='float64')
    height = np.asarray(beam_propagation(ring_range, ring_elevation).height, dtype='float64')

    values = np.array(fits, dtype='float64').reshape(len(fits), len(FIT_FIELDS))
    passed = fit_qc(values[:, 2], r2_min=r2_min)
    columns = {
        name: np.ma.masked_where(~passed, values[:, i])
        for i, name in enumerate(FIT_FIELDS)
    }

    result = VADResult(
        height=height,
        range=ring_range,
        elevation=ring_elevation,
        params={
            "max_na": max_na,
            "max_consecutive_na": max_consecutive_na,
            "r2_min": r2_min,
            "outlier_threshold": outlier_threshold,
            "azimuth_origin": azimuth_origin,
            "azimuth_direction": azimuth_direction,
        },
        **columns,
    )
    logger.info(f"VAD done: {result.n_valid()}/{len(result)} rings passed quality control")
    return result
