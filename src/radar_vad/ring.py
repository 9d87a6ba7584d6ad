"""
Quality control and sinusoidal fit of a single VAD ring.

A ring is the set of observations sharing one (range, elevation) pair,
i.e. the gates swept by the antenna during one rotation at fixed
elevation. Radial wind on a ring with uniform horizontal wind follows

    vr(az) = a + b*sin(az) + c*cos(az)

with b = u*cos(el) and c = v*cos(el). Vertical air motion and
horizontal divergence only enter the constant term a, which is not
used. Azimuths passed here must already be in degrees clockwise from
north (see ``radar_vad.vad.normalize_azimuth``).
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Union

from .constants import (
    DEFAULT_MAX_NA,
    DEFAULT_MAX_CONSECUTIVE_NA,
    DEFAULT_OUTLIER_THRESHOLD,
    MIN_RING_SAMPLES,
    MIN_RING_VARIANCE,
    MIN_COS_ELEVATION,
    AZIMUTH_GAP_TOLERANCE,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RingFit:
    """
    Result of the sinusoidal fit of one ring.

    Undefined values are NaN.

    Attributes
    ----------
    u : float
        Zonal wind in m/s
    v : float
        Meridional wind in m/s
    r2 : float
        Coefficient of determination of the fit
    rmse : float
        Standard deviation of the residuals in m/s
    n_valid : int
        Number of samples used in the final fit
    """

    u: float = np.nan
    v: float = np.nan
    r2: float = np.nan
    rmse: float = np.nan
    n_valid: int = 0

    def is_valid(self) -> bool:
        """Return True if the fit produced a wind vector."""
        return bool(np.isfinite(self.u) and np.isfinite(self.v))


def as_masked(values) -> np.ma.MaskedArray:
    """
    Convert radial wind to a float masked array with NaN/Inf/None masked.

    Parameters
    ----------
    values : array-like or np.ma.MaskedArray
        Radial wind values; missing data may be NaN, None or masked

    Returns
    -------
    np.ma.MaskedArray
        Float array where True mask = missing
    """
    if isinstance(values, np.ma.MaskedArray):
        values = values.astype('float64')
    else:
        values = np.array(values, dtype='float64')
    # masked_invalid also fixes scalar masks that hide NaN values
    return np.ma.masked_invalid(np.ma.atleast_1d(values))


def ring_gap(azimuth: np.ndarray, valid: np.ndarray) -> float:
    """
    Largest angular gap between consecutive valid samples of a ring.

    Parameters
    ----------
    azimuth : np.ndarray
        Azimuth of every sample in degrees
    valid : np.ndarray
        Boolean mask where True = sample has data

    Returns
    -------
    float
        Largest gap in degrees, including the wrap-around gap between the
        last and the first sample. 360 if fewer than two distinct valid
        azimuths.
    """
    az = np.sort(np.mod(np.asarray(azimuth, dtype='float64')[valid], 360.0))
    if az.size == 0:
        return 360.0
    gaps = np.diff(az)
    wrap = 360.0 - az[-1] + az[0]
    if gaps.size == 0:
        return float(wrap)
    return float(max(gaps.max(), wrap))


def ring_qc(
    radial_wind,
    azimuth,
    max_na: float = DEFAULT_MAX_NA,
    max_consecutive_na: float = DEFAULT_MAX_CONSECUTIVE_NA
) -> np.ma.MaskedArray:
    """
    Apply coverage and gap checks to one ring.

    Two independent gates must pass:

    - Coverage: the fraction of missing radial wind must not exceed
      ``max_na``.
    - Gap: the largest azimuthal gap between valid samples must not
      exceed ``max_consecutive_na`` degrees. A sinusoidal fit is biased
      when a wide arc of the rotation lacks data.

    Parameters
    ----------
    radial_wind : array-like
        Radial wind in m/s, missing values as NaN, None or masked
    azimuth : array-like
        Azimuth in degrees, same length as radial_wind
    max_na : float, optional
        Maximum fraction of missing data (default: 0.2)
    max_consecutive_na : float, optional
        Maximum angular gap in degrees (default: 30)

    Returns
    -------
    np.ma.MaskedArray
        Radial wind with the same length as the input. If the ring is
        rejected every element is masked.
    """
    vr = as_masked(radial_wind)
    missing = np.ma.getmaskarray(vr)

    if vr.size == 0:
        return vr

    na_fraction = missing.sum() / vr.size
    if na_fraction > max_na:
        logger.debug(f"Ring rejected: {100*na_fraction:.1f}% missing > {100*max_na:.1f}%")
        return np.ma.masked_all_like(vr)

    gap = ring_gap(azimuth, ~missing)
    if gap > max_consecutive_na + AZIMUTH_GAP_TOLERANCE:
        logger.debug(f"Ring rejected: azimuthal gap {gap:.1f}° > {max_consecutive_na}°")
        return np.ma.masked_all_like(vr)

    return vr


def _harmonic_fit(vr: np.ndarray, az_rad: np.ndarray):
    """Least squares of vr = a + b*sin(az) + c*cos(az). Returns coefs and fitted values."""
    design = np.column_stack([np.ones_like(az_rad), np.sin(az_rad), np.cos(az_rad)])
    coefs, *_ = np.linalg.lstsq(design, vr, rcond=None)
    return coefs, design @ coefs


def ring_fit(
    radial_wind,
    azimuth,
    elevation: Union[float, np.ndarray],
    outlier_threshold: float = DEFAULT_OUTLIER_THRESHOLD
) -> RingFit:
    """
    Fit a sinusoid to radial wind versus azimuth and recover (u, v).

    Missing samples are skipped: they contribute no equation to the
    least squares problem.

    Parameters
    ----------
    radial_wind : array-like
        Radial wind in m/s, missing values as NaN, None or masked
    azimuth : array-like
        Azimuth in degrees clockwise from north
    elevation : float or array-like
        Elevation angle in degrees. For an array, the first value is used
        since a ring has a single elevation.
    outlier_threshold : float, optional
        Residuals larger than this many standard deviations are dropped
        and the fit is computed once more. np.inf disables it (default).

    Returns
    -------
    RingFit
        Fitted wind. All fields are NaN when there are fewer than
        MIN_RING_SAMPLES valid samples, the radial wind has no variance
        or the beam is vertical.

    Notes
    -----
    u and v are obtained by dividing the first harmonic by cos(elevation).
    This assumes uniform horizontal wind over the ring and ignores the
    projection of vertical motion. No correction for it is attempted.
    """
    vr = as_masked(radial_wind)
    az = np.asarray(azimuth, dtype='float64')
    el = float(np.ravel(elevation)[0])

    cos_el = np.cos(np.radians(el))
    if abs(cos_el) < MIN_COS_ELEVATION:
        logger.debug(f"Ring at elevation {el}° has no horizontal projection")
        return RingFit()

    valid = ~np.ma.getmaskarray(vr)
    values = np.ma.getdata(vr)
    az_rad = np.radians(az)

    fit = _fit_valid(values, az_rad, valid)
    if fit is None:
        return RingFit()

    # an exact fit leaves only rounding noise in the residuals
    sd = fit[1].std(ddof=1)
    if np.isfinite(outlier_threshold) and sd >= np.sqrt(MIN_RING_VARIANCE):
        _, residuals = fit
        outliers = np.zeros_like(valid)
        outliers[valid] = np.abs(residuals) > outlier_threshold * sd
        if outliers.any():
            logger.debug(f"Removing {outliers.sum()} outliers (> {outlier_threshold} sd)")
            valid = valid & ~outliers
            fit = _fit_valid(values, az_rad, valid)
            if fit is None:
                return RingFit()

    coefs, residuals = fit
    observed = values[valid]
    ss_res = np.sum(residuals**2)
    ss_tot = np.sum((observed - observed.mean())**2)

    return RingFit(
        u=float(coefs[1] / cos_el),
        v=float(coefs[2] / cos_el),
        r2=float(1.0 - ss_res / ss_tot),
        # sample standard deviation, mean-centred
        rmse=float(residuals.std(ddof=1)),
        n_valid=int(valid.sum()),
    )


def _fit_valid(values: np.ndarray, az_rad: np.ndarray, valid: np.ndarray):
    """
    Fit the valid samples.

    Returns (coefs, residuals) with residuals = fitted - observed, or None
    if the ring is degenerate.
    """
    n_valid = int(valid.sum())
    if n_valid < MIN_RING_SAMPLES:
        logger.debug(f"Ring has {n_valid} valid samples < {MIN_RING_SAMPLES}")
        return None

    observed = values[valid]
    if observed.var() < MIN_RING_VARIANCE:
        logger.debug("Ring has no radial wind variance")
        return None

    coefs, fitted = _harmonic_fit(observed, az_rad[valid])
    return coefs, fitted - observed


def fit_qc(r2, r2_min: float) -> np.ndarray:
    """
    Post-fit quality gate.

    Parameters
    ----------
    r2 : array-like
        Coefficient of determination per ring, NaN or masked if undefined
    r2_min : float
        Minimum accepted r2

    Returns
    -------
    np.ndarray
        Boolean array where True = fit accepted
    """
    r2 = as_masked(r2)
    with np.errstate(invalid='ignore'):
        passed = np.ma.getdata(r2) >= r2_min
    return passed & ~np.ma.getmaskarray(r2)
