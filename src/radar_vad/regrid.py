"""
Resample ring-level VAD results onto a regular height axis.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Optional
from scipy.spatial import cKDTree

from .constants import REGRID_WEIGHTINGS
from .vad import VADResult

logger = logging.getLogger(__name__)


@dataclass
class VADProfile:
    """
    Wind profile on a regular height axis.

    Attributes
    ----------
    height : np.ndarray
        Output heights above the radar in meters
    u, v : np.ma.MaskedArray
        Layer-averaged wind components in m/s (masked = not enough rings)
    n_obs : np.ndarray
        Number of rings contributing to each level
    layer_width : float
        Depth of the averaging layer in meters
    raw : bool
        Always False for regridded profiles
    """

    height: np.ndarray
    u: np.ma.MaskedArray
    v: np.ma.MaskedArray
    n_obs: np.ndarray
    layer_width: float
    raw: bool = False

    def __len__(self) -> int:
        return len(self.height)

    def __repr__(self) -> str:
        n_valid = int(np.sum(~np.ma.getmaskarray(self.u)))
        return (
            f"VADProfile(levels={len(self)}, valid={n_valid}, "
            f"layer_width={self.layer_width}m)"
        )


def _layer_weights(d2: np.ndarray, r2: float, weighting: str) -> np.ndarray:
    """Weights for squared distances d2 inside a layer of squared half-width r2."""
    if weighting == 'barnes2':
        return np.exp(-d2 / (r2 / 4)) + 1e-5
    elif weighting == 'cressman':
        return (r2 - d2) / (r2 + d2)
    return np.ones(d2.shape[0])


def vad_regrid(
    vad: VADResult,
    layer_width: float,
    resolution: Optional[float] = None,
    ht_out: Optional[np.ndarray] = None,
    min_n: int = 5,
    weighting: str = 'uniform'
) -> VADProfile:
    """
    Average VAD winds in layers centred on a regular set of heights.

    Parameters
    ----------
    vad : VADResult
        Output of fit_vad
    layer_width : float
        Depth of the layer in meters. Rings within layer_width/2 of an
        output height contribute to it.
    resolution : float, optional
        Spacing of the output heights in meters (default: layer_width).
        Ignored if ht_out is given.
    ht_out : array-like, optional
        Output heights in meters. If None, a regular axis from the lowest
        to the highest ring height.
    min_n : int, optional
        Minimum number of valid rings in a layer (default: 5)
    weighting : str, optional
        'uniform' (default), 'cressman' or 'barnes2'. If every ring of a
        layer gets zero weight (cressman with all rings on the layer
        edges) the layer falls back to uniform weights.

    Returns
    -------
    VADProfile
        Layer-averaged profile

    Raises
    ------
    ValueError
        If layer_width or resolution are not positive or weighting is
        unknown
    """
    if not layer_width > 0:
        raise ValueError(f"layer_width must be positive, got {layer_width}")
    if resolution is None:
        resolution = layer_width
    if not resolution > 0:
        raise ValueError(f"resolution must be positive, got {resolution}")
    if weighting not in REGRID_WEIGHTINGS:
        raise ValueError(f"weighting must be one of {REGRID_WEIGHTINGS}, got {weighting!r}")

    valid = ~(np.ma.getmaskarray(vad.u) | np.ma.getmaskarray(vad.v))
    height = np.asarray(vad.height, dtype='float64')[valid]
    u = np.ma.getdata(vad.u)[valid]
    v = np.ma.getdata(vad.v)[valid]

    if ht_out is None:
        if height.size == 0:
            ht_out = np.array([], dtype='float64')
        else:
            ht_out = np.arange(height.min(), height.max() + resolution / 2, resolution)
    ht_out = np.atleast_1d(np.asarray(ht_out, dtype='float64'))

    n_levels = ht_out.size
    u_out = np.full(n_levels, np.nan)
    v_out = np.full(n_levels, np.nan)
    n_obs = np.zeros(n_levels, dtype='int64')

    if height.size == 0 or n_levels == 0:
        logger.warning("No valid rings to regrid")
    else:
        half = layer_width / 2
        tree = cKDTree(height[:, None])
        neighbors = tree.query_ball_point(ht_out[:, None], half)
        for i, idx in enumerate(neighbors):
            n_obs[i] = len(idx)
            if len(idx) < min_n:
                continue
            idx = np.array(idx, dtype='int64')
            d2 = (height[idx] - ht_out[i])**2
            w = _layer_weights(d2, half * half, weighting)
            # cressman weights vanish at the layer edge
            if not np.sum(w) > 0:
                w = _layer_weights(d2, half * half, 'uniform')
            u_out[i] = np.sum(w * u[idx]) / np.sum(w)
            v_out[i] = np.sum(w * v[idx]) / np.sum(w)

    logger.debug(f"Regridded {height.size} rings onto {n_levels} levels")
    return VADProfile(
        height=ht_out,
        u=np.ma.masked_invalid(u_out),
        v=np.ma.masked_invalid(v_out),
        n_obs=n_obs,
        layer_width=float(layer_width),
    )
