"""
radar_vad - Horizontal wind profiles from Doppler radar with the
Velocity Azimuth Display technique
"""

from .beam import BeamPropagation, beam_propagation
from .ring import RingFit, ring_qc, ring_fit, ring_gap, fit_qc
from .vad import VADResult, VADRow, fit_vad, group_rings, normalize_azimuth
from .regrid import VADProfile, vad_regrid
from .visualization import plot_vad, plot_wind_barbs
from .constants import (
    EARTH_RADIUS,
    EFFECTIVE_RADIUS_FACTOR,
    DEFAULT_MAX_NA,
    DEFAULT_MAX_CONSECUTIVE_NA,
    DEFAULT_R2_MIN,
    DEFAULT_OUTLIER_THRESHOLD,
    DEFAULT_AZIMUTH_ORIGIN,
    MIN_RING_SAMPLES,
    MIN_RING_VARIANCE,
    MIN_COS_ELEVATION,
)

__version__ = "0.1.0"

__all__ = [
    # Beam geometry
    "BeamPropagation",
    "beam_propagation",
    # Ring QC and fit
    "RingFit",
    "ring_qc",
    "ring_fit",
    "ring_gap",
    "fit_qc",
    # VAD
    "VADResult",
    "VADRow",
    "fit_vad",
    "group_rings",
    "normalize_azimuth",
    # Regrid
    "VADProfile",
    "vad_regrid",
    # Visualization
    "plot_vad",
    "plot_wind_barbs",
    # Constants
    "EARTH_RADIUS",
    "EFFECTIVE_RADIUS_FACTOR",
    "DEFAULT_MAX_NA",
    "DEFAULT_MAX_CONSECUTIVE_NA",
    "DEFAULT_R2_MIN",
    "DEFAULT_OUTLIER_THRESHOLD",
    "DEFAULT_AZIMUTH_ORIGIN",
    "MIN_RING_SAMPLES",
    "MIN_RING_VARIANCE",
    "MIN_COS_ELEVATION",
]
