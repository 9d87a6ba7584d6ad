"""
Constants for VAD retrievals: Earth model, quality-control defaults and
field definitions.
"""

import numpy as np

# Earth curvature
EARTH_RADIUS = 6371000.0  # Earth's radius in meters
EFFECTIVE_RADIUS_FACTOR = 4.0 / 3.0  # Standard refraction (4/3 Earth model)

# Ring quality control defaults
DEFAULT_MAX_NA = 0.2               # Max fraction of missing radial wind per ring
DEFAULT_MAX_CONSECUTIVE_NA = 30.0  # Max azimuthal gap in degrees (Matejka & Srivastava 1991)
DEFAULT_R2_MIN = 0.8               # Min coefficient of determination of the fit
DEFAULT_OUTLIER_THRESHOLD = np.inf  # Outlier rejection in std units (inf = off)

# Azimuth convention
DEFAULT_AZIMUTH_ORIGIN = 90.0  # Zero azimuth in degrees counterclockwise from x axis (north)
AZIMUTH_DIRECTIONS = {
    "cw": -1,   # clockwise
    "ccw": 1,   # counterclockwise
}

# Degeneracy thresholds for the sinusoidal fit
MIN_RING_SAMPLES = 3         # a + b*sin + c*cos has three parameters
MIN_RING_VARIANCE = 1e-12    # (m/s)^2, below this r2 is undefined
MIN_COS_ELEVATION = 1e-6     # vertical beams have no horizontal projection
AZIMUTH_GAP_TOLERANCE = 1e-9  # degrees, absorbs rounding in azimuth differences

# Weighting functions accepted by vad_regrid
REGRID_WEIGHTINGS = ("uniform", "cressman", "barnes2")

# Field name aliases for radial velocity in different radar data formats
FIELD_ALIASES = {
    "VRAD": ["VRAD", "velocity", "corrected_velocity", "dealiased_velocity", "VEL"],
}

# Default plotting parameters for wind components
FIELD_CONFIGS = {
    "u": {
        "color": "tab:blue",
        "marker": "o",
        "label": "u (m/s)",
    },
    "v": {
        "color": "tab:red",
        "marker": "s",
        "label": "v (m/s)",
    },
}
