"""
Quick plots of VAD wind profiles.
"""

import numpy as np
import matplotlib.pyplot as plt
from typing import Optional, Tuple, Union

from .constants import FIELD_CONFIGS
from .regrid import VADProfile
from .vad import VADResult

Profile = Union[VADResult, VADProfile]


def plot_vad(
    vad: Profile,
    components: Tuple[str, ...] = ("u", "v"),
    title: Optional[str] = None,
    figsize: Tuple[int, int] = (5, 7),
    ax: Optional[plt.Axes] = None,
    show: bool = True,
) -> Optional[plt.Figure]:
    """
    Plot wind components against height.

    Ring-level results (``vad.raw`` True) are drawn as markers, regridded
    profiles as lines.

    Parameters
    ----------
    vad : VADResult or VADProfile
        Output of fit_vad or vad_regrid
    components : tuple of str
        Components to plot (default: ('u', 'v'))
    title : str, optional
        Plot title
    figsize : tuple
        Figure size (width, height) in inches
    ax : matplotlib.axes.Axes, optional
        Axes to plot on. If None, creates new figure
    show : bool
        If True, displays the plot. If False, returns figure without displaying.

    Returns
    -------
    matplotlib.figure.Figure or None
        Returns figure only if show=False
    """
    created_fig = False
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
        created_fig = True
    else:
        fig = ax.figure

    height = np.asarray(vad.height)
    for name in components:
        if name not in FIELD_CONFIGS:
            raise ValueError(f"Unknown component '{name}', expected one of {tuple(FIELD_CONFIGS)}")
        config = FIELD_CONFIGS[name]
        values = np.ma.filled(getattr(vad, name).astype('float64'), np.nan)
        if vad.raw:
            ax.plot(values, height, linestyle='none', marker=config['marker'],
                    markersize=3, color=config['color'], label=config['label'])
        else:
            ax.plot(values, height, color=config['color'], label=config['label'])

    ax.axvline(0, color='0.5', linewidth=0.8)
    ax.set_xlabel('Wind (m/s)')
    ax.set_ylabel('Height above radar (m)')
    ax.legend()
    if title is not None:
        ax.set_title(title)

    if created_fig:
        plt.tight_layout()

    if show:
        plt.show()
        return None
    else:
        return fig


def plot_wind_barbs(
    vad: Profile,
    title: Optional[str] = None,
    figsize: Tuple[int, int] = (3, 7),
    ax: Optional[plt.Axes] = None,
    show: bool = True,
) -> Optional[plt.Figure]:
    """
    Plot wind barbs along the height axis.

    Levels with undefined wind are skipped.

    Parameters
    ----------
    vad : VADResult or VADProfile
        Output of fit_vad or vad_regrid
    title : str, optional
        Plot title
    figsize : tuple
        Figure size (width, height) in inches
    ax : matplotlib.axes.Axes, optional
        Axes to plot on. If None, creates new figure
    show : bool
        If True, displays the plot. If False, returns figure without displaying.

    Returns
    -------
    matplotlib.figure.Figure or None
        Returns figure only if show=False
    """
    created_fig = False
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
        created_fig = True
    else:
        fig = ax.figure

    valid = ~(np.ma.getmaskarray(vad.u) | np.ma.getmaskarray(vad.v))
    height = np.asarray(vad.height)[valid]
    u = np.ma.getdata(vad.u)[valid]
    v = np.ma.getdata(vad.v)[valid]

    ax.barbs(np.zeros_like(height), height, u, v, length=6)
    ax.set_xticks([])
    ax.set_ylabel('Height above radar (m)')
    if title is not None:
        ax.set_title(title)

    if created_fig:
        plt.tight_layout()

    if show:
        plt.show()
        return None
    else:
        return fig
