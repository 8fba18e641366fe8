"""
Mean Wind Integrator
====================
Height-weighted layer-mean wind over a band [lower, upper]:

    ū = Σ ½·(u_i + u_{i+1})·(h_i − h_{i+1}) / (h_top − h_bottom)

The band edges are evaluated with LIP, so the integral is exact for
piecewise-linear input and does not depend on how many samples fall
inside the band.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .exceptions import InvalidRangeError
from .interpolation import LinearProfile
from .profile import ProfileLevel, profile_arrays
from .vectors import wind_direction, wind_speed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeightBand:
    """Height band in metres ASL with lower < upper."""
    lower: float
    upper: float

    def __post_init__(self):
        if not (math.isfinite(self.lower) and math.isfinite(self.upper)):
            raise InvalidRangeError(
                f"Height band limits must be finite, got [{self.lower}, {self.upper}]"
            )
        if self.lower >= self.upper:
            raise InvalidRangeError(
                f"Height band lower limit {self.lower} must be below upper {self.upper}"
            )

    @property
    def thickness(self) -> float:
        return self.upper - self.lower


@dataclass(frozen=True)
class MeanWind:
    """Layer-mean wind; speed in the unit of the input components."""
    direction: float
    speed: float
    u: float
    v: float


def mean_wind(heights: Sequence[float], u: Sequence[float], v: Sequence[float],
              lower: float, upper: float) -> Optional[MeanWind]:
    """
    Trapezoidal layer-mean wind between ``lower`` and ``upper``.

    Parameters
    ----------
    heights : sample heights (m), any order, at least two
    u, v : wind components at ``heights``
    lower, upper : band limits (m), lower < upper

    Returns
    -------
    MeanWind, or None for an invalid band or insufficient data
    """
    try:
        band = HeightBand(float(lower), float(upper))
    except (InvalidRangeError, TypeError, ValueError) as exc:
        logger.warning("Mean wind band rejected: %s", exc)
        return None

    h = np.asarray(heights, dtype=float)
    u_arr = np.asarray(u, dtype=float)
    v_arr = np.asarray(v, dtype=float)
    if h.size < 2 or not (h.size == u_arr.size == v_arr.size):
        logger.warning("Mean wind needs at least 2 matching samples, got %d", h.size)
        return None
    if not (np.all(np.isfinite(h)) and np.all(np.isfinite(u_arr))
            and np.all(np.isfinite(v_arr))):
        logger.warning("Mean wind input contains non-finite values")
        return None

    u_at = LinearProfile(h, u_arr)
    v_at = LinearProfile(h, v_arr)

    inside = (h > band.lower) & (h < band.upper)
    layer_h = np.concatenate([h[inside], [band.lower, band.upper]])
    layer_u = np.concatenate([u_arr[inside], [u_at(band.lower), u_at(band.upper)]])
    layer_v = np.concatenate([v_arr[inside], [v_at(band.lower), v_at(band.upper)]])

    order = np.argsort(layer_h)[::-1]
    layer_h, layer_u, layer_v = layer_h[order], layer_u[order], layer_v[order]

    dh = layer_h[:-1] - layer_h[1:]
    mean_u = float(np.sum(0.5 * (layer_u[:-1] + layer_u[1:]) * dh) / band.thickness)
    mean_v = float(np.sum(0.5 * (layer_v[:-1] + layer_v[1:]) * dh) / band.thickness)

    return MeanWind(
        direction=wind_direction(mean_u, mean_v),
        speed=wind_speed(mean_u, mean_v),
        u=mean_u,
        v=mean_v,
    )


def profile_mean_wind(profile: Sequence[ProfileLevel], lower: float,
                      upper: float) -> Optional[MeanWind]:
    """Mean wind (m/s) over [lower, upper] m ASL of a built profile."""
    if len(profile) < 2:
        logger.warning("Mean wind needs a profile of at least 2 levels")
        return None
    heights, u, v = profile_arrays(profile)
    return mean_wind(heights, u, v, lower, upper)
