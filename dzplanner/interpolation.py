"""
Interpolation Primitives
========================
Linear interpolation with linear extrapolation (LIP) and the two-point
inverse-distance scheme used for wind between sounding levels.

LIP beyond the data extent continues the slope of the two nearest points,
which is what ``scipy.interpolate.interp1d(..., fill_value='extrapolate')``
does for ``kind='linear'``.
"""

from typing import Sequence

import numpy as np
from scipy.interpolate import interp1d


class LinearProfile:
    """
    Prebuilt LIP over a fixed abscissa.

    Build once per profile and evaluate many times (the freefall loop
    evaluates wind and temperature every step).
    """

    def __init__(self, x: Sequence[float], y: Sequence[float]):
        """
        Parameters
        ----------
        x : abscissa, ascending or descending, at least two distinct values
        y : ordinate values, same length as x
        """
        x_arr = np.asarray(x, dtype=float)
        y_arr = np.asarray(y, dtype=float)
        if x_arr.shape != y_arr.shape:
            raise ValueError(
                f"x and y differ in length ({x_arr.size} vs {y_arr.size})"
            )
        if x_arr.size < 2:
            raise ValueError("LIP needs at least two points")

        self._interp = interp1d(
            x_arr, y_arr,
            kind='linear',
            fill_value='extrapolate',
            assume_sorted=False,
        )

    def __call__(self, xv):
        result = self._interp(xv)
        if np.ndim(result) == 0:
            return float(result)
        return result


def lip(x: Sequence[float], y: Sequence[float], xv):
    """One-shot linear interpolation / extrapolation of y(x) at xv."""
    return LinearProfile(x, y)(xv)


def inverse_distance(y1: float, y2: float, h1: float, h2: float,
                     hp: float) -> float:
    """
    Two-point inverse-distance weighted value at ``hp``.

    weight_i = 1 / |h_i − hp|; an exact hit on either level returns that
    level's value.
    """
    if hp == h1:
        return y1
    if hp == h2:
        return y2
    w1 = 1.0 / abs(h1 - hp)
    w2 = 1.0 / abs(h2 - hp)
    return (w1 * y1 + w2 * y2) / (w1 + w2)
