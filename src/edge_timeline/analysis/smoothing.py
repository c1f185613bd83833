"""Centered moving-average smoothing for column profiles."""

from __future__ import annotations

import numpy as np

from ..models import EdgeParams


def odd_window(window_size: int) -> int:
    """Round an even window up to the next odd size so it stays symmetric."""
    ws = int(window_size)
    return ws if ws % 2 == 1 else ws + 1


def moving_average(data: np.ndarray, window_size: int) -> np.ndarray:
    """Centered moving average computed with a sliding sum.

    The first and last ``half`` samples are copied from ``data`` unchanged;
    every interior sample is the mean of the ``ws`` samples centered on it.
    Windows of 1 or less, and windows wider than the data, leave it as is.
    """

    x = np.asarray(data, dtype=np.float64)
    n = int(x.size)
    if window_size <= 1:
        return x.copy()

    ws = odd_window(window_size)
    if ws > n:
        return x.copy()
    half = (ws - 1) // 2

    values = x.tolist()
    smoothed = list(values)  # boundaries stay verbatim

    window_sum = 0.0
    for i in range(ws):
        window_sum += values[i]
    smoothed[half] = window_sum / ws

    for i in range(half + 1, n - half):
        window_sum = window_sum - values[i - half - 1] + values[i + half]
        smoothed[i] = window_sum / ws

    return np.asarray(smoothed, dtype=np.float64)


def smooth_profile(profile: np.ndarray, params: EdgeParams) -> np.ndarray:
    """Apply :func:`moving_average` when ``params`` asks for smoothing."""
    if not params.smooth_profile or params.window_size <= 1:
        return np.asarray(profile, dtype=np.float64)
    return moving_average(profile, params.window_size)


__all__ = ["odd_window", "moving_average", "smooth_profile"]
