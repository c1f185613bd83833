"""Helpers for reducing decoded images to a 1-D column intensity profile."""

import numpy as np

RED_CHANNEL = 2  # OpenCV decodes colour images as BGR(A)


def red_channel(image: np.ndarray) -> np.ndarray:
    """Return the red plane of a grayscale, BGR or BGRA image array."""

    arr = np.asarray(image)
    if arr.ndim == 2:
        return arr
    if arr.ndim == 3:
        if arr.shape[2] == 1:
            return arr[..., 0]
        if arr.shape[2] in (3, 4):
            return arr[..., RED_CHANNEL]
    raise ValueError("Expected a grayscale or BGR/BGRA image array.")


def column_profile(image: np.ndarray) -> np.ndarray:
    """Sum the red channel down every column.

    The sum (not the mean) is kept so all images share one intensity scale
    before normalization.
    """

    plane = red_channel(image)
    if plane.shape[0] < 1 or plane.shape[1] < 1:
        raise ValueError("Image must be at least one pixel wide and tall.")
    return np.sum(plane, axis=0, dtype=np.float64)


def normalize_profile(profile: np.ndarray) -> np.ndarray:
    """Scale ``profile`` by its maximum so the largest column becomes 1.0.

    An all-zero profile has nothing to scale by and is returned as zeros.
    """

    p = np.asarray(profile, dtype=np.float64)
    max_val = float(np.max(p)) if p.size else 0.0
    if max_val <= 0.0:
        return p.copy()
    return p / max_val


def is_degenerate(profile: np.ndarray) -> bool:
    """True when the profile carries no intensity at all (fully black image)."""
    return not np.any(np.asarray(profile))


def extract_profile(image: np.ndarray) -> np.ndarray:
    """Column-summed, max-normalized red-channel profile of ``image``."""
    return normalize_profile(column_profile(image))


__all__ = [
    "red_channel",
    "column_profile",
    "normalize_profile",
    "is_degenerate",
    "extract_profile",
]
