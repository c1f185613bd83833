"""Numeric helpers used throughout the UI and analysis layers."""


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp ``value`` to the inclusive range ``[lo, hi]``."""
    return max(lo, min(hi, value))


__all__ = ["clamp"]
