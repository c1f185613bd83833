"""Small helpers shared by the analysis and UI layers."""

from .geometry import clamp

__all__ = ["clamp"]
