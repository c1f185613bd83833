"""Signal-processing and aggregation routines behind edge_timeline."""

from .edges import derivative, detect_edges, pad_edges, select_edges
from .filename import FilenameInfo, decode_filename, is_analyzable
from .profile import extract_profile, is_degenerate, normalize_profile
from .smoothing import moving_average, smooth_profile
from .timing import aggregate

__all__ = [
    "aggregate",
    "decode_filename",
    "derivative",
    "detect_edges",
    "extract_profile",
    "FilenameInfo",
    "is_analyzable",
    "is_degenerate",
    "moving_average",
    "normalize_profile",
    "pad_edges",
    "select_edges",
    "smooth_profile",
]
