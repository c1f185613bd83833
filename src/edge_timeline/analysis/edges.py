"""Derivative based edge picking along a 1-D profile.

Edges are the columns where the profile changes fastest.  Candidates are
visited from the strongest absolute derivative downwards (ties resolved
towards the lower column) and accepted greedily while they keep at least
``min_spacing`` columns away from every edge accepted before them.  This is
a cheap, deterministic stand-in for non-maximum suppression; it does not
search for the globally best spaced set.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

from ..models import EdgeSet


def derivative(profile: np.ndarray) -> np.ndarray:
    """Discrete first derivative of ``profile``.

    Interior points use the centered difference ``(p[i+1] - p[i-1]) / 2``;
    the first and last points use a forward and backward difference.
    """

    p = np.asarray(profile, dtype=np.float64)
    n = int(p.size)
    d1 = np.zeros(n, dtype=np.float64)
    if n < 2:
        return d1

    d1[0] = p[1] - p[0]
    d1[1:-1] = (p[2:] - p[:-2]) * 0.5
    d1[-1] = p[-1] - p[-2]
    return d1


def candidate_order(magnitude: np.ndarray) -> np.ndarray:
    """Columns by descending magnitude, lowest index first among equals.

    This is the order a left-to-right argmax scan visits the columns when
    each visited column is consumed before the next scan.
    """

    mag = np.asarray(magnitude, dtype=np.float64)
    return np.argsort(-mag, kind="stable")


def select_edges(magnitude: np.ndarray, min_spacing: int, max_edges: int) -> List[int]:
    """Greedily pick up to ``max_edges`` well separated peak columns.

    A candidate is rejected when ``abs(candidate - accepted) < min_spacing``
    for any already accepted column.  The scan ends once ``max_edges``
    columns are accepted or every column has been considered.  The result
    is sorted ascending.
    """

    if max_edges < 1:
        return []

    edges: List[int] = []
    for candidate in candidate_order(magnitude).tolist():
        if all(abs(candidate - edge) >= min_spacing for edge in edges):
            edges.append(int(candidate))
            if len(edges) >= max_edges:
                break

    edges.sort()
    return edges


def detect_edges(profile: np.ndarray, min_spacing: int, max_edges: int) -> List[int]:
    """Return the ascending edge columns of an (optionally smoothed) profile."""
    magnitude = np.abs(derivative(profile))
    return select_edges(magnitude, min_spacing, max_edges)


def pad_edges(edges: Sequence[int], max_edges: int) -> EdgeSet:
    """Pad ``edges`` with ``None`` so the set has exactly ``max_edges`` slots."""
    slots: List[Optional[int]] = [int(e) for e in list(edges)[:max_edges]]
    slots.extend([None] * (max_edges - len(slots)))
    return tuple(slots)


__all__ = [
    "derivative",
    "candidate_order",
    "select_edges",
    "detect_edges",
    "pad_edges",
]
