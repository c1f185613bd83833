"""Tests for derivative-based edge selection."""

from __future__ import annotations

from itertools import combinations
from typing import List

from hypothesis import given, settings
from hypothesis import strategies as st
import numpy as np
from numpy.testing import assert_allclose
import pytest

from edge_timeline.analysis import derivative, detect_edges, pad_edges, select_edges


def _argmax_scan_reference(
    magnitude: np.ndarray, min_spacing: int, max_edges: int
) -> List[int]:
    """Repeated left-to-right argmax, consuming every visited column."""
    mag = [float(v) for v in magnitude]
    consumed = [False] * len(mag)
    edges: List[int] = []
    for _ in range(len(mag)):
        if len(edges) >= max_edges:
            break
        best = -1
        for j, value in enumerate(mag):
            if consumed[j]:
                continue
            if best < 0 or value > mag[best]:
                best = j
        consumed[best] = True
        if all(abs(best - e) >= min_spacing for e in edges):
            edges.append(best)
    return sorted(edges)


def test_derivative_centered_and_one_sided() -> None:
    p = np.array([0.0, 1.0, 3.0, 6.0])
    assert_allclose(derivative(p), [1.0, 1.5, 2.5, 3.0])


def test_derivative_of_short_profiles() -> None:
    assert_allclose(derivative(np.array([0.7])), [0.0])
    assert_allclose(derivative(np.array([0.2, 0.5])), [0.3, 0.3])


def test_select_edges_picks_strongest_first() -> None:
    mag = np.array([0.0, 5.0, 0.0, 0.0, 4.0, 0.0, 0.0, 0.0, 3.0])
    assert select_edges(mag, min_spacing=2, max_edges=2) == [1, 4]


def test_select_edges_rejects_close_candidates() -> None:
    mag = np.array([0.0, 9.0, 8.0, 0.0, 0.0, 7.0])
    assert select_edges(mag, min_spacing=3, max_edges=2) == [1, 5]


def test_spacing_comparison_is_exclusive() -> None:
    mag = np.array([9.0, 0.0, 8.0])
    assert select_edges(mag, min_spacing=2, max_edges=2) == [0, 2]
    assert select_edges(mag, min_spacing=3, max_edges=2) == [0]


def test_ties_resolve_to_lowest_column() -> None:
    mag = np.array([1.0, 3.0, 3.0, 3.0])
    assert select_edges(mag, min_spacing=0, max_edges=1) == [1]
    assert select_edges(mag, min_spacing=0, max_edges=2) == [1, 2]


def test_result_is_sorted_ascending() -> None:
    mag = np.array([0.0, 1.0, 0.0, 0.0, 0.0, 9.0])
    assert select_edges(mag, min_spacing=1, max_edges=2) == [1, 5]


def test_fewer_edges_when_candidates_run_out() -> None:
    mag = np.array([1.0, 2.0, 3.0])
    assert select_edges(mag, min_spacing=10, max_edges=4) == [2]


def test_non_positive_max_edges_returns_nothing() -> None:
    assert select_edges(np.array([1.0, 2.0]), min_spacing=0, max_edges=0) == []


def test_detect_edges_on_bright_band() -> None:
    profile = np.zeros(50)
    profile[20:35] = 1.0
    assert detect_edges(profile, min_spacing=10, max_edges=2) == [19, 34]


def test_pad_edges() -> None:
    assert pad_edges([3, 17], 4) == (3, 17, None, None)
    assert pad_edges([], 2) == (None, None)
    assert pad_edges([1, 2, 3], 2) == (1, 2)


magnitudes = st.lists(
    st.integers(min_value=0, max_value=6), min_size=1, max_size=80
).map(lambda values: np.asarray(values, dtype=np.float64))
spacings = st.integers(min_value=0, max_value=20)
edge_counts = st.integers(min_value=1, max_value=10)


@given(magnitude=magnitudes, min_spacing=spacings, max_edges=edge_counts)
@settings(deadline=None, max_examples=200)
def test_matches_argmax_scan(
    magnitude: np.ndarray, min_spacing: int, max_edges: int
) -> None:
    expected = _argmax_scan_reference(magnitude, min_spacing, max_edges)
    assert select_edges(magnitude, min_spacing, max_edges) == expected


@given(magnitude=magnitudes, min_spacing=spacings, max_edges=edge_counts)
@settings(deadline=None, max_examples=200)
def test_spacing_and_cardinality(
    magnitude: np.ndarray, min_spacing: int, max_edges: int
) -> None:
    edges = select_edges(magnitude, min_spacing, max_edges)

    assert len(edges) <= max_edges
    assert len(set(edges)) == len(edges)
    assert all(0 <= e < magnitude.size for e in edges)
    for a, b in combinations(edges, 2):
        assert abs(a - b) >= min_spacing

    if len(edges) < max_edges:
        # every remaining column must have been blocked by the spacing rule
        for col in range(magnitude.size):
            if col not in edges:
                assert any(abs(col - e) < min_spacing for e in edges)

    if min_spacing <= 1:
        assert len(edges) == min(max_edges, magnitude.size)


@given(magnitude=magnitudes, min_spacing=spacings, max_edges=edge_counts)
@settings(deadline=None, max_examples=50)
def test_selection_is_deterministic(
    magnitude: np.ndarray, min_spacing: int, max_edges: int
) -> None:
    first = select_edges(magnitude.copy(), min_spacing, max_edges)
    second = select_edges(magnitude.copy(), min_spacing, max_edges)
    assert first == second


@pytest.mark.parametrize("width", [1, 2, 3, 16])
def test_detect_edges_handles_narrow_profiles(width: int) -> None:
    profile = np.linspace(0.0, 1.0, width)
    edges = detect_edges(profile, min_spacing=0, max_edges=4)
    assert len(edges) == min(4, width)
