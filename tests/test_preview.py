"""Tests for the preview helpers."""

import dataclasses

import numpy as np

from edge_timeline.models import AnalysisResult, TimedResult
from edge_timeline.preview import (
    describe_edges,
    describe_result,
    overlay_lines,
    populated_edges,
    render_overlay,
)

BASE = AnalysisResult(
    step=2,
    image_no=7,
    speed=300,
    bucket=1,
    captured_at_ms=0,
    edges=(350, 380, None),
    width=400,
    height=200,
    source_id="Step2_7_300_B1_1.png",
)
TIMED = TimedResult.from_result(BASE, cumulative_s=12, incremental_s=4)


def test_populated_edges_drop_absent_slots() -> None:
    assert populated_edges(TIMED) == [350, 380]


def test_render_overlay_draws_red_edge_lines() -> None:
    image = np.full((200, 400, 3), 255, dtype=np.uint8)
    image[..., 2] = 0  # cyan background so red lines stand out

    canvas = render_overlay(image, TIMED, thickness=1)

    assert canvas.shape == image.shape
    assert image[150, 350].tolist() == [255, 255, 0]  # input untouched
    assert canvas[150, 350].tolist() == [0, 0, 255]
    assert canvas[150, 380].tolist() == [0, 0, 255]
    assert canvas[150, 365].tolist() == [255, 255, 0]


def test_render_overlay_shades_metadata_box() -> None:
    image = np.full((200, 400, 3), 255, dtype=np.uint8)
    canvas = render_overlay(image, TIMED)
    assert canvas[125, 300].tolist() == [76, 76, 76]
    assert canvas[180, 200].tolist() == [255, 255, 255]


def test_render_overlay_ignores_out_of_range_edges() -> None:
    tiny = np.zeros((4, 4, 3), dtype=np.uint8)
    canvas = render_overlay(tiny, BASE)
    assert canvas.shape == (4, 4, 3)


def test_text_helpers() -> None:
    assert overlay_lines(TIMED) == [
        "Step: 2 | Image: 7",
        "Bucket: 1 | Speed: 300",
        "Cumulative: 12s",
        "Incremental: 4s",
        "Edges: 350, 380",
    ]
    assert describe_result(TIMED, 0, 3) == (
        "Image 1 of 3 | Step: 2 | Bucket: 1 | Cumulative: 12s | Incremental: 4s"
    )
    assert describe_edges(TIMED) == "Detected Edges: 350, 380 (X-coordinates)"
    empty = TimedResult.from_result(
        dataclasses.replace(BASE, edges=(None, None, None)),
        cumulative_s=0,
        incremental_s=0,
    )
    assert describe_edges(empty) == "No edges detected"
