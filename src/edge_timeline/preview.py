"""Helpers for presenting a processed image with its detected edges."""

from __future__ import annotations

from typing import List, Union

import cv2  # opencv-python
import numpy as np

from .models import AnalysisResult, TimedResult

EDGE_COLOR_BGR = (0, 0, 255)
TEXT_COLOR_BGR = (255, 255, 255)
BOX_ALPHA = 0.7
BOX_ORIGIN = (10, 10)
BOX_SIZE = (300, 120)
LINE_SPACING_PX = 20

Result = Union[AnalysisResult, TimedResult]


def populated_edges(result: Result) -> List[int]:
    return [int(e) for e in result.edges if e is not None]


def overlay_lines(result: Result) -> List[str]:
    """Text lines drawn in the overlay box."""

    edges = ", ".join(str(e) for e in populated_edges(result))
    lines = [
        f"Step: {result.step} | Image: {result.image_no}",
        f"Bucket: {result.bucket} | Speed: {result.speed}",
    ]
    if isinstance(result, TimedResult):
        lines.append(f"Cumulative: {result.cumulative_s}s")
        lines.append(f"Incremental: {result.incremental_s}s")
    lines.append(f"Edges: {edges}")
    return lines


def describe_result(result: Result, index: int = 0, count: int = 1) -> str:
    """One-line summary shown under the preview."""

    parts = [
        f"Image {index + 1} of {count}",
        f"Step: {result.step}",
        f"Bucket: {result.bucket}",
    ]
    if isinstance(result, TimedResult):
        parts.append(f"Cumulative: {result.cumulative_s}s")
        parts.append(f"Incremental: {result.incremental_s}s")
    return " | ".join(parts)


def describe_edges(result: Result) -> str:
    edges = populated_edges(result)
    if not edges:
        return "No edges detected"
    return f"Detected Edges: {', '.join(str(e) for e in edges)} (X-coordinates)"


def render_overlay(
    image_bgr: np.ndarray, result: Result, thickness: int = 2
) -> np.ndarray:
    """Copy of ``image_bgr`` with red edge lines and a metadata box."""

    canvas = np.ascontiguousarray(image_bgr, dtype=np.uint8).copy()
    if canvas.ndim == 2:
        canvas = cv2.cvtColor(canvas, cv2.COLOR_GRAY2BGR)
    height, width = canvas.shape[:2]

    for x in populated_edges(result):
        if 0 <= x < width:
            cv2.line(canvas, (x, 0), (x, height - 1), EDGE_COLOR_BGR, max(1, thickness))

    x0, y0 = BOX_ORIGIN
    x1 = min(width - 1, x0 + BOX_SIZE[0])
    y1 = min(height - 1, y0 + BOX_SIZE[1])
    if x1 > x0 and y1 > y0:
        region = canvas[y0:y1, x0:x1]
        shaded = (region.astype(np.float64) * (1.0 - BOX_ALPHA)).astype(np.uint8)
        canvas[y0:y1, x0:x1] = shaded
        for i, text in enumerate(overlay_lines(result)):
            cv2.putText(
                canvas,
                text,
                (x0 + 10, y0 + LINE_SPACING_PX * (i + 1)),
                cv2.FONT_HERSHEY_SIMPLEX,
                0.45,
                TEXT_COLOR_BGR,
                1,
                cv2.LINE_AA,
            )
    return canvas


__all__ = [
    "populated_edges",
    "overlay_lines",
    "describe_result",
    "describe_edges",
    "render_overlay",
]
