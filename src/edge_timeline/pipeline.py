"""Per-image analysis and bounded-concurrency batch processing."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
import logging
from pathlib import Path
import time
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import cv2  # opencv-python
import numpy as np

from .analysis import (
    decode_filename,
    detect_edges,
    extract_profile,
    is_degenerate,
    pad_edges,
    smooth_profile,
)
from .errors import ImageDecodeError
from .models import AnalysisResult, EdgeParams

logger = logging.getLogger(__name__)

CONCURRENCY_LIMIT = 4
IMAGE_SUFFIX = ".png"

ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class ImageSource:
    """A named image and its last-modified time in milliseconds.

    The pixels come either from ``path`` or from in-memory ``data``.
    """

    name: str
    captured_at_ms: int
    path: Optional[Path] = None
    data: Optional[bytes] = None

    def read(self) -> bytes:
        if self.data is not None:
            return self.data
        if self.path is None:
            raise ValueError(f"{self.name}: image source has neither path nor data")
        return self.path.read_bytes()

    @classmethod
    def from_path(cls, path: Path) -> "ImageSource":
        stat = path.stat()
        return cls(
            name=path.name,
            captured_at_ms=int(stat.st_mtime_ns // 1_000_000),
            path=path,
        )


@dataclass
class BatchReport:
    """Outcome of :func:`process_batch`."""

    total: int
    results: List[AnalysisResult] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)  # names not matching pattern
    failed: Dict[str, str] = field(default_factory=dict)  # name -> reason
    elapsed_s: float = 0.0


def scan_folder(folder: Path) -> List[ImageSource]:
    """List the PNG files directly inside ``folder``, sorted by name."""

    folder = Path(folder)
    paths = sorted(
        (
            p
            for p in folder.iterdir()
            if p.is_file() and p.suffix.lower() == IMAGE_SUFFIX
        ),
        key=lambda p: p.name,
    )
    return [ImageSource.from_path(p) for p in paths]


def decode_image(data: bytes, source_id: str = "<memory>") -> np.ndarray:
    """Decode encoded image bytes into a fresh BGR array owned by the caller."""

    buf = np.frombuffer(data, dtype=np.uint8)
    if buf.size == 0:
        raise ImageDecodeError(source_id, "empty file")
    image = cv2.imdecode(buf, cv2.IMREAD_COLOR)
    if image is None or image.size == 0:
        raise ImageDecodeError(source_id)
    return image


def compute_edges(
    image: np.ndarray, params: EdgeParams, source_id: str = "<memory>"
) -> Tuple[np.ndarray, List[int]]:
    """Return the (smoothed) profile of ``image`` and its ascending edges.

    A fully black image yields an all-zero profile and no edges.
    """

    profile = extract_profile(image)
    if is_degenerate(profile):
        logger.warning("%s: image has no red intensity; no edges reported", source_id)
        return profile, []
    processed = smooth_profile(profile, params)
    return processed, detect_edges(processed, params.min_spacing, params.max_edges)


def analyze_image(source: ImageSource, params: EdgeParams) -> Optional[AnalysisResult]:
    """Analyze one source; ``None`` when its name is not an analyzable file.

    Raises :class:`ImageDecodeError` when the bytes cannot be decoded.
    """

    info = decode_filename(source.name)
    if info is None:
        return None

    image = decode_image(source.read(), source.name)
    height, width = int(image.shape[0]), int(image.shape[1])
    _, edges = compute_edges(image, params, source.name)

    return AnalysisResult(
        step=info.step,
        image_no=info.image_no,
        speed=info.speed,
        bucket=info.bucket,
        captured_at_ms=int(source.captured_at_ms),
        edges=pad_edges(edges, params.max_edges),
        width=width,
        height=height,
        source_id=source.name,
    )


def process_batch(
    sources: Iterable[ImageSource],
    params: EdgeParams,
    concurrency_limit: int = CONCURRENCY_LIMIT,
    progress: Optional[ProgressCallback] = None,
) -> BatchReport:
    """Analyze ``sources`` in sequential groups of ``concurrency_limit``.

    Members of a group run concurrently and the whole group finishes before
    the next one starts, so at most ``concurrency_limit`` decoded images are
    alive at once.  Failures are recorded in the report and never stop the
    batch.  ``progress(group_end, total)`` is called after every group.
    Results are in completion order.
    """

    items = list(sources)
    total = len(items)
    params = params.validated()
    limit = max(1, int(concurrency_limit))
    report = BatchReport(total=total)
    started = time.perf_counter()

    with ThreadPoolExecutor(
        max_workers=limit, thread_name_prefix="edge-timeline"
    ) as executor:
        for group_start in range(0, total, limit):
            group = items[group_start : group_start + limit]
            futures = {executor.submit(analyze_image, s, params): s for s in group}
            for future in as_completed(futures):
                source = futures[future]
                try:
                    result = future.result()
                except ImageDecodeError as exc:
                    logger.warning("Skipping %s: %s", source.name, exc.reason)
                    report.failed[source.name] = exc.reason
                    continue
                except Exception as exc:
                    logger.exception("Failed to analyze %s", source.name)
                    report.failed[source.name] = str(exc) or type(exc).__name__
                    continue
                if result is None:
                    logger.debug("Skipping %s: name does not match", source.name)
                    report.skipped.append(source.name)
                else:
                    report.results.append(result)

            group_end = min(group_start + limit, total)
            logger.debug("Processed %d/%d images", group_end, total)
            if progress is not None:
                progress(group_end, total)

    report.elapsed_s = time.perf_counter() - started
    logger.info(
        "Analyzed %d of %d images in %.2fs (%d skipped, %d failed)",
        len(report.results),
        total,
        report.elapsed_s,
        len(report.skipped),
        len(report.failed),
    )
    return report


__all__ = [
    "CONCURRENCY_LIMIT",
    "ImageSource",
    "BatchReport",
    "scan_folder",
    "decode_image",
    "compute_edges",
    "analyze_image",
    "process_batch",
]
