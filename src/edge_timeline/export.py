"""Spreadsheet export of aggregated edge results."""

from __future__ import annotations

import logging
from pathlib import Path, PurePath
import re
from typing import Any, List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from .errors import ExportError, NothingToExportError
from .models import EdgeParams, TimedResult

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "edge_results.xlsx"
SHEET_NAME = "ImageData"
UNKNOWN_FOLDER = "Unknown Folder"
MAX_COLUMN_WIDTH = 50

_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")

Row = List[Any]


def output_filename(folder: Optional[str]) -> str:
    """Spreadsheet name derived from the last segment of ``folder``."""

    if not folder or folder == UNKNOWN_FOLDER:
        return DEFAULT_FILENAME
    name = PurePath(str(folder).replace("\\", "/")).name or str(folder)
    cleaned = _UNSAFE.sub("_", name)
    return f"{cleaned}.xlsx" if cleaned else DEFAULT_FILENAME


def header_row(max_edges: int) -> Row:
    columns: Row = [
        "Step",
        "ImageNo",
        "Speed",
        "Bucket",
        "ModifiedTime",
        "Cumulative_s",
        "Incremental_s",
    ]
    columns.extend(f"Edge{i}" for i in range(1, max_edges + 1))
    return columns


def build_rows(
    results: Sequence[TimedResult], params: EdgeParams, folder: Optional[str]
) -> List[Row]:
    """Header block followed by the data table, one row per result.

    Raises :class:`ValueError` when a result's edge set does not have
    exactly ``params.max_edges`` slots.
    """

    rows: List[Row] = [
        ["Folder Path:", folder or "Unknown"],
        ["Processing Parameters:"],
        ["Smooth Profile:", "Yes" if params.smooth_profile else "No"],
        ["Window Size:", params.window_size],
        ["Min Edge Spacing:", params.min_spacing],
        ["Max Edges:", params.max_edges],
        [],
        header_row(params.max_edges),
    ]
    for r in results:
        row: Row = [
            r.step,
            r.image_no,
            r.speed,
            r.bucket,
            r.modified_string,
            r.cumulative_s,
            r.incremental_s,
        ]
        if len(r.edges) != params.max_edges:
            raise ValueError(
                f"{r.source_id}: {len(r.edges)} edge slots, "
                f"expected max_edges={params.max_edges}"
            )
        row.extend(r.edges)  # absent edges stay empty cells
        rows.append(row)
    return rows


def _auto_fit_columns(worksheet: Any, rows: Sequence[Row]) -> None:
    widths: dict = {}
    for row in rows:
        for idx, value in enumerate(row, start=1):
            text = "" if value is None else str(value)
            widths[idx] = max(widths.get(idx, 0), len(text))
    for idx, width in widths.items():
        worksheet.column_dimensions[get_column_letter(idx)].width = min(
            width + 2, MAX_COLUMN_WIDTH
        )


def export_results(
    results: Sequence[TimedResult],
    params: EdgeParams,
    folder: Optional[str],
    out_dir: Path,
) -> Path:
    """Write ``results`` to ``out_dir`` and return the spreadsheet path.

    Raises :class:`NothingToExportError` for an empty result set and
    :class:`ExportError` when the workbook cannot be written.
    """

    if not results:
        raise NothingToExportError("No valid images processed; nothing to export.")

    rows = build_rows(results, params, folder)
    header_index = len(rows) - len(results)

    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_NAME
    for row in rows:
        ws.append(row)
    for cell in ws[header_index]:
        cell.font = Font(bold=True)
    _auto_fit_columns(ws, rows)

    path = Path(out_dir) / output_filename(folder)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(path)
    except OSError as exc:
        raise ExportError(f"Export failed: {exc}") from exc

    logger.info("Exported %d rows to %s", len(results), path)
    return path


__all__ = [
    "DEFAULT_FILENAME",
    "SHEET_NAME",
    "output_filename",
    "header_row",
    "build_rows",
    "export_results",
]
