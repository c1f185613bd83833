"""Tests for the spreadsheet exporter."""

from __future__ import annotations

from pathlib import Path

from openpyxl import load_workbook
import pytest

from edge_timeline.analysis import aggregate
from edge_timeline.errors import ExportError, NothingToExportError
from edge_timeline.export import (
    DEFAULT_FILENAME,
    SHEET_NAME,
    build_rows,
    export_results,
    output_filename,
)
from edge_timeline.models import AnalysisResult, EdgeParams

PARAMS = EdgeParams(smooth_profile=True, window_size=5, min_spacing=10, max_edges=3)


def _timed():
    results = [
        AnalysisResult(
            step=1,
            image_no=2,
            speed=500,
            bucket=3,
            captured_at_ms=1_700_000_005_000,
            edges=(12, None, None),
            width=80,
            height=40,
            source_id="Step1_2_500_B3_1.png",
        ),
        AnalysisResult(
            step=1,
            image_no=1,
            speed=500,
            bucket=3,
            captured_at_ms=1_700_000_000_000,
            edges=(4, 30, 61),
            width=80,
            height=40,
            source_id="Step1_1_500_B3_1.png",
        ),
    ]
    return aggregate(results)


@pytest.mark.parametrize(
    ("folder", "expected"),
    [
        ("/data/runs/Set#2 (a)", "Set_2__a_.xlsx"),
        ("captures/run-7_b", "run-7_b.xlsx"),
        ("C:\\lab\\day 3", "day_3.xlsx"),
        ("captures/run/", "run.xlsx"),
        ("", DEFAULT_FILENAME),
        (None, DEFAULT_FILENAME),
        ("Unknown Folder", DEFAULT_FILENAME),
    ],
)
def test_output_filename(folder, expected: str) -> None:
    assert output_filename(folder) == expected


def test_build_rows_layout() -> None:
    rows = build_rows(_timed(), PARAMS, "/data/run1")

    assert rows[0] == ["Folder Path:", "/data/run1"]
    assert rows[2] == ["Smooth Profile:", "Yes"]
    assert rows[3] == ["Window Size:", 5]
    assert rows[4] == ["Min Edge Spacing:", 10]
    assert rows[5] == ["Max Edges:", 3]
    assert rows[6] == []
    assert rows[7] == [
        "Step",
        "ImageNo",
        "Speed",
        "Bucket",
        "ModifiedTime",
        "Cumulative_s",
        "Incremental_s",
        "Edge1",
        "Edge2",
        "Edge3",
    ]
    first, second = rows[8], rows[9]
    assert first[:4] == [1, 1, 500, 3]
    assert first[5:] == [0, 0, 4, 30, 61]
    assert second[:4] == [1, 2, 500, 3]
    assert second[5:] == [5, 5, 12, None, None]


def test_export_writes_workbook(tmp_path: Path) -> None:
    timed = _timed()
    path = export_results(timed, PARAMS, str(tmp_path / "Run A"), tmp_path / "out")

    assert path == tmp_path / "out" / "Run_A.xlsx"
    wb = load_workbook(path)
    ws = wb[SHEET_NAME]
    assert ws["A1"].value == "Folder Path:"
    assert ws["B1"].value == str(tmp_path / "Run A")
    assert ws["B3"].value == "Yes"
    assert ws["B6"].value == 3
    assert ws["A8"].value == "Step"
    assert ws["A8"].font.bold
    assert ws["J8"].value == "Edge3"
    assert ws["E9"].value == timed[0].modified_string
    assert [c.value for c in ws[10]] == [
        1,
        2,
        500,
        3,
        timed[1].modified_string,
        5,
        5,
        12,
        None,
        None,
    ]


def test_export_without_results_is_refused(tmp_path: Path) -> None:
    with pytest.raises(NothingToExportError):
        export_results([], PARAMS, "run", tmp_path)
    assert list(tmp_path.iterdir()) == []


def test_export_failure_keeps_cause(tmp_path: Path) -> None:
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(ExportError) as excinfo:
        export_results(_timed(), PARAMS, "run", blocker)
    assert isinstance(excinfo.value.__cause__, OSError)


def test_build_rows_rejects_edge_count_mismatch() -> None:
    wider = EdgeParams(smooth_profile=True, window_size=5, min_spacing=10, max_edges=4)
    with pytest.raises(ValueError, match="expected max_edges=4"):
        build_rows(_timed(), wider, "run")
