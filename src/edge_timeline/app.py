"""Qt application entry point for the edge_timeline batch tool."""

from __future__ import annotations

import logging
from pathlib import Path
import sys
from typing import List, Optional, Sequence

from PySide6 import QtCore, QtGui, QtWidgets
import numpy as np

APP_VERSION: str

if __package__ in (None, ""):
    PACKAGE_ROOT = Path(__file__).resolve().parents[1]
    if str(PACKAGE_ROOT) not in sys.path:
        sys.path.insert(0, str(PACKAGE_ROOT))

    import edge_timeline as _pkg
    from edge_timeline.analysis import aggregate
    from edge_timeline.errors import EdgeTimelineError, ImageDecodeError
    from edge_timeline.export import export_results
    from edge_timeline.models import AppConfig, EdgeParams, TimedResult
    from edge_timeline.pipeline import (
        ImageSource,
        compute_edges,
        decode_image,
        process_batch,
        scan_folder,
    )
    from edge_timeline.preview import (
        describe_edges,
        describe_result,
        populated_edges,
        render_overlay,
    )
    from edge_timeline.utils.qt import bgr_to_qimage

    APP_VERSION = getattr(_pkg, "__version__", "0.0.0")
else:
    from . import __version__ as APP_VERSION
    from .analysis import aggregate
    from .errors import EdgeTimelineError, ImageDecodeError
    from .export import export_results
    from .models import AppConfig, EdgeParams, TimedResult
    from .pipeline import (
        ImageSource,
        compute_edges,
        decode_image,
        process_batch,
        scan_folder,
    )
    from .preview import (
        describe_edges,
        describe_result,
        populated_edges,
        render_overlay,
    )
    from .utils.qt import bgr_to_qimage

logger = logging.getLogger(__name__)


# ------------------------------- Profile Plot ---------------------------------


class ProfilePlot(QtWidgets.QWidget):
    """Simple QWidget that draws a column profile with its edge markers."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self._profile = np.empty((0,), dtype=np.float64)
        self._edges: List[int] = []
        self.setMinimumHeight(180)
        self.setSizePolicy(
            QtWidgets.QSizePolicy.Policy.Expanding,
            QtWidgets.QSizePolicy.Policy.Expanding,
        )

    def set_profile(self, profile: Optional[np.ndarray]) -> None:
        if profile is None or getattr(profile, "size", 0) == 0:
            self._profile = np.empty((0,), dtype=np.float64)
        else:
            self._profile = np.asarray(profile, dtype=np.float64).copy()
        self.update()

    def set_edges(self, edges: Sequence[int]) -> None:
        self._edges = [int(e) for e in edges]
        self.update()

    def paintEvent(self, e: QtGui.QPaintEvent) -> None:
        painter = QtGui.QPainter(self)
        painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)

        rect = self.rect().adjusted(8, 8, -8, -8)
        painter.fillRect(self.rect(), QtGui.QColor(250, 250, 250))
        painter.setPen(QtGui.QPen(QtGui.QColor(220, 220, 220)))
        painter.setBrush(QtCore.Qt.BrushStyle.NoBrush)
        painter.drawRect(rect)

        if self._profile.size == 0:
            painter.setPen(QtGui.QPen(QtGui.QColor(120, 120, 120)))
            painter.drawText(
                rect,
                QtCore.Qt.AlignmentFlag.AlignCenter,
                "No profile yet.\nProcess a folder to preview column profiles.",
            )
            return

        # Profiles are already normalized to [0,1]
        p = np.clip(self._profile, 0.0, 1.0)
        N = p.size
        left, top, right, bottom = rect.left(), rect.top(), rect.right(), rect.bottom()
        w = max(1.0, float(right - left))
        h = max(1.0, float(bottom - top))

        # Horizontal grid
        painter.setPen(QtGui.QPen(QtGui.QColor(235, 235, 235)))
        for g in range(1, 4):
            y = top + h * (g / 4.0)
            painter.drawLine(QtCore.QPointF(left, y), QtCore.QPointF(right, y))

        def x_at(i: int) -> float:
            if N <= 1:
                return left
            return left + (w - 1.0) * (i / float(N - 1))

        def y_at(v: float) -> float:
            return bottom - v * (h - 1.0)

        path = QtGui.QPainterPath()
        path.moveTo(x_at(0), y_at(p[0]))
        for i in range(1, N):
            path.lineTo(x_at(i), y_at(p[i]))

        painter.setPen(QtGui.QPen(QtGui.QColor(0, 120, 215), 2))
        painter.drawPath(path)

        # Edge markers at their columns
        painter.setPen(QtGui.QPen(QtGui.QColor(220, 0, 0, 200), 1))
        for col in self._edges:
            if 0 <= col < N:
                x = x_at(col)
                painter.drawLine(QtCore.QPointF(x, top), QtCore.QPointF(x, bottom))

        painter.setPen(QtGui.QPen(QtGui.QColor(80, 80, 80)))
        text = f"Width: {N} px   edges: {', '.join(str(c) for c in self._edges)}"
        painter.drawText(
            self.rect().adjusted(12, 12, -12, -12),
            QtCore.Qt.AlignmentFlag.AlignTop | QtCore.Qt.AlignmentFlag.AlignLeft,
            text,
        )


# ---------------------------- Control Dialog UI -------------------------------


class ControlDialog(QtWidgets.QDialog):
    selectFolderRequested = QtCore.Signal()
    processRequested = QtCore.Signal()
    paramsChanged = QtCore.Signal()
    previewIndexChanged = QtCore.Signal(int)

    def __init__(self, cfg: AppConfig, app_version: str) -> None:
        super().__init__(None)
        self._app_version = app_version or "unknown"
        self.setWindowTitle(f"edge_timeline {self._app_version} — Edge Timing Batch")
        self.setMinimumWidth(640)

        # Widgets
        self.folder_btn = QtWidgets.QPushButton("Select Folder…")
        self.folder_btn.clicked.connect(self.selectFolderRequested)
        self.folder_label = QtWidgets.QLabel("No folder selected.")
        self.folder_label.setWordWrap(True)

        self.smooth_check = QtWidgets.QCheckBox("Enable")
        self.smooth_check.setChecked(cfg.params.smooth_profile)
        self.smooth_check.toggled.connect(self.paramsChanged)

        self.window_spin = QtWidgets.QSpinBox()
        self.window_spin.setRange(1, 999)
        self.window_spin.setValue(cfg.params.window_size)
        self.window_spin.valueChanged.connect(self.paramsChanged)

        self.spacing_spin = QtWidgets.QSpinBox()
        self.spacing_spin.setRange(0, 100000)
        self.spacing_spin.setValue(cfg.params.min_spacing)
        self.spacing_spin.valueChanged.connect(self.paramsChanged)

        self.edges_spin = QtWidgets.QSpinBox()
        self.edges_spin.setRange(1, 50)
        self.edges_spin.setValue(cfg.params.max_edges)
        self.edges_spin.valueChanged.connect(self.paramsChanged)

        self.process_btn = QtWidgets.QPushButton("Process && Export")
        self.process_btn.setEnabled(False)
        self.process_btn.clicked.connect(self.processRequested)

        self.progress_bar = QtWidgets.QProgressBar()
        self.progress_bar.setRange(0, 1000)
        self.progress_bar.setVisible(False)
        self.progress_label = QtWidgets.QLabel("")

        self.status_label = QtWidgets.QLabel("Select a folder containing PNG images.")
        self.status_label.setWordWrap(True)

        # Tabs
        self.tabs = QtWidgets.QTabWidget(self)

        # --- Controls tab
        controls_page = QtWidgets.QWidget(self)
        controls_form = QtWidgets.QFormLayout(controls_page)
        controls_form.setFieldGrowthPolicy(
            QtWidgets.QFormLayout.FieldGrowthPolicy.AllNonFixedFieldsGrow
        )
        controls_form.addRow(self.folder_btn)
        controls_form.addRow(self.folder_label)
        controls_form.addRow("Smooth profile:", self.smooth_check)
        controls_form.addRow("Window size:", self.window_spin)
        controls_form.addRow("Min edge spacing (px):", self.spacing_spin)
        controls_form.addRow("Max edges:", self.edges_spin)
        controls_form.addRow(self.process_btn)
        controls_form.addRow(self.progress_bar)
        controls_form.addRow(self.progress_label)
        controls_v = QtWidgets.QVBoxLayout()
        controls_v.addLayout(controls_form)
        controls_v.addWidget(self.status_label)
        controls_page.setLayout(controls_v)
        self.tabs.addTab(controls_page, "Controls")

        # --- Preview tab
        preview_page = QtWidgets.QWidget(self)
        self.preview_image = QtWidgets.QLabel(preview_page)
        self.preview_image.setAlignment(QtCore.Qt.AlignmentFlag.AlignCenter)
        self.preview_image.setMinimumSize(320, 200)
        self.preview_image.setSizePolicy(
            QtWidgets.QSizePolicy.Policy.Expanding,
            QtWidgets.QSizePolicy.Policy.Expanding,
        )
        self.preview_slider = QtWidgets.QSlider(QtCore.Qt.Orientation.Horizontal)
        self.preview_slider.setRange(0, 0)
        self.preview_slider.valueChanged.connect(self.previewIndexChanged)
        self.prev_btn = QtWidgets.QPushButton("◀ Previous")
        self.prev_btn.clicked.connect(self.previous_image)
        self.next_btn = QtWidgets.QPushButton("Next ▶")
        self.next_btn.clicked.connect(self.next_image)
        self.preview_info = QtWidgets.QLabel("")
        self.preview_info.setWordWrap(True)
        self.edge_info = QtWidgets.QLabel("")
        nav = QtWidgets.QHBoxLayout()
        nav.addWidget(self.prev_btn)
        nav.addWidget(self.preview_slider, stretch=1)
        nav.addWidget(self.next_btn)
        preview_v = QtWidgets.QVBoxLayout(preview_page)
        preview_v.addWidget(self.preview_image, stretch=1)
        preview_v.addLayout(nav)
        preview_v.addWidget(self.preview_info)
        preview_v.addWidget(self.edge_info)
        preview_page.setLayout(preview_v)
        self.tabs.addTab(preview_page, "Preview")

        # --- Profile tab
        profile_page = QtWidgets.QWidget(self)
        self.profile_plot = ProfilePlot(profile_page)
        profile_v = QtWidgets.QVBoxLayout(profile_page)
        profile_v.addWidget(self.profile_plot, stretch=1)
        profile_page.setLayout(profile_v)
        self.tabs.addTab(profile_page, "Profile")

        # --- Help tab
        help_page = QtWidgets.QScrollArea(self)
        help_page.setWidgetResizable(True)
        help_body = QtWidgets.QWidget()
        help_layout = QtWidgets.QVBoxLayout(help_body)
        help_text = QtWidgets.QLabel(self._help_markdown(), help_body)
        help_text.setTextFormat(QtCore.Qt.TextFormat.RichText)
        help_text.setWordWrap(True)
        help_layout.addWidget(help_text)
        help_layout.addStretch(1)
        help_page.setWidget(help_body)
        self.tabs.addTab(help_page, "Help")

        v = QtWidgets.QVBoxLayout(self)
        v.addWidget(self.tabs)
        self.tabs.setCurrentIndex(0)

    # --- helpers ---
    def _help_markdown(self) -> str:
        return (
            f"<h3>edge_timeline {self._app_version} — quick reference</h3>"
            "<ul>"
            "<li><b>Select</b> a folder of PNG images named "
            "<code>[End]Step&lt;n&gt;_&lt;image&gt;_&lt;speed&gt;_B&lt;bucket&gt;_1.png"
            "</code>.</li>"
            "<li>Other files in the folder are ignored.</li>"
            "<li><b>Process</b> finds up to <b>Max edges</b> columns of strongest "
            "brightness change, at least <b>Min edge spacing</b> apart.</li>"
            "<li>Results are sorted by file modification time and written to "
            "<code>&lt;folder name&gt;.xlsx</code> next to the folder.</li>"
            "<li><b>Incremental</b> time restarts at every new step.</li>"
            "</ul>"
        )

    def params(self) -> EdgeParams:
        return EdgeParams(
            smooth_profile=self.smooth_check.isChecked(),
            window_size=int(self.window_spin.value()),
            min_spacing=int(self.spacing_spin.value()),
            max_edges=int(self.edges_spin.value()),
        )

    def set_status(self, text: str) -> None:
        self.status_label.setText(text)

    def set_folder_text(self, text: str) -> None:
        self.folder_label.setText(text)

    def set_progress(self, done: int, total: int) -> None:
        fraction = done / float(total) if total else 1.0
        self.progress_bar.setValue(int(round(fraction * 1000)))
        self.progress_label.setText(f"{fraction * 100:.1f}% ({done}/{total})")

    def set_busy(self, busy: bool) -> None:
        self.process_btn.setEnabled(not busy)
        self.folder_btn.setEnabled(not busy)
        if busy:
            self.progress_bar.setValue(0)
            self.progress_bar.setVisible(True)

    def set_preview_count(self, count: int) -> None:
        self.preview_slider.blockSignals(True)
        self.preview_slider.setRange(0, max(0, count - 1))
        self.preview_slider.setValue(0)
        self.preview_slider.blockSignals(False)

    def previous_image(self) -> None:
        if self.preview_slider.value() > self.preview_slider.minimum():
            self.preview_slider.setValue(self.preview_slider.value() - 1)

    def next_image(self) -> None:
        if self.preview_slider.value() < self.preview_slider.maximum():
            self.preview_slider.setValue(self.preview_slider.value() + 1)

    def set_preview(self, image: Optional[QtGui.QImage], info: str, edges: str) -> None:
        if image is None:
            self.preview_image.clear()
        else:
            pix = QtGui.QPixmap.fromImage(image)
            self.preview_image.setPixmap(
                pix.scaled(
                    self.preview_image.size(),
                    QtCore.Qt.AspectRatioMode.KeepAspectRatio,
                    QtCore.Qt.TransformationMode.SmoothTransformation,
                )
            )
        self.preview_info.setText(info)
        self.edge_info.setText(edges)


# ---------------------------- Main Controller ---------------------------------


class MainController(QtCore.QObject):
    def __init__(self, app: QtWidgets.QApplication) -> None:
        super().__init__(None)
        self.app = app
        self.cfg = self._load_config()
        self.folder: Optional[Path] = None
        self.sources: List[ImageSource] = []
        self.results: List[TimedResult] = []
        self.run_params: EdgeParams = self.cfg.params

        self._app_version = app.applicationVersion() or APP_VERSION
        self.ctrl = ControlDialog(self.cfg, self._app_version)

        self.ctrl.selectFolderRequested.connect(self.select_folder)
        self.ctrl.processRequested.connect(self.process_folder)
        self.ctrl.paramsChanged.connect(self._on_params_changed)
        self.ctrl.previewIndexChanged.connect(self.update_preview)

        self.ctrl.show()

    # ---------------------------- Config I/O ----------------------------------

    def _config_path(self) -> Path:
        home = Path.home()
        return home / ".edge_timeline_config.json"

    def _load_config(self) -> AppConfig:
        p = self._config_path()
        if p.exists():
            try:
                return AppConfig.from_json(p.read_text(encoding="utf-8"))
            except (OSError, ValueError, TypeError, AttributeError) as exc:
                logger.warning("Ignoring unreadable config %s: %s", p, exc)
        return AppConfig()

    def _save_config(self) -> None:
        p = self._config_path()
        try:
            p.write_text(self.cfg.to_json(), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not save config %s: %s", p, exc)

    # ---------------------------- Event Handlers ------------------------------

    def _on_params_changed(self) -> None:
        self.cfg.params = self.ctrl.params().validated()
        self._save_config()

    # ----------------------------- Core Actions --------------------------------

    def select_folder(self) -> None:
        start = self.cfg.ui.last_folder or str(Path.home())
        chosen = QtWidgets.QFileDialog.getExistingDirectory(
            self.ctrl, "Select image folder", start
        )
        if not chosen:
            return
        self.load_folder(Path(chosen))

    def load_folder(self, folder: Path) -> None:
        self.folder = folder
        try:
            self.sources = scan_folder(folder)
        except OSError as exc:
            logger.warning("Cannot list %s: %s", folder, exc)
            self.sources = []
        self.cfg.ui.last_folder = str(folder)
        self._save_config()

        if self.sources:
            self.ctrl.process_btn.setEnabled(True)
            self.ctrl.set_folder_text(
                f"Folder: {folder} ({len(self.sources)} PNG files)"
            )
            self.ctrl.set_status(f"Found {len(self.sources)} PNG files")
        else:
            self.ctrl.process_btn.setEnabled(False)
            self.ctrl.set_folder_text("No PNG files found in folder")
            self.ctrl.set_status("No PNG files found in selected folder")

    def _on_progress(self, done: int, total: int) -> None:
        self.ctrl.set_progress(done, total)
        self.app.processEvents()

    def process_folder(self) -> None:
        """Analyze every source, aggregate, export and open the preview."""
        if not self.sources or self.folder is None:
            self.ctrl.set_status("Please select a folder first")
            return

        self.run_params = self.ctrl.params().validated()
        self.ctrl.set_busy(True)
        self.ctrl.set_status("Starting batch processing...")
        self.app.processEvents()
        try:
            report = process_batch(
                self.sources, self.run_params, progress=self._on_progress
            )
            self.results = aggregate(report.results)
            if not self.results:
                self.ctrl.set_status("No valid images processed")
                return
            out_path = export_results(
                self.results, self.run_params, str(self.folder), self.folder.parent
            )
            self.setup_preview()
            self.ctrl.set_status(
                f"Processed {len(self.results)} images in {report.elapsed_s:.2f}s"
                f" → {out_path.name}"
            )
        except EdgeTimelineError as exc:
            logger.error("Processing failed: %s", exc)
            self.ctrl.set_status(f"Error: {exc}")
        finally:
            self.ctrl.set_busy(False)
            QtCore.QTimer.singleShot(2000, lambda: self.ctrl.progress_bar.hide())

    def setup_preview(self) -> None:
        self.ctrl.set_preview_count(len(self.results))
        self.update_preview(0)

    def _load_preview_image(self, result: TimedResult) -> Optional[np.ndarray]:
        source = next((s for s in self.sources if s.name == result.source_id), None)
        if source is None:
            return None
        try:
            return decode_image(source.read(), source.name)
        except (OSError, ImageDecodeError) as exc:
            logger.warning("Failed to load image for preview: %s", exc)
            return None

    def update_preview(self, index: int) -> None:
        if not self.results or not 0 <= index < len(self.results):
            return
        result = self.results[index]
        info = describe_result(result, index, len(self.results))
        image = self._load_preview_image(result)
        if image is None:
            self.ctrl.set_preview(None, "Error loading image for preview", "")
            self.ctrl.profile_plot.set_profile(None)
            return

        overlay = render_overlay(image, result, self.cfg.ui.line_thickness)
        self.ctrl.set_preview(bgr_to_qimage(overlay), info, describe_edges(result))
        profile, _ = compute_edges(image, self.run_params, result.source_id)
        self.ctrl.profile_plot.set_profile(profile)
        self.ctrl.profile_plot.set_edges(populated_edges(result))


# ---------------------------------- Main --------------------------------------


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = QtWidgets.QApplication(sys.argv)
    app.setApplicationName("edge_timeline")
    app.setApplicationVersion(APP_VERSION)

    ctrl = MainController(app)
    if len(sys.argv) > 1:
        ctrl.load_folder(Path(sys.argv[1]))
    ret = app.exec()

    ctrl._save_config()
    sys.exit(ret)


if __name__ == "__main__":
    main()
