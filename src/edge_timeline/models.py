"""Dataclasses describing configuration and analysis results for edge_timeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from datetime import datetime
import json
from typing import Dict, Optional, Tuple

from .utils import clamp

EdgeSet = Tuple[Optional[int], ...]

MODIFIED_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class EdgeParams:
    """Smoothing and edge-picking settings applied uniformly to a whole batch."""

    smooth_profile: bool = True
    window_size: int = 5
    min_spacing: int = 10
    max_edges: int = 4

    def validated(self) -> "EdgeParams":
        """Return a copy with every value raised to its lower bound.

        Only the lower bounds are enforced here; upper limits belong to the
        input widgets.
        """
        return replace(
            self,
            smooth_profile=bool(self.smooth_profile),
            window_size=max(1, int(self.window_size)),
            min_spacing=max(0, int(self.min_spacing)),
            max_edges=max(1, int(self.max_edges)),
        )


@dataclass
class UIState:
    """User-interface level preferences for the front-end."""

    line_thickness: int = 2
    last_folder: str = ""


@dataclass(frozen=True)
class AnalysisResult:
    """Edges and filename-encoded identifiers of one processed image."""

    step: int
    image_no: int
    speed: int
    bucket: int
    captured_at_ms: int  # file modification time
    edges: EdgeSet  # exactly max_edges slots, None = absent
    width: int
    height: int
    source_id: str

    @property
    def modified_string(self) -> str:
        return datetime.fromtimestamp(self.captured_at_ms / 1000.0).strftime(
            MODIFIED_FORMAT
        )


@dataclass(frozen=True)
class TimedResult(AnalysisResult):
    """An :class:`AnalysisResult` placed on the run's timeline."""

    cumulative_s: int
    incremental_s: int

    @classmethod
    def from_result(
        cls, result: AnalysisResult, cumulative_s: int, incremental_s: int
    ) -> "TimedResult":
        base = {f.name: getattr(result, f.name) for f in fields(AnalysisResult)}
        return cls(**base, cumulative_s=cumulative_s, incremental_s=incremental_s)


@dataclass
class AppConfig:
    """Persisted configuration for the application."""

    params: EdgeParams = field(default_factory=EdgeParams)
    ui: UIState = field(default_factory=UIState)

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=2)

    @staticmethod
    def from_json(text: str) -> "AppConfig":
        data: Dict = json.loads(text)
        p = data.get("params", {})
        u = data.get("ui", {})
        return AppConfig(
            params=EdgeParams(
                smooth_profile=bool(p.get("smooth_profile", True)),
                window_size=int(p.get("window_size", 5)),
                min_spacing=int(p.get("min_spacing", 10)),
                max_edges=int(p.get("max_edges", 4)),
            ).validated(),
            ui=UIState(
                line_thickness=int(clamp(int(u.get("line_thickness", 2)), 1, 12)),
                last_folder=str(u.get("last_folder", "")),
            ),
        )


__all__ = [
    "EdgeSet",
    "EdgeParams",
    "UIState",
    "AnalysisResult",
    "TimedResult",
    "AppConfig",
]
