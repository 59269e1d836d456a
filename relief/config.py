from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Tuple

from relief.parser.grid_parser import GRID_MARKER


ViewMode = Literal["3d", "top"]
VIEW_MODES = ("3d", "top")

HEIGHT_SCALE_MIN = 0.05
HEIGHT_SCALE_MAX = 1.0


def height_scale_bounds(height_scale_factor: float) -> Tuple[float, float]:
    """Slider range for the height scale, widened to include the active factor."""
    return min(HEIGHT_SCALE_MIN, height_scale_factor), max(HEIGHT_SCALE_MAX, height_scale_factor)


@dataclass(frozen=True)
class ViewerSettings:
    height_scale_factor: float = 0.3
    view_mode: ViewMode = "3d"
    base_contour_width: float = 0.0015   # fraction of the height range at the reference distance
    contour_bands: int = 20
    base_offset: float = 0.0
    grid_marker: str = GRID_MARKER

    def validate(self) -> None:
        if not (self.height_scale_factor > 0.0):
            raise ValueError(f"height_scale_factor must be > 0, got {self.height_scale_factor!r}")
        if self.view_mode not in VIEW_MODES:
            raise ValueError(f"view_mode must be one of {VIEW_MODES}, got {self.view_mode!r}")
        if self.base_contour_width < 0.0:
            raise ValueError("base_contour_width must be >= 0")
        if int(self.contour_bands) < 1:
            raise ValueError("contour_bands must be >= 1")
        if not self.grid_marker.strip():
            raise ValueError("grid_marker must not be empty")

    def with_changes(self, **changes: Any) -> "ViewerSettings":
        out = replace(self, **changes)
        out.validate()
        return out

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ViewerSettings":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown viewer setting(s): {', '.join(unknown)}")
        out = cls(**dict(data))
        out.validate()
        return out


def load_settings(path: str | Path) -> ViewerSettings:
    p = Path(path).expanduser().resolve()
    if not p.exists():
        return ViewerSettings()
    data = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Settings file must contain a JSON object: {p}")
    return ViewerSettings.from_mapping(data)


def save_settings(settings: ViewerSettings, path: str | Path) -> Path:
    settings.validate()
    p = Path(path).expanduser().resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(settings.to_dict(), indent=2, sort_keys=True), encoding="utf-8")
    return p
