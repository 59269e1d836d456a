from __future__ import annotations

from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
from matplotlib.cm import ScalarMappable  # noqa: E402
from matplotlib.colors import LightSource, ListedColormap, Normalize  # noqa: E402

from relief.models.grid import GridField, GridHeader  # noqa: E402
from relief.models.heights import HeightField  # noqa: E402
from relief.viz.contours import (  # noqa: E402
    BAND_STOPS,
    BAND_THRESHOLDS,
    CONTOUR_LINE_COLOR,
    NULL_COLOR,
    band_colors,
    contour_levels,
)


def _band_cmap(samples: int = 256) -> ListedColormap:
    t = np.linspace(0.0, 1.0, samples)
    stops = np.asarray(BAND_STOPS, dtype=float)
    rgb = np.stack([np.interp(t, BAND_THRESHOLDS, stops[:, c]) for c in range(3)], axis=1)
    return ListedColormap(rgb, name="relief_bands")


def render_relief_plane(
    *,
    header: GridHeader,
    field: GridField,
    heights: HeightField,
    out_path: Path,
    title: str = "Relief",
    with_contours: bool = True,
    azdeg: float = 315.0,
    altdeg: float = 45.0,
) -> Path:
    """Top view of the grid: band fill, hillshade, contour lines and a height colorbar."""
    out_path = Path(out_path).expanduser().resolve()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    if field.values.shape != heights.elevations.shape:
        raise ValueError(f"field shape {field.values.shape} does not match heights {heights.elevations.shape}")

    rgb = band_colors(field.values, heights.min_valid, heights.max_valid, 0.0, 0.0, valid=heights.valid).astype(float)
    ls = LightSource(azdeg=azdeg, altdeg=altdeg)
    shaded = ls.shade_rgb(
        rgb,
        elevation=np.asarray(heights.elevations, dtype=float),
        blend_mode="soft",
        dx=header.x_step,
        dy=header.y_step,
    )
    shaded[~heights.valid] = NULL_COLOR

    # row 0 is the northern edge (y_max)
    extent = (header.x_min, header.x_max, header.y_min, header.y_max)
    fig, ax = plt.subplots(figsize=(6.5, 4.5))
    ax.imshow(shaded, origin="upper", extent=extent, aspect="equal", interpolation="bilinear")

    if with_contours:
        levels = contour_levels(heights.min_valid, heights.max_valid, heights.contour_interval)
        if len(levels) >= 2:
            xs = header.x_min + np.arange(header.columns) * header.x_step
            ys = header.y_max - np.arange(header.rows) * header.y_step
            masked = np.ma.masked_where(~heights.valid, field.values)
            ax.contour(xs, ys, masked, levels=levels, colors=[CONTOUR_LINE_COLOR], linewidths=0.5)

    sm = ScalarMappable(cmap=_band_cmap(), norm=Normalize(heights.min_valid, heights.max_valid))
    cbar = fig.colorbar(sm, ax=ax)
    cbar.set_label("height")
    ax.set_title(title)
    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    fig.text(
        0.01,
        0.01,
        f"min={heights.min_valid:g}  max={heights.max_valid:g}  range={heights.height_range:g}  null={heights.null_count}",
        fontsize=8,
    )
    fig.tight_layout()
    fig.savefig(out_path, dpi=160, bbox_inches="tight")
    plt.close(fig)
    return out_path
