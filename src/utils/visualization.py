"""
Visualization utilities for the quadrilateral warp pipeline.

All functions save figures to disk rather than displaying them interactively,
making the module suitable for headless execution.
"""

import os
import numpy as np
import matplotlib
matplotlib.use("Agg")          # non-interactive backend
import matplotlib.pyplot as plt

from src.warping.raster import RasterImage

GRID_COLOR = (0, 150, 255)
GRID_ALPHA = 0.5
GRID_LINEWIDTH = 1.0


def draw_grid(ax, polylines: list, color=GRID_COLOR, alpha: float = GRID_ALPHA,
              linewidth: float = GRID_LINEWIDTH) -> None:
    """Draw projected grid polylines onto a matplotlib axis.

    *color* is an (r, g, b) triple in 0..255.
    """
    rgb = tuple(c / 255.0 for c in color)
    for line in polylines:
        if len(line) == 0:
            continue
        ax.plot(line[:, 0], line[:, 1], "-", color=rgb, alpha=alpha,
                linewidth=linewidth)


def draw_handles(ax, corners) -> None:
    """Mark the four destination corners, numbered in TL, TR, BR, BL order."""
    corners = np.asarray(corners, dtype=float)
    ax.plot(corners[:, 0], corners[:, 1], "o", markersize=8,
            markerfacecolor="white", markeredgecolor="black")
    for idx, (x, y) in enumerate(corners):
        ax.text(x + 6, y - 6, str(idx), color="yellow", fontsize=8, weight="bold",
                bbox=dict(boxstyle="round,pad=0.3", facecolor="black", alpha=0.5))


def save_warp_overview(source: RasterImage, warped: RasterImage, corners,
                       polylines: list, name: str, out_dir: str,
                       grid_style: dict = None) -> str:
    """Save a side-by-side figure of the source image and the warped canvas.

    The warped panel carries the projected grid (if any) and the corner
    handles.  Returns the path of the written file.
    """
    style = grid_style or {}
    fig, axes = plt.subplots(1, 2, figsize=(14, 6))

    axes[0].imshow(source.pixels)
    axes[0].set_title(f"{name} – source ({source.width}×{source.height})")
    axes[0].axis("off")

    axes[1].imshow(warped.pixels)
    draw_grid(axes[1], polylines,
              color=style.get("color", GRID_COLOR),
              alpha=style.get("alpha", GRID_ALPHA),
              linewidth=style.get("linewidth", GRID_LINEWIDTH))
    draw_handles(axes[1], corners)
    axes[1].set_xlim(0, warped.width)
    axes[1].set_ylim(warped.height, 0)
    axes[1].set_title(f"Warped canvas ({warped.width}×{warped.height}, "
                      f"{len(polylines)} grid lines)")
    axes[1].axis("off")

    plt.tight_layout()
    path = os.path.join(out_dir, name, "overview.jpg")
    plt.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return path
