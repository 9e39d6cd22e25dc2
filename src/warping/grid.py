"""
Reference grid projected through the forward homography.

A regular lattice in source space is mapped point by point into destination
space so the overlay shows how the warp bends straight source lines.
"""

import math

import numpy as np

from src.geometry.errors import InvalidInputError
from src.geometry.homography import apply_homography_array, compute_homography

DEFAULT_GRID_SPACING = 20


def grid_lines(width: float, height: float, spacing: float = DEFAULT_GRID_SPACING) -> list:
    """Source-space sample points of the horizontal, then vertical grid lines.

    Lines sit at multiples of *spacing*; samples beyond the raster edge are
    dropped and lines left with no samples are omitted.

    Returns
    -------
    list of np.ndarray
        One N x 2 array of (x, y) points per line.
    """
    if width <= 0 or height <= 0:
        raise InvalidInputError(f"grid extent must be positive, got {width} x {height}")
    if spacing <= 0:
        raise InvalidInputError(f"grid spacing must be positive, got {spacing}")

    num_x = math.ceil(width / spacing)
    num_y = math.ceil(height / spacing)
    xs = [j * spacing for j in range(num_x + 1)]
    ys = [i * spacing for i in range(num_y + 1)]

    lines = []
    for y in ys:
        pts = [(x, y) for x in xs if x <= width and y <= height]
        if pts:
            lines.append(np.array(pts, dtype=float))
    for x in xs:
        pts = [(x, y) for y in ys if x <= width and y <= height]
        if pts:
            lines.append(np.array(pts, dtype=float))
    return lines


def project_grid(width: float, height: float, src_pts, dst_pts,
                 spacing: float = DEFAULT_GRID_SPACING) -> list:
    """Project the source grid into destination space.

    Parameters
    ----------
    width, height : float
        Source raster dimensions.
    src_pts, dst_pts : sequence
        Four corners each; the forward homography is built from
        ``(src_pts, dst_pts)`` directly, not inverted.
    spacing : float
        Grid pitch in source units.

    Returns
    -------
    list of np.ndarray
        Destination-space polylines (N x 2), horizontal lines first.
    """
    H = compute_homography(src_pts, dst_pts)
    return [apply_homography_array(H, line) for line in grid_lines(width, height, spacing)]
