"""
Containment test for destination pixels against the target quadrilateral.

Two policies are available:

``bbox`` (default)
    Axis-aligned bounding box of the four corners, inclusive on every side.
    Pixels inside the box but outside a rotated or non-convex quad still pass;
    they are normally rejected later because they map outside the source
    raster.
``polygon``
    True containment via the winding number, with points on an edge counted
    as inside.  Works for convex, concave and self-intersecting quads.
"""

import numpy as np

from src.geometry.errors import InvalidInputError
from src.geometry.points import as_quad

CONTAINMENT_MODES = ("bbox", "polygon")


def quad_bounds(quad) -> tuple:
    """Return ``(min_x, min_y, max_x, max_y)`` of the four corners."""
    quad = as_quad(quad, "quad")
    min_x, min_y = quad.min(axis=0)
    max_x, max_y = quad.max(axis=0)
    return float(min_x), float(min_y), float(max_x), float(max_y)


def check_containment_mode(mode: str) -> None:
    """Raise InvalidInputError unless *mode* is one of CONTAINMENT_MODES."""
    if mode not in CONTAINMENT_MODES:
        raise InvalidInputError(
            f"unknown containment mode {mode!r}, expected one of {CONTAINMENT_MODES}"
        )


def _inside_bbox(px: np.ndarray, py: np.ndarray, quad: np.ndarray) -> np.ndarray:
    min_x, min_y = quad.min(axis=0)
    max_x, max_y = quad.max(axis=0)
    return (px >= min_x) & (px <= max_x) & (py >= min_y) & (py <= max_y)


def _inside_polygon(px: np.ndarray, py: np.ndarray, quad: np.ndarray) -> np.ndarray:
    winding = np.zeros(px.shape, dtype=int)
    on_edge = np.zeros(px.shape, dtype=bool)

    for k in range(4):
        x0, y0 = quad[k]
        x1, y1 = quad[(k + 1) % 4]

        # > 0 when the point is left of the directed edge
        cross = (x1 - x0) * (py - y0) - (px - x0) * (y1 - y0)

        winding += (y0 <= py) & (y1 > py) & (cross > 0)
        winding -= (y0 > py) & (y1 <= py) & (cross < 0)

        edge_len = np.hypot(x1 - x0, y1 - y0)
        on_edge |= (
            (np.abs(cross) <= 1e-9 * max(edge_len, 1.0)) &
            (px >= min(x0, x1)) & (px <= max(x0, x1)) &
            (py >= min(y0, y1)) & (py <= max(y0, y1))
        )

    return (winding != 0) | on_edge


def point_in_quadrilateral(x: float, y: float, quad, mode: str = "bbox") -> bool:
    """Whether the point (x, y) should be rendered for the given quad.

    Parameters
    ----------
    x, y : float
        Destination-space coordinates.
    quad : sequence
        Four (x, y) corners in any winding order.
    mode : str
        ``"bbox"`` or ``"polygon"``; see the module docstring.
    """
    check_containment_mode(mode)
    quad = as_quad(quad, "quad")
    px = np.array([float(x)])
    py = np.array([float(y)])
    if mode == "bbox":
        return bool(_inside_bbox(px, py, quad)[0])
    return bool(_inside_polygon(px, py, quad)[0])


def quadrilateral_mask(width: int, height: int, quad, mode: str = "bbox") -> np.ndarray:
    """Evaluate the containment test for every pixel of a canvas.

    Parameters
    ----------
    width, height : int
        Canvas size in pixels.
    quad : sequence
        Four (x, y) corners.
    mode : str
        ``"bbox"`` or ``"polygon"``.

    Returns
    -------
    np.ndarray
        height x width boolean mask; ``mask[y, x]`` is True for pixels to render.
    """
    check_containment_mode(mode)
    quad = as_quad(quad, "quad")
    ys, xs = np.mgrid[0:height, 0:width]
    if mode == "bbox":
        return _inside_bbox(xs, ys, quad)
    return _inside_polygon(xs, ys, quad)
