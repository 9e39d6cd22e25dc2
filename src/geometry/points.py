"""
Point and corner-quadrilateral helpers.

Corner sequences are always ordered top-left, top-right, bottom-right,
bottom-left; source and destination quads must use the same order because
the correspondence is never inferred.
"""

from itertools import combinations
from typing import NamedTuple

import numpy as np

from src.geometry.errors import DegenerateGeometryError, InvalidInputError

# Triangle areas below this fraction of the squared quad extent count as zero.
COLLINEAR_TOLERANCE = 1e-10


class Point2D(NamedTuple):
    x: float
    y: float


def as_quad(points, name: str = "points") -> np.ndarray:
    """Convert four (x, y) pairs into a 4 x 2 float array.

    Parameters
    ----------
    points : sequence
        Four ``(x, y)`` pairs, ``Point2D`` instances or a 4 x 2 array.
    name : str
        Label used in error messages.

    Returns
    -------
    np.ndarray
        4 x 2 float64 array (a new array; the input is never aliased).

    Raises
    ------
    InvalidInputError
        If the input is not exactly four finite 2-D points.
    """
    try:
        quad = np.array(points, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{name}: cannot interpret as 2-D points") from exc

    if quad.shape != (4, 2):
        raise InvalidInputError(
            f"{name}: expected exactly 4 (x, y) points, got shape {quad.shape}"
        )
    if not np.all(np.isfinite(quad)):
        raise InvalidInputError(f"{name}: coordinates must be finite")
    return quad


def check_quad_geometry(quad: np.ndarray, name: str = "points") -> None:
    """Raise DegenerateGeometryError if any three corners are collinear.

    Duplicate corners and zero-area quads are special cases of this.
    """
    extent = np.max(quad.max(axis=0) - quad.min(axis=0))
    if extent == 0:
        raise DegenerateGeometryError(f"{name}: all four corners coincide")

    tol = COLLINEAR_TOLERANCE * extent * extent
    for a, b, c in combinations(range(4), 3):
        (ax, ay), (bx, by), (cx, cy) = quad[a], quad[b], quad[c]
        cross = (bx - ax) * (cy - ay) - (by - ay) * (cx - ax)
        if abs(cross) <= tol:
            raise DegenerateGeometryError(
                f"{name}: corners {a}, {b} and {c} are collinear"
            )
