"""
Homography estimation from four point correspondences.

A planar homography (projective transformation) maps the four corners of
one quadrilateral onto the four corners of another.  With the bottom-right
entry fixed to 1, the remaining eight entries follow from an 8 x 8 linear
system solved by Gaussian elimination with partial pivoting.

Swapping the source and destination corners yields the inverse mapping
directly, so no general matrix inverse is ever needed.
"""

import numpy as np

from src.geometry.errors import DegenerateGeometryError, InvalidInputError
from src.geometry.linear_solver import solve_linear_system
from src.geometry.points import Point2D, as_quad, check_quad_geometry

# Mappings whose homogeneous denominator falls below this are undefined.
DENOMINATOR_EPS = 1e-4

# Returned for undefined mappings; negative, so it fails every raster bounds check.
OUT_OF_RANGE = Point2D(-1.0, -1.0)


def compute_homography(src_pts, dst_pts) -> np.ndarray:
    """Estimate the 3x3 homography taking *src_pts* onto *dst_pts*.

    Each correspondence ``(x, y) -> (x', y')`` contributes two rows::

        [x, y, 1, 0, 0, 0, -x*x', -y*x'] . h = x'
        [0, 0, 0, x, y, 1, -x*y', -y*y'] . h = y'

    Parameters
    ----------
    src_pts, dst_pts : sequence
        Four (x, y) corners each, ordered top-left, top-right, bottom-right,
        bottom-left.

    Returns
    -------
    H : np.ndarray
        3 x 3 homography with ``H[2, 2] == 1`` such that applying *H* to
        ``src_pts[i]`` gives ``dst_pts[i]``.

    Raises
    ------
    InvalidInputError
        If either side is not exactly four finite points.
    DegenerateGeometryError
        If three corners on either side are collinear, or the system is
        singular.
    """
    src = as_quad(src_pts, "src")
    dst = as_quad(dst_pts, "dst")
    check_quad_geometry(src, "src")
    check_quad_geometry(dst, "dst")

    A = np.zeros((8, 8))
    b = np.zeros(8)
    for i in range(4):
        x, y = src[i]
        xp, yp = dst[i]

        A[2 * i] = [x, y, 1, 0, 0, 0, -x * xp, -y * xp]
        b[2 * i] = xp
        A[2 * i + 1] = [0, 0, 0, x, y, 1, -x * yp, -y * yp]
        b[2 * i + 1] = yp

    h = solve_linear_system(A, b)

    return np.array([
        [h[0], h[1], h[2]],
        [h[3], h[4], h[5]],
        [h[6], h[7], 1.0],
    ])


def normalize_homography(H) -> np.ndarray:
    """Return a copy of *H* scaled so that ``H[2, 2] == 1``."""
    H = np.array(H, dtype=float)
    if H.shape != (3, 3):
        raise InvalidInputError(f"homography must be 3 x 3, got shape {H.shape}")
    if abs(H[2, 2]) < np.finfo(float).eps:
        raise DegenerateGeometryError("homography has a zero [2, 2] entry")
    if H[2, 2] != 1.0:
        H /= H[2, 2]
    return H


def apply_homography(H, point) -> Point2D:
    """Map a single (x, y) point through *H* with homogeneous division.

    Returns ``OUT_OF_RANGE`` when the point lies on (or within
    ``DENOMINATOR_EPS`` of) the vanishing line of *H*.
    """
    H = normalize_homography(H)
    x, y = float(point[0]), float(point[1])

    den = H[2, 0] * x + H[2, 1] * y + H[2, 2]
    if abs(den) < DENOMINATOR_EPS:
        return OUT_OF_RANGE

    return Point2D(
        (H[0, 0] * x + H[0, 1] * y + H[0, 2]) / den,
        (H[1, 0] * x + H[1, 1] * y + H[1, 2]) / den,
    )


def apply_homography_array(H, points: np.ndarray) -> np.ndarray:
    """Vectorised :func:`apply_homography` over an N x 2 array of (x, y).

    Rows with a near-zero denominator come back as ``OUT_OF_RANGE``.
    """
    H = normalize_homography(H)
    points = np.asarray(points, dtype=float).reshape(-1, 2)
    x, y = points[:, 0], points[:, 1]

    den = H[2, 0] * x + H[2, 1] * y + H[2, 2]
    undefined = np.abs(den) < DENOMINATOR_EPS
    safe_den = np.where(undefined, 1.0, den)

    mapped = np.empty_like(points)
    mapped[:, 0] = (H[0, 0] * x + H[0, 1] * y + H[0, 2]) / safe_den
    mapped[:, 1] = (H[1, 0] * x + H[1, 1] * y + H[1, 2]) / safe_den
    mapped[undefined] = OUT_OF_RANGE
    return mapped
